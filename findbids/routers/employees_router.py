from typing import List
from fastapi import APIRouter, Depends

from ..application.ports.employee_repo import EmployeeDto
from ..application.ports.user_repo import UserDto
from ..application.services.employee_service import EmployeeService
from ..dependencies import get_current_user, get_employee_service
from ..schemas import EmployeeCreate, EmployeeResponse, MessageResponse

router = APIRouter(prefix="/api/employees", tags=["Employees"])


def employee_response(employee: EmployeeDto) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        organization_id=employee.organization_id,
        email=employee.email,
        role=employee.role,
        status=employee.status,
        created_at=employee.created_at,
    )


@router.get("", response_model=List[EmployeeResponse])
def list_employees(
    current_user: UserDto = Depends(get_current_user),
    employee_service: EmployeeService = Depends(get_employee_service),
):
    return [employee_response(e) for e in employee_service.list(current_user)]


@router.post("", response_model=EmployeeResponse, status_code=201)
def add_employee(
    data: EmployeeCreate,
    current_user: UserDto = Depends(get_current_user),
    employee_service: EmployeeService = Depends(get_employee_service),
):
    return employee_response(employee_service.add(current_user, data.email, data.role))


@router.delete("/{employee_id}", response_model=MessageResponse)
def remove_employee(
    employee_id: int,
    current_user: UserDto = Depends(get_current_user),
    employee_service: EmployeeService = Depends(get_employee_service),
):
    employee_service.remove(current_user, employee_id)
    return MessageResponse(message="Employee removed")
