from dataclasses import dataclass
from typing import List

from ...exceptions import ForbiddenError, NotFoundError, ValidationError
from ..ports.employee_repo import EmployeeRepository, EmployeeDto
from ..ports.user_repo import UserDto


@dataclass
class EmployeeService:
    repo: EmployeeRepository

    def list(self, user: UserDto) -> List[EmployeeDto]:
        return self.repo.list_for_organization(user.id)

    def add(self, user: UserDto, email: str, role: str) -> EmployeeDto:
        if self.repo.get_by_email(user.id, email):
            raise ValidationError("Employee already added")
        return self.repo.create(user.id, email, role)

    def remove(self, user: UserDto, employee_id: int) -> None:
        employee = self.repo.get(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if employee.organization_id != user.id:
            raise ForbiddenError("Unauthorized")
        self.repo.delete(employee_id)
