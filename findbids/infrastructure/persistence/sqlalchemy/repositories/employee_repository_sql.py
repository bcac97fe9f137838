from typing import List, Optional
from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models import Employee
from .....application.ports.employee_repo import EmployeeRepository, EmployeeDto


class SqlEmployeeRepository(EmployeeRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, e: Employee) -> EmployeeDto:
        return EmployeeDto(
            id=e.id,
            organization_id=e.organization_id,
            email=e.email,
            role=e.role,
            status=e.status or "pending",
            created_at=e.created_at,
        )

    def list_for_organization(self, organization_id: int) -> List[EmployeeDto]:
        rows = self.session.exec(
            select(Employee).where(Employee.organization_id == organization_id).order_by(Employee.id)
        ).all()
        return [self._to_dto(e) for e in rows]

    def get(self, employee_id: int) -> Optional[EmployeeDto]:
        e = self.session.get(Employee, employee_id)
        return self._to_dto(e) if e else None

    def get_by_email(self, organization_id: int, email: str) -> Optional[EmployeeDto]:
        e = self.session.exec(
            select(Employee)
            .where(Employee.organization_id == organization_id)
            .where(func.lower(Employee.email) == email.strip().lower())
        ).first()
        return self._to_dto(e) if e else None

    def create(self, organization_id: int, email: str, role: str) -> EmployeeDto:
        e = Employee(organization_id=organization_id, email=email.strip(), role=role.strip())
        self.session.add(e)
        self.session.commit()
        self.session.refresh(e)
        return self._to_dto(e)

    def delete(self, employee_id: int) -> None:
        e = self.session.get(Employee, employee_id)
        if not e:
            return
        self.session.delete(e)
        self.session.commit()
