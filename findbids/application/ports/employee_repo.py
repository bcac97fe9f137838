from dataclasses import dataclass
from typing import List, Optional
from datetime import datetime


@dataclass
class EmployeeDto:
    id: int
    organization_id: int
    email: str
    role: str
    status: str
    created_at: datetime


class EmployeeRepository:
    def list_for_organization(self, organization_id: int) -> List[EmployeeDto]:
        ...

    def get(self, employee_id: int) -> Optional[EmployeeDto]:
        ...

    def get_by_email(self, organization_id: int, email: str) -> Optional[EmployeeDto]:
        ...

    def create(self, organization_id: int, email: str, role: str) -> EmployeeDto:
        ...

    def delete(self, employee_id: int) -> None:
        ...
