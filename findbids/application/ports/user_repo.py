from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Protocol
from datetime import datetime


@dataclass
class UserDto:
    id: int
    email: str
    company_name: str
    status: str
    created_at: datetime
    logo: Optional[str] = None
    contact: Optional[str] = None
    telephone: Optional[str] = None
    trade: Optional[str] = None
    certification_name: Optional[str] = None
    cell: Optional[str] = None
    business_email: Optional[str] = None
    is_minority_owned: bool = False
    minority_group: Optional[str] = None
    onboarding_complete: bool = False
    language: str = "en"
    password_hash: str = field(default="", repr=False)


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        ...

    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def create(self, email: str, password_hash: str, company_name: str) -> UserDto:
        ...

    def update_fields(self, user_id: int, fields: Dict[str, Any]) -> Optional[UserDto]:
        ...

    def delete(self, user_id: int) -> None:
        ...
