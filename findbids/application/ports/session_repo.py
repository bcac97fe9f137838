from dataclasses import dataclass
from typing import Optional
from datetime import datetime


@dataclass
class SessionDto:
    id: str
    user_id: int
    expires_at: datetime
    created_at: datetime


class SessionRepository:
    def create(self, user_id: int, expires_at: datetime, ip_address: Optional[str], user_agent: Optional[str]) -> SessionDto:
        ...

    def get(self, session_id: str) -> Optional[SessionDto]:
        ...

    def delete(self, session_id: str) -> None:
        ...

    def delete_for_user(self, user_id: int) -> int:
        ...
