from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime


@dataclass
class RfpDto:
    id: int
    title: str
    description: str
    walkthrough_date: datetime
    rfi_date: datetime
    deadline: datetime
    job_location: str
    organization_id: Optional[int]
    status: str = "open"
    budget_min: Optional[int] = None
    certification_goals: Optional[str] = None
    portfolio_link: Optional[str] = None
    featured: bool = False
    featured_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class RfpRepository:
    def get(self, rfp_id: int) -> Optional[RfpDto]:
        ...

    def list_page(self, offset: int, limit: int) -> Tuple[List[RfpDto], int]:
        ...

    def list_featured(self) -> List[RfpDto]:
        ...

    def list_for_owner(self, owner_id: int, featured_only: bool = False) -> List[RfpDto]:
        ...

    def create(self, owner_id: int, fields: Dict[str, Any]) -> RfpDto:
        ...

    def update(self, rfp_id: int, fields: Dict[str, Any]) -> Optional[RfpDto]:
        ...

    def delete(self, rfp_id: int) -> None:
        """Remove the RFP together with its RFIs, conversations and analytics."""
        ...
