from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ...exceptions import ForbiddenError, NotFoundError
from ...utils import utcnow
from ..ports.rfp_repo import RfpRepository, RfpDto
from ..ports.user_repo import UserRepository, UserDto


@dataclass
class RfpView:
    rfp: RfpDto
    organization: Optional[UserDto] = None


@dataclass
class RfpService:
    repo: RfpRepository
    user_repo: UserRepository

    def _with_organizations(self, rfps: List[RfpDto]) -> List[RfpView]:
        owners: Dict[int, Optional[UserDto]] = {}
        for rfp in rfps:
            if rfp.organization_id is not None and rfp.organization_id not in owners:
                owners[rfp.organization_id] = self.user_repo.get_by_id(rfp.organization_id)
        return [RfpView(rfp, owners.get(rfp.organization_id)) for rfp in rfps]

    def _require_owner(self, user: UserDto, rfp_id: int) -> RfpDto:
        rfp = self.repo.get(rfp_id)
        if not rfp:
            raise NotFoundError("RFP not found")
        if rfp.organization_id != user.id:
            raise ForbiddenError("Unauthorized")
        return rfp

    def list(self, offset: int = 0, limit: int = 20) -> Tuple[List[RfpView], int]:
        rfps, total = self.repo.list_page(offset, limit)
        return self._with_organizations(rfps), total

    def list_featured(self) -> List[RfpView]:
        return self._with_organizations(self.repo.list_featured())

    def get(self, rfp_id: int) -> RfpView:
        rfp = self.repo.get(rfp_id)
        if not rfp:
            raise NotFoundError("RFP not found")
        return self._with_organizations([rfp])[0]

    def create(self, user: UserDto, data: Dict[str, Any]) -> RfpDto:
        fields = dict(data)
        if fields.get("featured"):
            fields["featured_at"] = utcnow()
        return self.repo.create(user.id, fields)

    def update(self, user: UserDto, rfp_id: int, data: Dict[str, Any]) -> RfpDto:
        rfp = self._require_owner(user, rfp_id)
        fields = dict(data)
        fields.pop("featured_at", None)
        if fields.get("featured") and not rfp.featured:
            fields["featured_at"] = utcnow()
        return self.repo.update(rfp_id, fields)

    def delete(self, user: UserDto, rfp_id: int) -> None:
        self._require_owner(user, rfp_id)
        self.repo.delete(rfp_id)
