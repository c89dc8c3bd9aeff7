from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from tripcrew.models.trips.trip_invite import InviteUsage, InviteState
from tripcrew.models.trips.trip_member import TripRole


# When an administrator creates a shareable code
class TripInviteCreate(BaseModel):
    # role and type are validated by the registry (INVALID_ROLE / INVALID_INVITE_TYPE)
    role: Optional[str] = None
    type: str = InviteUsage.UNLIMITED.value
    expires_at: Optional[datetime] = None


class TripInviteResponse(BaseModel):
    id: str
    trip_id: str
    code: str
    role: TripRole
    type: InviteUsage
    max_uses: Optional[int] = None
    used_count: int
    expires_at: Optional[datetime] = None
    state: InviteState
    created_at: datetime


# Redeeming a code
class TripJoinRequest(BaseModel):
    code: Optional[str] = None
