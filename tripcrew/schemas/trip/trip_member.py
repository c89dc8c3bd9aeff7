from pydantic import BaseModel
from datetime import datetime
from typing import List

from tripcrew.models.trips.trip_member import TripRole, EffectiveRole


class TripMemberOut(BaseModel):
    id: str
    trip_id: str
    user_id: str
    role: TripRole
    joined_at: datetime

    model_config = {
        "from_attributes": True
    }


class TripMemberResponse(BaseModel):
    trip_id: str
    owner_id: str
    current_role: EffectiveRole
    members: List[TripMemberOut]
