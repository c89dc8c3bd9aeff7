from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime

from tripcrew.models.trips.trip_member import EffectiveRole
from tripcrew.schemas.trip.checklist import ChecklistResponse
from tripcrew.schemas.trip.trip_member import TripMemberOut
from tripcrew.schemas.itineraries.day import DayResponse


class TripCreate(BaseModel):
    # title is checked by the service so a missing one reports TITLE_REQUIRED
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class TripUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class TripResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    owner_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TripSummary(TripResponse):
    day_count: int = 0
    checklist_count: int = 0


class TripDetailResponse(TripResponse):
    days: List[DayResponse] = []
    checklist: List[ChecklistResponse] = []
    members: List[TripMemberOut] = []
    current_role: EffectiveRole
    can_edit: bool
