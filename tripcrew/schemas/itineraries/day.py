from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class DayCreate(BaseModel):
    title: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    distance_km: Optional[float] = None
    eta: Optional[str] = None
    notes: Optional[str] = None


class DayUpdate(BaseModel):
    notes: Optional[str] = None


class DayResponse(BaseModel):
    id: str
    trip_id: str
    position: int
    title: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    distance_km: Optional[float] = None
    eta: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = {
        "from_attributes": True
    }
