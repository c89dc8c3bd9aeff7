from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ChecklistCreate(BaseModel):
    label: Optional[str] = None


class ChecklistUpdate(BaseModel):
    label: Optional[str] = None


class ChecklistResponse(BaseModel):
    id: str
    trip_id: str
    label: str
    done: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
