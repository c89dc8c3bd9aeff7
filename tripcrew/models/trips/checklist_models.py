from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Index
from sqlalchemy.orm import relationship
from tripcrew.core.database import Base
from tripcrew.models.trips.trip_model import new_id
from tripcrew.utils.clock import utcnow


class ChecklistItem(Base):
    __tablename__ = "trip_checklist_items"

    id = Column(String(32), primary_key=True, default=new_id)
    trip_id = Column(String(32), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    label = Column(String, nullable=False)
    done = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    trip = relationship("Trip", back_populates="checklist")

    __table_args__ = (
        Index("ix_trip_checklist_items_trip_id", "trip_id"),
    )
