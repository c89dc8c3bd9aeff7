from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Float, Text, Index
from sqlalchemy.orm import relationship
from tripcrew.core.database import Base
from tripcrew.models.trips.trip_model import new_id
from tripcrew.utils.clock import utcnow


class TripDay(Base):
    __tablename__ = "trip_days"

    id = Column(String(32), primary_key=True, default=new_id)
    trip_id = Column(String(32), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    title = Column(String, nullable=True)
    origin = Column(String, nullable=True)
    destination = Column(String, nullable=True)
    distance_km = Column(Float, nullable=True)
    eta = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    trip = relationship("Trip", back_populates="days")

    __table_args__ = (
        Index("ix_trip_days_trip_id", "trip_id"),
    )
