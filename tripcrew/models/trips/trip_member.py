from sqlalchemy import Column, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from tripcrew.core.database import Base
from tripcrew.models.trips.trip_model import new_id
from tripcrew.utils.clock import utcnow
import enum
import sqlalchemy as sa


class TripRole(str, enum.Enum):
    ADMIN = "admin"
    VIEWER = "viewer"


class EffectiveRole(str, enum.Enum):
    """Role actually governing a principal's access; derived, never stored."""
    ADMIN = "admin"
    VIEWER = "viewer"
    NONE = "none"


triprole_enum = sa.Enum(
    TripRole,
    name="triprole",
    values_callable=lambda obj: [e.value for e in obj]  # store "admin" / "viewer"
)


class TripMember(Base):
    __tablename__ = "trip_members"

    id = Column(String(32), primary_key=True, default=new_id)

    trip_id = Column(String(32), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, nullable=False, index=True)

    role = Column(triprole_enum, nullable=False)

    joined_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # At most one membership per principal per trip
    __table_args__ = (
        UniqueConstraint('trip_id', 'user_id', name='uq_trip_user'),
    )

    trip = relationship("Trip", back_populates="members")

    def __repr__(self):
        return f"<TripMember(trip_id={self.trip_id}, user_id={self.user_id}, role={self.role})>"
