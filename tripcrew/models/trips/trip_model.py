from sqlalchemy import Column, String, Date, DateTime, Text
from sqlalchemy.orm import relationship
from tripcrew.core.database import Base
from tripcrew.utils.clock import utcnow
import uuid


def new_id() -> str:
    return uuid.uuid4().hex


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="idea")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # The owner is implicitly an administrator and never has a membership row
    owner_id = Column(String, nullable=False, index=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    members = relationship("TripMember", back_populates="trip", cascade="all, delete", passive_deletes=True)
    invite_codes = relationship("TripInviteCode", back_populates="trip", cascade="all, delete", passive_deletes=True)
    days = relationship(
        "TripDay", back_populates="trip", cascade="all, delete-orphan",
        passive_deletes=True, order_by="TripDay.position"
    )
    checklist = relationship(
        "ChecklistItem", back_populates="trip", cascade="all, delete-orphan",
        passive_deletes=True, order_by="ChecklistItem.created_at"
    )

    def __repr__(self):
        return f"<Trip(id={self.id}, owner_id={self.owner_id}, title={self.title!r})>"
