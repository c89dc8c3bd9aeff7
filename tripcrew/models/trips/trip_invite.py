from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from tripcrew.core.database import Base
from tripcrew.models.trips.trip_model import new_id
from tripcrew.models.trips.trip_member import triprole_enum
from tripcrew.utils.clock import utcnow
import enum


class InviteUsage(str, enum.Enum):
    SINGLE = "single"
    UNLIMITED = "unlimited"


class InviteState(str, enum.Enum):
    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    EXPIRED = "expired"


class TripInviteCode(Base):
    __tablename__ = "trip_invite_codes"

    id = Column(String(32), primary_key=True, default=new_id)
    trip_id = Column(String(32), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    code = Column(String, unique=True, index=True, nullable=False)
    role = Column(triprole_enum, nullable=False)

    max_uses = Column(Integer, nullable=True)  # NULL = unlimited
    used_count = Column(Integer, nullable=False, default=0)
    expires_at = Column(DateTime, nullable=True)

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("max_uses IS NULL OR max_uses >= 1", name="ck_invite_max_uses_positive"),
        CheckConstraint("used_count >= 0", name="ck_invite_used_count_non_negative"),
        CheckConstraint("max_uses IS NULL OR used_count <= max_uses", name="ck_invite_used_within_cap"),
    )

    trip = relationship("Trip", back_populates="invite_codes")

    @property
    def usage(self) -> InviteUsage:
        return InviteUsage.UNLIMITED if self.max_uses is None else InviteUsage.SINGLE

    def state_at(self, now) -> InviteState:
        # Expiry outranks exhaustion, matching what redemption reports
        if self.expires_at is not None and self.expires_at <= now:
            return InviteState.EXPIRED
        if self.max_uses is not None and self.used_count >= self.max_uses:
            return InviteState.EXHAUSTED
        return InviteState.ACTIVE

    def __repr__(self):
        return f"<TripInviteCode(code={self.code}, uses={self.used_count}/{self.max_uses or '∞'})>"
