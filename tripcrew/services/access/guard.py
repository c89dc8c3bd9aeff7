"""Authorization guard for trip-scoped actions.

``authorize`` is the pure decision; ``TripGuard`` loads what the decision
needs and turns a refusal into ``TripNotFound``. Every refusal, whether the
trip is missing, invisible to the principal or visible but read-only, leaves
the caller with the same 404 so trip existence is never disclosed.
"""

import enum
from dataclasses import dataclass
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, exists
from typing import Iterable, List, Optional

from tripcrew.core.errors import TripNotFound, TripAccessDenied
from tripcrew.core.logger import logger
from tripcrew.models.trips.trip_model import Trip
from tripcrew.models.trips.trip_member import TripMember, EffectiveRole
from tripcrew.services.access.membership_store import MembershipStore
from tripcrew.services.access.role_resolver import resolve_role


class AccessLevel(str, enum.Enum):
    READ = "read"
    WRITE = "write"


def level_satisfied(role: EffectiveRole, level: AccessLevel) -> bool:
    if level == AccessLevel.WRITE:
        return role == EffectiveRole.ADMIN
    return role != EffectiveRole.NONE


def authorize(principal_id: Optional[str], trip, memberships: Iterable, level: AccessLevel) -> bool:
    return level_satisfied(resolve_role(principal_id, trip, memberships), AccessLevel(level))


@dataclass
class TripAccess:
    trip: Trip
    role: EffectiveRole

    @property
    def can_edit(self) -> bool:
        return self.role == EffectiveRole.ADMIN


class TripGuard:
    def __init__(self, db: AsyncSession, memberships: Optional[MembershipStore] = None):
        self.db = db
        self.memberships = memberships or MembershipStore(db)

    async def require(self, trip_id: str, principal_id: Optional[str], level: AccessLevel) -> TripAccess:
        """Trip and effective role if ``principal_id`` may act at ``level``, else TripNotFound."""
        trip = await self.db.get(Trip, trip_id) if trip_id else None
        if trip is None:
            logger.warning(f"Trip not found: ID {trip_id} for user {principal_id}")
            raise TripNotFound(trip_id)

        member = await self.memberships.find(trip.id, principal_id)
        role = resolve_role(principal_id, trip, [member] if member else [])

        if role == EffectiveRole.NONE:
            logger.warning(f"Unauthorized access attempt: trip {trip_id} for user {principal_id}")
            raise TripNotFound(trip_id)
        if not level_satisfied(role, level):
            logger.warning(f"Insufficient role {role.value} for {AccessLevel(level).value} on trip {trip_id} by user {principal_id}")
            raise TripAccessDenied(trip_id)

        return TripAccess(trip=trip, role=role)

    async def visible_trips(self, principal_id: Optional[str]) -> List[Trip]:
        """Trips owned by or shared with ``principal_id``, newest first."""
        if not principal_id:
            return []
        result = await self.db.execute(
            select(Trip)
            .where(
                or_(
                    Trip.owner_id == principal_id,
                    exists().where(
                        TripMember.trip_id == Trip.id,
                        TripMember.user_id == principal_id
                    )
                )
            )
            .order_by(Trip.created_at.desc())
        )
        return list(result.scalars().all())
