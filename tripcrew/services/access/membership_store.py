from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Union

from tripcrew.core.errors import InvalidRole
from tripcrew.core.logger import logger
from tripcrew.models.trips.trip_model import new_id
from tripcrew.models.trips.trip_member import TripMember, TripRole
from tripcrew.utils.clock import utcnow

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def coerce_role(role: Union[TripRole, str, None]) -> TripRole:
    if isinstance(role, TripRole):
        return role
    try:
        return TripRole(role)
    except ValueError:
        raise InvalidRole(role) from None


class MembershipStore:
    """(trip, principal) -> role records.

    Operations flush but never commit: the caller owns the transaction, so a
    membership write can be committed together with e.g. an invite redemption.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert(self, trip_id: str, principal_id: str, role: Union[TripRole, str]) -> TripMember:
        role = coerce_role(role)
        now = utcnow()

        insert = _UPSERT_DIALECTS.get(self.db.bind.dialect.name)
        if insert is None:
            return await self._upsert_in_savepoint(trip_id, principal_id, role, now)

        # One statement, so concurrent writers on the same key never see a torn row
        stmt = insert(TripMember).values(
            id=new_id(),
            trip_id=trip_id,
            user_id=str(principal_id),
            role=role,
            joined_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TripMember.trip_id, TripMember.user_id],
            set_={"role": stmt.excluded.role, "updated_at": now},
        )
        await self.db.execute(stmt)

        member = await self.find(trip_id, principal_id)
        logger.info(f"Membership upserted: trip {trip_id}, user {principal_id}, role {role.value}")
        return member

    async def _upsert_in_savepoint(self, trip_id, principal_id, role, now) -> TripMember:
        """Select-then-insert for backends without ON CONFLICT.

        A concurrent insert of the same key fails the unique constraint inside
        the SAVEPOINT and falls through to the update.
        """
        member = await self.find(trip_id, principal_id)
        if member is None:
            member = TripMember(
                id=new_id(),
                trip_id=trip_id,
                user_id=str(principal_id),
                role=role,
                joined_at=now,
                updated_at=now,
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(member)
                logger.info(f"Membership created: trip {trip_id}, user {principal_id}, role {role.value}")
                return member
            except IntegrityError:
                member = await self.find(trip_id, principal_id)

        member.role = role
        member.updated_at = now
        await self.db.flush()
        logger.info(f"Membership updated: trip {trip_id}, user {principal_id}, role {role.value}")
        return member

    async def find(self, trip_id: str, principal_id: str) -> Optional[TripMember]:
        if not principal_id:
            return None
        result = await self.db.execute(
            select(TripMember)
            .where(
                TripMember.trip_id == trip_id,
                TripMember.user_id == str(principal_id)
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_trip(self, trip_id: str) -> List[TripMember]:
        result = await self.db.execute(
            select(TripMember)
            .where(TripMember.trip_id == trip_id)
            .order_by(TripMember.joined_at)
        )
        return list(result.scalars().all())

    async def remove(self, trip_id: str, principal_id: str) -> bool:
        result = await self.db.execute(
            delete(TripMember).where(
                TripMember.trip_id == trip_id,
                TripMember.user_id == str(principal_id)
            )
        )
        return result.rowcount > 0

    async def delete_by_trip(self, trip_id: str) -> int:
        result = await self.db.execute(
            delete(TripMember).where(TripMember.trip_id == trip_id)
        )
        return result.rowcount
