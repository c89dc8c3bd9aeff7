"""Invite code registry: issuing codes and redeeming them into memberships.

Redemption is the one operation here that must hold up under concurrency.
Two principals racing for the last use of a capped code must produce exactly
one membership. The cap is therefore enforced by a conditional UPDATE
(``used_count < max_uses``) whose affected-row count decides the outcome,
never by reading ``used_count`` and writing it back.
"""

from dataclasses import dataclass
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Union
import secrets
import string

from tripcrew.core.config import settings
from tripcrew.core.errors import (
    InviteNotFound, InviteExpired, InviteExhausted, InvalidInviteUsage, StorageUnavailable,
)
from tripcrew.core.logger import logger
from tripcrew.models.trips.trip_invite import TripInviteCode, InviteUsage, InviteState
from tripcrew.models.trips.trip_model import Trip
from tripcrew.models.trips.trip_member import TripRole
from tripcrew.services.access.membership_store import MembershipStore, coerce_role
from tripcrew.utils.clock import utcnow, to_naive_utc

CODE_ALPHABET = string.ascii_lowercase + string.digits


def generate_invite_code(length: int = None) -> str:
    length = length or settings.INVITE_CODE_LENGTH
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def coerce_usage(usage: Union[InviteUsage, str, None]) -> InviteUsage:
    # "link" is what shareable-link clients send for an uncapped code
    if usage is None or usage == "link":
        return InviteUsage.UNLIMITED
    if isinstance(usage, InviteUsage):
        return usage
    try:
        return InviteUsage(usage)
    except ValueError:
        raise InvalidInviteUsage(usage) from None


@dataclass(frozen=True)
class Redemption:
    trip_id: str
    role: TripRole
    invite_id: str


class InviteRegistry:
    def __init__(self, db: AsyncSession, memberships: Optional[MembershipStore] = None):
        self.db = db
        self.memberships = memberships or MembershipStore(db)

    async def _code_taken(self, code: str) -> bool:
        result = await self.db.execute(
            select(TripInviteCode.id).where(TripInviteCode.code == code)
        )
        return result.first() is not None

    async def issue(
        self,
        trip_id: str,
        role: Union[TripRole, str],
        usage: Union[InviteUsage, str] = InviteUsage.UNLIMITED,
        created_by: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> TripInviteCode:
        """Create and commit a new invite code for ``trip_id``.

        Caller authorization is not checked here; the guard runs first.
        """
        role = coerce_role(role)
        usage = coerce_usage(usage)
        max_uses = 1 if usage == InviteUsage.SINGLE else None
        if expires_at is not None:
            expires_at = to_naive_utc(expires_at)

        for attempt in range(1, settings.INVITE_CODE_MAX_ATTEMPTS + 1):
            code = generate_invite_code()
            if await self._code_taken(code):
                logger.warning(f"Invite code collision on attempt {attempt}, regenerating")
                continue

            invite = TripInviteCode(
                trip_id=trip_id,
                code=code,
                role=role,
                max_uses=max_uses,
                used_count=0,
                expires_at=expires_at,
                created_by=created_by,
            )
            self.db.add(invite)
            try:
                await self.db.commit()
            except IntegrityError:
                # Lost a race for the same code between the check and the insert
                await self.db.rollback()
                logger.warning(f"Invite code collision on insert, attempt {attempt}")
                continue

            logger.info(
                f"Invite issued for trip {trip_id}: role {role.value}, usage {usage.value}"
            )
            return invite

        logger.error(f"Could not generate a unique invite code for trip {trip_id}")
        raise StorageUnavailable("invite code generation")

    async def get_by_code(self, code: str) -> Optional[TripInviteCode]:
        result = await self.db.execute(
            select(TripInviteCode)
            .where(TripInviteCode.code == code)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_trip(self, trip_id: str) -> List[TripInviteCode]:
        result = await self.db.execute(
            select(TripInviteCode)
            .where(TripInviteCode.trip_id == trip_id)
            .order_by(TripInviteCode.created_at.desc())
        )
        return list(result.scalars().all())

    async def _consume_use(self, invite: TripInviteCode, now: datetime) -> bool:
        """Compare-and-increment one use of a capped code. True if a use was taken."""
        result = await self.db.execute(
            update(TripInviteCode)
            .where(
                TripInviteCode.id == invite.id,
                TripInviteCode.max_uses.is_not(None),
                TripInviteCode.used_count < TripInviteCode.max_uses,
                or_(TripInviteCode.expires_at.is_(None), TripInviteCode.expires_at > now),
            )
            .values(used_count=TripInviteCode.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def redeem(self, code: str, principal_id: str) -> Redemption:
        """Consume ``code`` for ``principal_id`` and grant the code's role.

        Either the use is counted and the membership written in one commit,
        or nothing changes and InviteNotFound / InviteExpired /
        InviteExhausted is raised.
        """
        try:
            invite = await self.get_by_code(code)
            if invite is None:
                raise InviteNotFound()

            now = utcnow()
            if invite.expires_at is not None and invite.expires_at <= now:
                raise InviteExpired()

            # The owner is already admin; spend no use and store no row
            trip = await self.db.get(Trip, invite.trip_id)
            if trip is not None and principal_id == trip.owner_id:
                logger.info(f"Owner {principal_id} redeemed a code for their own trip {trip.id}")
                return Redemption(trip_id=trip.id, role=TripRole.ADMIN, invite_id=invite.id)

            if invite.max_uses is not None:
                if not await self._consume_use(invite, now):
                    # Re-read to report why the conditional update matched nothing
                    invite = await self.get_by_code(code)
                    if invite is not None and invite.state_at(utcnow()) == InviteState.EXPIRED:
                        raise InviteExpired()
                    raise InviteExhausted()

            await self.memberships.upsert(invite.trip_id, principal_id, invite.role)
            await self.db.commit()
        except (InviteNotFound, InviteExpired, InviteExhausted):
            await self.db.rollback()
            logger.warning(f"Invite redemption rejected for user {principal_id}")
            raise
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Invite redeemed: user {principal_id} joined trip {invite.trip_id} as {invite.role.value}")
        return Redemption(trip_id=invite.trip_id, role=TripRole(invite.role), invite_id=invite.id)
