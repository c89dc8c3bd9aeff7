from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from tripcrew.core.errors import MissingField
from tripcrew.models.trips.trip_invite import TripInviteCode
from tripcrew.schemas.trip.invite import TripInviteCreate, TripInviteResponse
from tripcrew.schemas.trip.trip_schema import TripDetailResponse
from tripcrew.services.access.guard import TripGuard, AccessLevel
from tripcrew.services.access.invite_registry import InviteRegistry
from tripcrew.services.trips.trip_service import TripService
from tripcrew.utils.clock import utcnow


def to_invite_response(invite: TripInviteCode) -> TripInviteResponse:
    return TripInviteResponse(
        id=invite.id,
        trip_id=invite.trip_id,
        code=invite.code,
        role=invite.role,
        type=invite.usage,
        max_uses=invite.max_uses,
        used_count=invite.used_count,
        expires_at=invite.expires_at,
        state=invite.state_at(utcnow()),
        created_at=invite.created_at,
    )


async def create_trip_invite(
        db: AsyncSession,
        trip_id: str,
        invite_data: TripInviteCreate,
        user_id: str
) -> TripInviteResponse:
    # Only administrators may hand out access
    await TripGuard(db).require(trip_id, user_id, AccessLevel.WRITE)

    invite = await InviteRegistry(db).issue(
        trip_id,
        invite_data.role,
        invite_data.type,
        created_by=user_id,
        expires_at=invite_data.expires_at,
    )
    return to_invite_response(invite)


async def get_trip_invites(
        db: AsyncSession,
        trip_id: str,
        user_id: str
) -> List[TripInviteResponse]:
    await TripGuard(db).require(trip_id, user_id, AccessLevel.WRITE)

    invites = await InviteRegistry(db).list_by_trip(trip_id)
    return [to_invite_response(invite) for invite in invites]


async def join_trip_by_code(
        db: AsyncSession,
        code: str,
        user_id: str
) -> TripDetailResponse:
    if not code or not str(code).strip():
        raise MissingField("code")

    redemption = await InviteRegistry(db).redeem(str(code).strip(), user_id)
    return await TripService(db).get_trip_detail(redemption.trip_id, user_id)
