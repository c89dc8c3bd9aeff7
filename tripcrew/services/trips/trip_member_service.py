from sqlalchemy.ext.asyncio import AsyncSession

from tripcrew.schemas.trip.trip_member import TripMemberOut, TripMemberResponse
from tripcrew.services.access.guard import TripGuard, AccessLevel


async def get_trip_members(db: AsyncSession, trip_id: str, user_id: str) -> TripMemberResponse:
    guard = TripGuard(db)
    access = await guard.require(trip_id, user_id, AccessLevel.READ)

    members = await guard.memberships.list_by_trip(trip_id)
    return TripMemberResponse(
        trip_id=access.trip.id,
        owner_id=access.trip.owner_id,
        current_role=access.role,
        members=[TripMemberOut.model_validate(member) for member in members]
    )
