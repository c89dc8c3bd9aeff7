from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from tripcrew.core.database import get_db
from tripcrew.dependencies.auth import get_current_principal
from tripcrew.schemas.trip.trip_member import TripMemberResponse
from tripcrew.services.trips.trip_member_service import get_trip_members

router = APIRouter(prefix="/trips", tags=["Trip Members"])


@router.get("/{trip_id}/members", response_model=TripMemberResponse)
async def list_trip_members(
    trip_id: str,
    db: AsyncSession = Depends(get_db),
    principal_id: str = Depends(get_current_principal)
):
    return await get_trip_members(db, trip_id, principal_id)
