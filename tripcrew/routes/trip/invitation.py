from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from tripcrew.schemas.trip.invite import TripInviteCreate, TripInviteResponse, TripJoinRequest
from tripcrew.schemas.trip.trip_schema import TripDetailResponse
from tripcrew.services.trips.invite_service import create_trip_invite, get_trip_invites, join_trip_by_code
from tripcrew.dependencies.auth import get_current_principal
from tripcrew.core.database import get_db

router = APIRouter(prefix="/trips", tags=["Trip Invites"])


@router.post("/join", response_model=TripDetailResponse)
async def join_trip(
    payload: TripJoinRequest,
    db: AsyncSession = Depends(get_db),
    principal_id: str = Depends(get_current_principal)
):
    return await join_trip_by_code(db, payload.code, principal_id)


@router.post("/{trip_id}/invites", response_model=TripInviteResponse, status_code=status.HTTP_201_CREATED)
async def create_invite(
    trip_id: str,
    invite_data: TripInviteCreate,
    db: AsyncSession = Depends(get_db),
    principal_id: str = Depends(get_current_principal)
):
    return await create_trip_invite(db, trip_id, invite_data, principal_id)


@router.get("/{trip_id}/invites", response_model=list[TripInviteResponse])
async def list_invites(
    trip_id: str,
    db: AsyncSession = Depends(get_db),
    principal_id: str = Depends(get_current_principal)
):
    return await get_trip_invites(db, trip_id, principal_id)
