from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from tripcrew.schemas.trip.trip_schema import TripCreate, TripUpdate, TripResponse, TripSummary, TripDetailResponse
from tripcrew.core.database import get_db
from tripcrew.dependencies.auth import get_current_principal
from tripcrew.services.trips.trip_service import TripService

router = APIRouter(prefix="/trips", tags=['Trips'])


async def get_trip_service(
    db: AsyncSession = Depends(get_db)
) -> TripService:
    return TripService(db)


@router.get("/", response_model=list[TripSummary])
async def list_trips_route(
    principal_id: str = Depends(get_current_principal),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.list_trips(principal_id)


@router.post("/", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip_route(
    trip: TripCreate,
    principal_id: str = Depends(get_current_principal),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.create_trip(trip, principal_id)


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip_route(
    trip_id: str,
    principal_id: str = Depends(get_current_principal),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_trip_detail(trip_id, principal_id)


@router.patch("/{trip_id}", response_model=TripResponse)
async def update_trip_route(
    trip_id: str,
    trip_update: TripUpdate,
    principal_id: str = Depends(get_current_principal),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.update_trip(trip_id, trip_update, principal_id)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip_route(
    trip_id: str,
    principal_id: str = Depends(get_current_principal),
    trip_service: TripService = Depends(get_trip_service)
):
    await trip_service.delete_trip(trip_id, principal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
