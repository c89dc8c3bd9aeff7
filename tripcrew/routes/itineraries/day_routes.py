from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripcrew.core.database import get_db
from tripcrew.dependencies.auth import get_current_principal
from tripcrew.schemas.itineraries.day import DayCreate, DayUpdate, DayResponse
from tripcrew.services.itineraries.day_service import DayService

router = APIRouter(prefix="/trips", tags=["Itinerary Days"])


async def get_day_service(
    db: AsyncSession = Depends(get_db)
) -> DayService:
    return DayService(db)


@router.post("/{trip_id}/days", response_model=DayResponse, status_code=status.HTTP_201_CREATED)
async def add_day_route(
    trip_id: str,
    day_data: DayCreate,
    principal_id: str = Depends(get_current_principal),
    day_service: DayService = Depends(get_day_service)
):
    return await day_service.add_day(trip_id, day_data, principal_id)


@router.patch("/{trip_id}/days/{day_id}", response_model=DayResponse)
async def update_day_route(
    trip_id: str,
    day_id: str,
    day_data: DayUpdate,
    principal_id: str = Depends(get_current_principal),
    day_service: DayService = Depends(get_day_service)
):
    return await day_service.update_day(trip_id, day_id, day_data, principal_id)


@router.delete("/{trip_id}/days/{day_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_day_route(
    trip_id: str,
    day_id: str,
    principal_id: str = Depends(get_current_principal),
    day_service: DayService = Depends(get_day_service)
):
    await day_service.delete_day(trip_id, day_id, principal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
