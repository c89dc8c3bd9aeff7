from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from tripcrew.core.errors import DayNotFound
from tripcrew.core.logger import logger
from tripcrew.models.itinerary.day_model import TripDay
from tripcrew.schemas.itineraries.day import DayCreate, DayUpdate
from tripcrew.services.access.guard import TripGuard, AccessLevel


class DayService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.guard = TripGuard(db)

    async def _get_trip_day(self, trip_id: str, day_id: str) -> TripDay:
        result = await self.db.execute(
            select(TripDay).where(TripDay.id == day_id, TripDay.trip_id == trip_id)
        )
        day = result.scalar_one_or_none()
        if day is None:
            raise DayNotFound(day_id)
        return day

    async def add_day(self, trip_id: str, day_data: DayCreate, user_id: str) -> TripDay:
        await self.guard.require(trip_id, user_id, AccessLevel.WRITE)

        count = await self.db.scalar(
            select(func.count(TripDay.id)).where(TripDay.trip_id == trip_id)
        )
        day = TripDay(
            trip_id=trip_id,
            position=(count or 0) + 1,
            title=day_data.title or None,
            origin=day_data.origin or None,
            destination=day_data.destination or None,
            distance_km=day_data.distance_km,
            eta=day_data.eta or None,
            notes=day_data.notes or None,
        )
        self.db.add(day)
        await self.db.commit()
        await self.db.refresh(day)

        logger.info(f"Day {day.position} added to trip {trip_id} by user {user_id}")
        return day

    async def update_day(self, trip_id: str, day_id: str, day_data: DayUpdate, user_id: str) -> TripDay:
        await self.guard.require(trip_id, user_id, AccessLevel.WRITE)

        day = await self._get_trip_day(trip_id, day_id)
        day.notes = day_data.notes
        await self.db.commit()
        await self.db.refresh(day)
        return day

    async def delete_day(self, trip_id: str, day_id: str, user_id: str) -> None:
        await self.guard.require(trip_id, user_id, AccessLevel.WRITE)

        day = await self._get_trip_day(trip_id, day_id)
        await self.db.delete(day)
        await self.db.commit()
        logger.info(f"Day {day_id} deleted from trip {trip_id} by user {user_id}")
