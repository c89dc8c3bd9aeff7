from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from sqlalchemy import func
from typing import List

from tripcrew.core.errors import MissingField, NoFieldsToUpdate
from tripcrew.core.logger import logger
from tripcrew.models.trips.trip_model import Trip
from tripcrew.models.trips.checklist_models import ChecklistItem
from tripcrew.models.itinerary.day_model import TripDay
from tripcrew.schemas.trip.trip_schema import (
    TripCreate, TripUpdate, TripResponse, TripSummary, TripDetailResponse,
)
from tripcrew.schemas.trip.checklist import ChecklistResponse
from tripcrew.schemas.trip.trip_member import TripMemberOut
from tripcrew.schemas.itineraries.day import DayResponse
from tripcrew.services.access.guard import TripGuard, AccessLevel, TripAccess
from tripcrew.utils.normalize import parse_trip_date

DEFAULT_TRIP_STATUS = "idea"


class TripService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.guard = TripGuard(db)
        self.memberships = self.guard.memberships

    async def _count_by_trip(self, model, trip_ids: List[str]) -> dict:
        if not trip_ids:
            return {}
        result = await self.db.execute(
            select(model.trip_id, func.count(model.id))
            .where(model.trip_id.in_(trip_ids))
            .group_by(model.trip_id)
        )
        return {trip_id: count for trip_id, count in result.all()}

    async def list_trips(self, user_id: str) -> List[TripSummary]:
        trips = await self.guard.visible_trips(user_id)
        trip_ids = [trip.id for trip in trips]
        day_counts = await self._count_by_trip(TripDay, trip_ids)
        checklist_counts = await self._count_by_trip(ChecklistItem, trip_ids)

        logger.info(f"Retrieved {len(trips)} trips for user {user_id}")
        return [
            TripSummary(
                **TripResponse.model_validate(trip).model_dump(),
                day_count=day_counts.get(trip.id, 0),
                checklist_count=checklist_counts.get(trip.id, 0),
            )
            for trip in trips
        ]

    async def create_trip(self, trip_data: TripCreate, user_id: str) -> Trip:
        if not trip_data.title or not trip_data.title.strip():
            raise MissingField("title")

        new_trip = Trip(
            title=trip_data.title,
            description=trip_data.description,
            status=trip_data.status or DEFAULT_TRIP_STATUS,
            start_date=parse_trip_date(trip_data.start_date),
            end_date=parse_trip_date(trip_data.end_date),
            owner_id=user_id,
        )
        self.db.add(new_trip)
        await self.db.commit()
        await self.db.refresh(new_trip)

        logger.info(f"Trip {new_trip.id} created by user {user_id}")
        return new_trip

    async def _load_detail(self, access: TripAccess) -> TripDetailResponse:
        result = await self.db.execute(
            select(Trip)
            .options(
                selectinload(Trip.days),
                selectinload(Trip.checklist),
                selectinload(Trip.members),
            )
            .where(Trip.id == access.trip.id)
            .execution_options(populate_existing=True)
        )
        trip = result.scalar_one()

        return TripDetailResponse(
            **TripResponse.model_validate(trip).model_dump(),
            days=[DayResponse.model_validate(day) for day in trip.days],
            checklist=[ChecklistResponse.model_validate(item) for item in trip.checklist],
            members=[TripMemberOut.model_validate(member) for member in trip.members],
            current_role=access.role,
            can_edit=access.can_edit,
        )

    async def get_trip_detail(self, trip_id: str, user_id: str) -> TripDetailResponse:
        access = await self.guard.require(trip_id, user_id, AccessLevel.READ)
        logger.info(f"Trip ID {trip_id} retrieved by user {user_id} as {access.role.value}")
        return await self._load_detail(access)

    async def update_trip(self, trip_id: str, trip_data: TripUpdate, user_id: str) -> Trip:
        access = await self.guard.require(trip_id, user_id, AccessLevel.WRITE)
        trip = access.trip

        update_data = trip_data.model_dump(exclude_unset=True)
        if not update_data:
            raise NoFieldsToUpdate()
        if "title" in update_data and not (update_data["title"] or "").strip():
            raise MissingField("title")
        if "status" in update_data and not update_data["status"]:
            update_data["status"] = DEFAULT_TRIP_STATUS

        # Dates may be cleared by sending null
        for key in ("start_date", "end_date"):
            if key in update_data:
                update_data[key] = parse_trip_date(update_data[key])

        for key, value in update_data.items():
            setattr(trip, key, value)

        await self.db.commit()
        await self.db.refresh(trip)

        logger.info(f"Trip ID {trip_id} updated by user {user_id}")
        return trip

    async def delete_trip(self, trip_id: str, user_id: str) -> None:
        access = await self.guard.require(trip_id, user_id, AccessLevel.WRITE)

        removed = await self.memberships.delete_by_trip(access.trip.id)
        await self.db.delete(access.trip)
        await self.db.commit()

        logger.info(f"Trip ID {trip_id} deleted by user {user_id} ({removed} memberships removed)")
