from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from tripcrew.core.errors import ChecklistItemNotFound, MissingField
from tripcrew.core.logger import logger
from tripcrew.models.trips.checklist_models import ChecklistItem
from tripcrew.schemas.trip.checklist import ChecklistCreate, ChecklistUpdate
from tripcrew.services.access.guard import TripGuard, AccessLevel


def _require_label(label) -> str:
    if not isinstance(label, str) or not label.strip():
        raise MissingField("label")
    return label


async def _get_trip_item(session: AsyncSession, trip_id: str, item_id: str) -> ChecklistItem:
    """Checklist item by ID, only if it belongs to the given trip."""
    result = await session.execute(
        select(ChecklistItem).where(
            ChecklistItem.id == item_id,
            ChecklistItem.trip_id == trip_id
        )
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise ChecklistItemNotFound(item_id)
    return item


async def add_checklist_item(
    session: AsyncSession,
    trip_id: str,
    checklist_data: ChecklistCreate,
    user_id: str
) -> ChecklistItem:
    label = _require_label(checklist_data.label)
    await TripGuard(session).require(trip_id, user_id, AccessLevel.WRITE)

    new_item = ChecklistItem(trip_id=trip_id, label=label, done=False)
    session.add(new_item)
    await session.commit()
    await session.refresh(new_item)

    logger.info(f"Checklist item {new_item.id} added to trip {trip_id} by user {user_id}")
    return new_item


async def update_checklist_item(
    session: AsyncSession,
    trip_id: str,
    item_id: str,
    update_data: ChecklistUpdate,
    user_id: str
) -> ChecklistItem:
    label = _require_label(update_data.label)
    await TripGuard(session).require(trip_id, user_id, AccessLevel.WRITE)

    item = await _get_trip_item(session, trip_id, item_id)
    item.label = label
    await session.commit()
    await session.refresh(item)
    return item


async def toggle_checklist_item(
    session: AsyncSession,
    trip_id: str,
    item_id: str,
    user_id: str
) -> ChecklistItem:
    await TripGuard(session).require(trip_id, user_id, AccessLevel.WRITE)

    item = await _get_trip_item(session, trip_id, item_id)
    item.done = not item.done
    await session.commit()
    await session.refresh(item)
    return item


async def delete_checklist_item(
    session: AsyncSession,
    trip_id: str,
    item_id: str,
    user_id: str
) -> None:
    await TripGuard(session).require(trip_id, user_id, AccessLevel.WRITE)

    item = await _get_trip_item(session, trip_id, item_id)
    await session.delete(item)
    await session.commit()
    logger.info(f"Checklist item {item_id} deleted from trip {trip_id} by user {user_id}")
