from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripcrew.core.database import get_db
from tripcrew.dependencies.auth import get_current_principal
from tripcrew.services.trips.checklist_service import (
    add_checklist_item, update_checklist_item, toggle_checklist_item, delete_checklist_item
)
from tripcrew.schemas.trip.checklist import ChecklistCreate, ChecklistUpdate, ChecklistResponse

router = APIRouter(prefix="/trips", tags=["Trip Checklist"])


@router.post("/{trip_id}/checklist", response_model=ChecklistResponse, status_code=status.HTTP_201_CREATED)
async def create_checklist_item_route(
    trip_id: str,
    checklist_data: ChecklistCreate,
    session: AsyncSession = Depends(get_db),
    principal_id: str = Depends(get_current_principal)
):
    """Add an item to a trip's checklist."""
    return await add_checklist_item(session, trip_id, checklist_data, principal_id)


@router.patch("/{trip_id}/checklist/{item_id}/toggle", response_model=ChecklistResponse)
async def toggle_checklist_item_route(
    trip_id: str,
    item_id: str,
    session: AsyncSession = Depends(get_db),
    principal_id: str = Depends(get_current_principal)
):
    """Flip an item between done and not done."""
    return await toggle_checklist_item(session, trip_id, item_id, principal_id)


@router.patch("/{trip_id}/checklist/{item_id}", response_model=ChecklistResponse)
async def update_checklist_item_route(
    trip_id: str,
    item_id: str,
    update_data: ChecklistUpdate,
    session: AsyncSession = Depends(get_db),
    principal_id: str = Depends(get_current_principal)
):
    """Rename a checklist item."""
    return await update_checklist_item(session, trip_id, item_id, update_data, principal_id)


@router.delete("/{trip_id}/checklist/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_checklist_item_route(
    trip_id: str,
    item_id: str,
    session: AsyncSession = Depends(get_db),
    principal_id: str = Depends(get_current_principal)
):
    """Remove a checklist item."""
    await delete_checklist_item(session, trip_id, item_id, principal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
