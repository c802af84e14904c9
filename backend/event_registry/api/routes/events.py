"""
Event endpoints. Every response carries live seat availability.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_registry.db.session import get_db
from event_registry.schemas.event import EventRequest, EventResponse, CreatedResponse, MessageResponse
from event_registry.services.event_service import (
    create_event,
    delete_event,
    get_event_with_count,
    get_registration_counts,
    list_events,
    list_events_by_owner,
    update_event,
)
from event_registry.core.security import get_current_user_id

router = APIRouter(prefix="/events", tags=["Events"])


async def _with_availability(db: AsyncSession, events) -> list[EventResponse]:
    counts = await get_registration_counts(db, events)
    return [EventResponse.from_event(e, counts[e.id]) for e in events]


@router.get("/", response_model=list[EventResponse])
async def list_events_endpoint(db: AsyncSession = Depends(get_db)):
    """List upcoming events by date. Past events are swept before reading."""
    events = await list_events(db)
    return await _with_availability(db, events)


@router.get("/mine", response_model=list[EventResponse])
async def list_my_events(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    events = await list_events_by_owner(db, user_id)
    return await _with_availability(db, events)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    event, registered = await get_event_with_count(db, event_id)
    return EventResponse.from_event(event, registered)


@router.post("/", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a new event owned by the caller."""
    event = await create_event(db, event_data, user_id)
    return CreatedResponse(id=event.id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: int,
    event_data: EventRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Only the creator may update; seats cannot drop below current registrations."""
    await update_event(db, event_id, event_data, user_id)
    event, registered = await get_event_with_count(db, event_id)
    return EventResponse.from_event(event, registered)


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event_endpoint(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event and, with it, all of its registrations."""
    await delete_event(db, event_id, user_id)
    return MessageResponse(message="Event deleted successfully")
