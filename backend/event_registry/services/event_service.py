"""
Event catalog: CRUD with an ownership check, plus seat accounting.

Seat availability is never stored. Every read derives it from a live
COUNT over registrations, so capacity and usage cannot drift apart.
"""

from datetime import timedelta
from typing import Iterable

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from event_registry.models.event import Event
from event_registry.models.registration import Registration
from event_registry.schemas.event import EventRequest
from event_registry.services.expiry_service import sweep_expired_events
from event_registry.core.config import get_settings
from event_registry.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from event_registry.core.metrics import record_sweep
from event_registry.core.timestamps import to_iso, utcnow
from event_registry.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def available_seats(seats: int, registrations_count: int) -> int:
    return seats - registrations_count


async def count_registrations(db: AsyncSession, event_id: int) -> int:
    result = await db.execute(
        select(func.count(Registration.id)).where(Registration.event_id == event_id)
    )
    return result.scalar_one()


async def count_registrations_by_event(db: AsyncSession, event_ids: Iterable[int]) -> dict[int, int]:
    """Live registration counts for several events in one grouped query."""
    event_ids = list(event_ids)
    if not event_ids:
        return {}

    result = await db.execute(
        select(Registration.event_id, func.count(Registration.id))
        .where(Registration.event_id.in_(event_ids))
        .group_by(Registration.event_id)
    )
    counts = dict(result.all())
    return {event_id: counts.get(event_id, 0) for event_id in event_ids}


def validate_event_request(event_data: EventRequest) -> None:
    if not event_data.title.strip():
        raise ValidationError("title is required")
    if not event_data.event_type.strip():
        raise ValidationError("event type is required")

    # Tolerate dates slightly in the past so "today" events created across
    # time zones are not rejected
    earliest = utcnow() - timedelta(hours=settings.EVENT_DATE_GRACE_HOURS)
    if to_iso(event_data.event_date) < to_iso(earliest):
        raise ValidationError("event date must be no more than one day in the past")

    if event_data.seats <= 0:
        raise ValidationError("number of seats must be greater than zero")


async def _sweep_before_listing(db: AsyncSession) -> None:
    """Listings must succeed even when the sweep does not."""
    try:
        removed = await sweep_expired_events(db)
    except SQLAlchemyError as e:
        logger.error("expiry_sweep_failed", trigger="listing", error=str(e))
        return
    record_sweep("listing", removed)


async def list_events(db: AsyncSession) -> list[Event]:
    """List all upcoming events ordered by date. Past events are swept first."""
    await _sweep_before_listing(db)

    result = await db.execute(select(Event).order_by(Event.event_date.asc(), Event.id.asc()))
    events = list(result.scalars().all())
    logger.debug("events_listed", count=len(events))
    return events


async def list_events_by_owner(db: AsyncSession, account_id: int) -> list[Event]:
    await _sweep_before_listing(db)

    result = await db.execute(
        select(Event)
        .where(Event.creator_id == account_id)
        .order_by(Event.event_date.asc(), Event.id.asc())
    )
    return list(result.scalars().all())


async def get_event(db: AsyncSession, event_id: int, for_update: bool = False) -> Event:
    """
    Get a single event by ID.
    With for_update the row stays locked until the transaction ends
    (ignored by SQLite, which serializes writers anyway).
    """
    query = select(Event).where(Event.id == event_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError("event not found")
    return event


async def create_event(db: AsyncSession, event_data: EventRequest, owner_id: int) -> Event:
    validate_event_request(event_data)

    event = Event(
        title=event_data.title,
        description=event_data.description,
        location=event_data.location,
        event_type=event_data.event_type,
        event_date=to_iso(event_data.event_date),
        seats=event_data.seats,
        creator_id=owner_id,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title, seats=event.seats)
    return event


async def _get_owned_event(db: AsyncSession, event_id: int, caller_id: int, action: str) -> Event:
    event = await get_event(db, event_id, for_update=True)
    if event.creator_id != caller_id:
        logger.warning("event_permission_denied", event_id=event_id, caller_id=caller_id, action=action)
        raise PermissionDeniedError(f"you don't have permission to {action} this event")
    return event


async def update_event(
    db: AsyncSession,
    event_id: int,
    event_data: EventRequest,
    caller_id: int,
) -> Event:
    """Overwrite every mutable field. Seats may not drop below current registrations."""
    validate_event_request(event_data)
    event = await _get_owned_event(db, event_id, caller_id, "update")

    registered = await count_registrations(db, event_id)
    if event_data.seats < registered:
        logger.warning(
            "event_update_rejected",
            event_id=event_id,
            requested_seats=event_data.seats,
            registered=registered,
        )
        raise ValidationError("cannot reduce seats below the number of existing registrations")

    event.title = event_data.title
    event.description = event_data.description
    event.location = event_data.location
    event.event_type = event_data.event_type
    event.event_date = to_iso(event_data.event_date)
    event.seats = event_data.seats
    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, seats=event.seats)
    return event


async def delete_event(db: AsyncSession, event_id: int, caller_id: int) -> None:
    """Delete an event; its registrations go with it (ON DELETE CASCADE)."""
    event = await _get_owned_event(db, event_id, caller_id, "delete")
    await db.delete(event)
    await db.flush()

    logger.info("event_deleted", event_id=event_id, caller_id=caller_id)


async def get_registration_counts(db: AsyncSession, events: list[Event]) -> dict[int, int]:
    return await count_registrations_by_event(db, (event.id for event in events))


async def get_event_with_count(db: AsyncSession, event_id: int) -> tuple[Event, int]:
    event = await get_event(db, event_id)
    return event, await count_registrations(db, event_id)

