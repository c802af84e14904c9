"""
Registration ledger with admission control.

ADMISSION ORDER
===============

A registration attempt is checked in a fixed order and stops at the first
failure:

  1. Request names an event                 -> ValidationError
  2. Event exists (row locked on PostgreSQL) -> NotFoundError
  3. At least one seat left                  -> CapacityExceededError
  4. Event is not in the past                -> SchedulingError
  5. Account not already registered          -> DuplicateRegistrationError
  6. Names derived from the caller's identity
  7. Conditional insert

The seat check in step 3 only produces the error message. The insert in
step 7 is an INSERT ... SELECT guarded by the same seats > COUNT(*)
condition, so a registration that loses a race for the last seat inserts
nothing and is reported as fully booked. The unique (event_id, account_id)
constraint does the same job for duplicate registrations.
"""

import time
from typing import Optional

from sqlalchemy import Integer, String, func, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from event_registry.models.event import Event
from event_registry.models.registration import Registration
from event_registry.schemas.registration import RegistrationDetails, RegistrationRequest
from event_registry.services.event_service import available_seats, count_registrations, get_event
from event_registry.core.exceptions import (
    CapacityExceededError,
    DomainError,
    DuplicateRegistrationError,
    NotFoundError,
    PermissionDeniedError,
    SchedulingError,
    ValidationError,
)
from event_registry.core.metrics import admission_latency, record_registration_attempt
from event_registry.core.security import Identity
from event_registry.core.timestamps import utcnow, utcnow_iso
from event_registry.core.logging import get_logger

logger = get_logger(__name__)

FULLY_BOOKED = "event is fully booked"
PAST_EVENT = "cannot register for a past event"
ALREADY_REGISTERED = "you have already registered for this event"

_OUTCOMES = {
    ValidationError: "invalid",
    NotFoundError: "not_found",
    CapacityExceededError: "fully_booked",
    SchedulingError: "past_event",
    DuplicateRegistrationError: "duplicate",
}


def split_display_name(display_name: str) -> tuple[str, str]:
    """
    Split on the first run of whitespace into (first, rest).
    A single-word name is used as both first and last name.
    """
    parts = display_name.split(None, 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    if parts:
        return parts[0], parts[0]
    return "", ""


async def has_registration(db: AsyncSession, event_id: int, account_id: int) -> bool:
    result = await db.execute(
        select(func.count(Registration.id)).where(
            Registration.event_id == event_id,
            Registration.account_id == account_id,
        )
    )
    return result.scalar_one() > 0


async def _check_admission(db: AsyncSession, event: Event, account_id: Optional[int]) -> None:
    """Steps 3-5: capacity, schedule, duplicate."""
    registered = await count_registrations(db, event.id)
    if available_seats(event.seats, registered) <= 0:
        logger.warning("registration_rejected", reason="fully_booked", event_id=event.id, seats=event.seats)
        raise CapacityExceededError(FULLY_BOOKED)

    if event.scheduled_at < utcnow():
        logger.warning("registration_rejected", reason="past_event", event_id=event.id)
        raise SchedulingError(PAST_EVENT)

    if account_id is not None and await has_registration(db, event.id, account_id):
        logger.warning("registration_rejected", reason="duplicate", event_id=event.id, account_id=account_id)
        raise DuplicateRegistrationError(ALREADY_REGISTERED)


async def _insert_if_seat_available(
    db: AsyncSession,
    event_id: int,
    account_id: Optional[int],
    first_name: str,
    last_name: str,
) -> Optional[int]:
    """
    Insert a registration only while seats > current count, as one statement.
    Returns the new id, or None when no seat was left.
    """
    registered = (
        select(func.count(Registration.id))
        .where(Registration.event_id == event_id)
        .correlate(None)
        .scalar_subquery()
    )
    seats = (
        select(Event.seats)
        .where(Event.id == event_id)
        .correlate(None)
        .scalar_subquery()
    )
    row = select(
        literal(event_id, Integer),
        literal(account_id, Integer),
        literal(first_name, String),
        literal(last_name, String),
        literal(utcnow_iso(), String),
    ).where(seats > registered)

    stmt = (
        insert(Registration.__table__)
        .from_select(["event_id", "account_id", "first_name", "last_name", "created_at"], row)
        .returning(Registration.__table__.c.id)
    )
    try:
        async with db.begin_nested():
            result = await db.execute(stmt)
            new_id = result.scalar_one_or_none()
    except IntegrityError:
        raise DuplicateRegistrationError(ALREADY_REGISTERED)
    return new_id


async def create_registration(
    db: AsyncSession,
    registration_data: RegistrationRequest,
    identity: Optional[Identity] = None,
) -> Registration:
    """Run admission control and, if admitted, record the registration."""
    started = time.perf_counter()
    try:
        registration = await _admit(db, registration_data, identity)
    except DomainError as e:
        record_registration_attempt(_OUTCOMES.get(type(e), "error"))
        raise
    finally:
        admission_latency.observe(time.perf_counter() - started)

    record_registration_attempt("created")
    return registration


async def _admit(
    db: AsyncSession,
    registration_data: RegistrationRequest,
    identity: Optional[Identity],
) -> Registration:
    if not registration_data.event_id or registration_data.event_id <= 0:
        raise ValidationError("event ID is required")

    event = await get_event(db, registration_data.event_id, for_update=True)
    account_id = identity.account_id if identity else None
    await _check_admission(db, event, account_id)

    if identity:
        # Authenticated callers are registered under their account name
        first_name, last_name = split_display_name(identity.display_name)
    else:
        first_name, last_name = registration_data.first_name, registration_data.last_name

    new_id = await _insert_if_seat_available(db, event.id, account_id, first_name, last_name)
    if new_id is None:
        logger.warning("registration_rejected", reason="fully_booked_on_insert", event_id=event.id)
        raise CapacityExceededError(FULLY_BOOKED)

    registration = await _get_registration_row(db, new_id)
    logger.info(
        "registration_created",
        registration_id=registration.id,
        event_id=event.id,
        account_id=account_id,
    )
    return registration


async def _get_registration_row(db: AsyncSession, registration_id: int) -> Registration:
    result = await db.execute(select(Registration).where(Registration.id == registration_id))
    registration = result.scalar_one_or_none()
    if not registration:
        raise NotFoundError("registration not found")
    return registration


async def list_registrations(db: AsyncSession, event_id: Optional[int] = None) -> list[Registration]:
    query = select(Registration)
    if event_id is not None:
        query = query.where(Registration.event_id == event_id)
    result = await db.execute(query.order_by(Registration.created_at.asc(), Registration.id.asc()))
    return list(result.scalars().all())


def _details_query():
    return select(
        Registration,
        Event.title,
        Event.event_type,
        Event.event_date,
        Event.description,
        Event.location,
    ).join(Event, Registration.event_id == Event.id)


def _to_details(row) -> RegistrationDetails:
    registration, title, event_type, event_date, description, location = row
    return RegistrationDetails(
        id=registration.id,
        event_id=registration.event_id,
        account_id=registration.account_id,
        first_name=registration.first_name,
        last_name=registration.last_name,
        created_at=registration.created_at,
        event_title=title,
        event_type=event_type,
        event_date=event_date,
        event_description=description,
        event_location=location,
    )


async def list_registrations_for_account(db: AsyncSession, account_id: int) -> list[RegistrationDetails]:
    """The account's registrations with event details, newest first."""
    result = await db.execute(
        _details_query()
        .where(Registration.account_id == account_id)
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return [_to_details(row) for row in result.all()]


async def get_registration(db: AsyncSession, registration_id: int) -> RegistrationDetails:
    result = await db.execute(_details_query().where(Registration.id == registration_id))
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("registration not found")
    return _to_details(row)


async def _get_owned_registration(
    db: AsyncSession, registration_id: int, caller_id: int, action: str
) -> Registration:
    registration = await _get_registration_row(db, registration_id)
    if registration.account_id != caller_id:
        logger.warning(
            "registration_permission_denied",
            registration_id=registration_id,
            caller_id=caller_id,
            action=action,
        )
        raise PermissionDeniedError(f"you don't have permission to {action} this registration")
    return registration


async def update_registration(
    db: AsyncSession,
    registration_id: int,
    registration_data: RegistrationRequest,
    caller_id: int,
) -> Registration:
    """
    Overwrite the event reference and names.
    Moving to a different event goes through the capacity, schedule and
    duplicate checks for the target event; keeping the same event does not.
    """
    if not registration_data.event_id or registration_data.event_id <= 0:
        raise ValidationError("event ID is required")

    registration = await _get_owned_registration(db, registration_id, caller_id, "update")
    event = await get_event(db, registration_data.event_id, for_update=True)

    if event.id != registration.event_id:
        await _check_admission(db, event, registration.account_id)

    registration.event_id = event.id
    registration.first_name = registration_data.first_name
    registration.last_name = registration_data.last_name
    try:
        await db.flush()
    except IntegrityError:
        raise DuplicateRegistrationError(ALREADY_REGISTERED)
    await db.refresh(registration)

    logger.info("registration_updated", registration_id=registration.id, event_id=event.id)
    return registration


async def delete_registration(db: AsyncSession, registration_id: int, caller_id: int) -> None:
    registration = await _get_owned_registration(db, registration_id, caller_id, "delete")
    await db.delete(registration)
    await db.flush()

    logger.info("registration_deleted", registration_id=registration_id, caller_id=caller_id)
