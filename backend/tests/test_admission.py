"""
Service-level tests for admission control and seat accounting.
"""

import pytest
from datetime import timedelta
from sqlalchemy import select, func

from event_registry.core.exceptions import (
    CapacityExceededError,
    DuplicateRegistrationError,
    NotFoundError,
    SchedulingError,
    ValidationError,
)
from event_registry.models import Registration
from event_registry.schemas.registration import RegistrationRequest, RegistrationResponse
from event_registry.services.event_service import available_seats, count_registrations, get_event
from event_registry.services.registration_service import (
    create_registration,
    delete_registration,
    split_display_name,
    update_registration,
)
from tests.conftest import identity_for, make_account, make_event


async def registration_rows(db_session, event_id) -> int:
    result = await db_session.execute(
        select(func.count(Registration.id)).where(Registration.event_id == event_id)
    )
    return result.scalar_one()


@pytest.mark.parametrize("display_name, expected", [
    ("Ada Lovelace", ("Ada", "Lovelace")),
    ("Grace Brewster Hopper", ("Grace", "Brewster Hopper")),
    ("Ada\tLovelace", ("Ada", "Lovelace")),
    ("prince", ("prince", "prince")),
    ("  Ada  ", ("Ada", "Ada")),
    ("   ", ("", "")),
])
def test_split_display_name(display_name, expected):
    assert split_display_name(display_name) == expected


@pytest.mark.asyncio
async def test_availability_tracks_creates_and_deletes(db_session, test_user):
    event = await make_event(db_session, test_user, seats=5)
    accounts = [await make_account(db_session, f"user{i}", f"user{i}@example.com") for i in range(3)]

    registrations = []
    for account in accounts:
        registrations.append(
            await create_registration(db_session, RegistrationRequest(event_id=event.id), identity_for(account))
        )
        registered = await count_registrations(db_session, event.id)
        assert available_seats(event.seats, registered) == event.seats - await registration_rows(db_session, event.id)

    await delete_registration(db_session, registrations[0].id, accounts[0].id)
    assert await count_registrations(db_session, event.id) == 2
    assert available_seats(event.seats, 2) == 3


@pytest.mark.asyncio
async def test_full_event_inserts_nothing(db_session, test_user, other_user, single_seat_event):
    await create_registration(
        db_session, RegistrationRequest(event_id=single_seat_event.id), identity_for(test_user)
    )

    with pytest.raises(CapacityExceededError, match="event is fully booked"):
        await create_registration(
            db_session, RegistrationRequest(event_id=single_seat_event.id), identity_for(other_user)
        )
    assert await registration_rows(db_session, single_seat_event.id) == 1


@pytest.mark.asyncio
async def test_seat_taken_between_check_and_insert(db_session, test_user, other_user, single_seat_event, monkeypatch):
    """The conditional insert refuses the seat even when the earlier count was stale."""
    from event_registry.services import registration_service

    await create_registration(
        db_session, RegistrationRequest(event_id=single_seat_event.id), identity_for(other_user)
    )

    async def stale_count(db, event_id):
        return 0

    monkeypatch.setattr(registration_service, "count_registrations", stale_count)

    with pytest.raises(CapacityExceededError, match="event is fully booked"):
        await create_registration(
            db_session, RegistrationRequest(event_id=single_seat_event.id), identity_for(test_user)
        )
    assert await registration_rows(db_session, single_seat_event.id) == 1


@pytest.mark.asyncio
async def test_capacity_checked_before_schedule(db_session, test_user, other_user):
    """A full past event reports capacity first; admission order is fixed."""
    event = await make_event(db_session, test_user, starts_in=-timedelta(minutes=5), seats=1)
    db_session.add(Registration(event_id=event.id, account_id=test_user.id, first_name="a", last_name="b"))
    await db_session.commit()

    with pytest.raises(CapacityExceededError):
        await create_registration(db_session, RegistrationRequest(event_id=event.id), identity_for(other_user))


@pytest.mark.asyncio
async def test_past_event_rejected_regardless_of_capacity(db_session, test_user, past_event):
    with pytest.raises(SchedulingError, match="cannot register for a past event"):
        await create_registration(db_session, RegistrationRequest(event_id=past_event.id), identity_for(test_user))
    assert await registration_rows(db_session, past_event.id) == 0


@pytest.mark.asyncio
async def test_duplicate_registration_rejected(db_session, test_user, test_event):
    identity = identity_for(test_user)
    await create_registration(db_session, RegistrationRequest(event_id=test_event.id), identity)

    with pytest.raises(DuplicateRegistrationError):
        await create_registration(db_session, RegistrationRequest(event_id=test_event.id), identity)
    assert await registration_rows(db_session, test_event.id) == 1


@pytest.mark.asyncio
async def test_missing_event_reference(db_session, test_user):
    with pytest.raises(ValidationError, match="event ID is required"):
        await create_registration(db_session, RegistrationRequest(), identity_for(test_user))


@pytest.mark.asyncio
async def test_unknown_event(db_session, test_user):
    with pytest.raises(NotFoundError, match="event not found"):
        await create_registration(db_session, RegistrationRequest(event_id=424242), identity_for(test_user))


@pytest.mark.asyncio
async def test_anonymous_registrations_keep_request_names(db_session, test_event):
    """Without an account, names come from the request and duplicates are allowed."""
    request = RegistrationRequest(event_id=test_event.id, first_name="Walk", last_name="In")
    first = await create_registration(db_session, request)
    second = await create_registration(db_session, request)

    assert first.account_id is None
    assert (first.first_name, first.last_name) == ("Walk", "In")
    assert second.id != first.id


@pytest.mark.asyncio
async def test_unparseable_created_at_reads_as_now(db_session, test_event):
    registration = Registration(
        event_id=test_event.id, account_id=None, first_name="a", last_name="b", created_at="not a date"
    )
    db_session.add(registration)
    await db_session.commit()

    response = RegistrationResponse.model_validate(registration)
    assert response.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_moving_to_full_event_is_checked(db_session, test_user, other_user, test_event, single_seat_event):
    await create_registration(
        db_session, RegistrationRequest(event_id=single_seat_event.id), identity_for(other_user)
    )
    mine = await create_registration(
        db_session, RegistrationRequest(event_id=test_event.id), identity_for(test_user)
    )

    with pytest.raises(CapacityExceededError):
        await update_registration(
            db_session, mine.id, RegistrationRequest(event_id=single_seat_event.id), test_user.id
        )


@pytest.mark.asyncio
async def test_moving_to_open_event(db_session, test_user, test_event, single_seat_event):
    mine = await create_registration(
        db_session, RegistrationRequest(event_id=test_event.id), identity_for(test_user)
    )

    updated = await update_registration(
        db_session,
        mine.id,
        RegistrationRequest(event_id=single_seat_event.id, first_name="T", last_name="U"),
        test_user.id,
    )
    assert updated.event_id == single_seat_event.id
    assert await count_registrations(db_session, test_event.id) == 0
    assert await count_registrations(db_session, single_seat_event.id) == 1


@pytest.mark.asyncio
async def test_update_in_place_skips_admission(db_session, test_user, other_user, single_seat_event):
    """Renaming a registration on a now-full event still succeeds."""
    mine = await create_registration(
        db_session, RegistrationRequest(event_id=single_seat_event.id), identity_for(test_user)
    )

    updated = await update_registration(
        db_session,
        mine.id,
        RegistrationRequest(event_id=single_seat_event.id, first_name="New", last_name="Name"),
        test_user.id,
    )
    assert updated.first_name == "New"
    event = await get_event(db_session, single_seat_event.id)
    assert event.seats == 1
