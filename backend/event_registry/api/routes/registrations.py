"""
Registration endpoints. Creation goes through admission control.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_registry.db.session import get_db
from event_registry.schemas.event import CreatedResponse, MessageResponse
from event_registry.schemas.registration import RegistrationRequest, RegistrationResponse, RegistrationDetails
from event_registry.services.registration_service import (
    create_registration,
    delete_registration,
    get_registration,
    list_registrations,
    list_registrations_for_account,
    update_registration,
)
from event_registry.core.security import Identity, get_current_identity, get_current_user_id

router = APIRouter(prefix="/registrations", tags=["Registrations"])


@router.get("/", response_model=list[RegistrationResponse])
async def list_registrations_endpoint(
    event_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await list_registrations(db, event_id)


@router.get("/mine", response_model=list[RegistrationDetails])
async def list_my_registrations(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's registrations with event details, newest first."""
    return await list_registrations_for_account(db, user_id)


@router.get("/{registration_id}", response_model=RegistrationDetails)
async def get_registration_endpoint(registration_id: int, db: AsyncSession = Depends(get_db)):
    return await get_registration(db, registration_id)


@router.post("/", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_registration_endpoint(
    registration_data: RegistrationRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """
    Register the caller for an event.

    Fails with 409 when the event is fully booked or the caller is already
    registered, 400 for past events and 404 for unknown events.
    """
    registration = await create_registration(db, registration_data, identity)
    return CreatedResponse(id=registration.id)


@router.put("/{registration_id}", response_model=RegistrationResponse)
async def update_registration_endpoint(
    registration_id: int,
    registration_data: RegistrationRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await update_registration(db, registration_id, registration_data, user_id)


@router.delete("/{registration_id}", response_model=MessageResponse)
async def delete_registration_endpoint(
    registration_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await delete_registration(db, registration_id, user_id)
    return MessageResponse(message="Registration deleted successfully")
