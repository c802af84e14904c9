"""
Pydantic schemas for event-related request/response validation.

Business rules (non-empty title, positive seats, date tolerance) are
enforced in the event service so they surface as 400s with stable messages.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from event_registry.core.timestamps import parse_iso_or_none, parse_iso_or_now


class EventRequest(BaseModel):
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    event_type: str = Field(..., max_length=100)
    event_date: datetime
    seats: int


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    location: Optional[str]
    event_type: str
    # None when the stored date is unreadable; the row stays listable
    event_date: Optional[datetime]
    seats: int
    creator_id: int
    created_at: datetime
    registrations_count: int
    available_seats: int

    @field_validator("event_date", mode="before")
    @classmethod
    def _tolerate_bad_event_date(cls, value):
        if isinstance(value, datetime):
            return value
        return parse_iso_or_none(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def _tolerate_bad_created_at(cls, value):
        if isinstance(value, datetime):
            return value
        return parse_iso_or_now(value)

    @classmethod
    def from_event(cls, event, registrations_count: int) -> "EventResponse":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            location=event.location,
            event_type=event.event_type,
            event_date=event.event_date,
            seats=event.seats,
            creator_id=event.creator_id,
            created_at=event.created_at,
            registrations_count=registrations_count,
            available_seats=event.seats - registrations_count,
        )


class CreatedResponse(BaseModel):
    id: int


class MessageResponse(BaseModel):
    message: str
