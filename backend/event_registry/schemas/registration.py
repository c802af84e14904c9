"""
Pydantic schemas for registration-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from event_registry.core.timestamps import parse_iso_or_none, parse_iso_or_now


class RegistrationRequest(BaseModel):
    # Presence is checked by admission control, not here
    event_id: Optional[int] = None
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    notes: Optional[str] = None


class RegistrationResponse(BaseModel):
    id: int
    event_id: int
    account_id: Optional[int]
    first_name: str
    last_name: str
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("created_at", mode="before")
    @classmethod
    def _tolerate_bad_timestamp(cls, value):
        if isinstance(value, datetime):
            return value
        return parse_iso_or_now(value)


class RegistrationDetails(RegistrationResponse):
    """A registration joined with the event it belongs to."""

    event_title: str
    event_type: str
    event_date: Optional[datetime]
    event_description: Optional[str] = None
    event_location: Optional[str] = None

    @field_validator("event_date", mode="before")
    @classmethod
    def _tolerate_bad_event_date(cls, value):
        if isinstance(value, datetime):
            return value
        return parse_iso_or_none(value)
