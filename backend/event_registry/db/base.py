"""
Declarative base and shared column mixins.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import DeclarativeBase

from event_registry.core.timestamps import utcnow_iso


class Base(DeclarativeBase):
    pass


class CreatedAtMixin:
    """Creation timestamp stored as an ISO-8601 UTC string."""

    created_at = Column(String(40), nullable=False, default=utcnow_iso)
