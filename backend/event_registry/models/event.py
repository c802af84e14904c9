"""
Event model with seat capacity.

Key design decisions:
- Only total `seats` is stored; availability is always derived from a live
  COUNT over registrations, so the two can never drift apart
- `event_date` is an ISO-8601 UTC string with fixed precision, so the
  expiry sweep can range-scan it with a plain string comparison
- Registrations are removed by ON DELETE CASCADE in the database
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from event_registry.core.timestamps import parse_iso
from event_registry.db.base import Base, CreatedAtMixin


class Event(Base, CreatedAtMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    event_type = Column(String(100), nullable=False)
    event_date = Column(String(40), nullable=False)
    seats = Column(Integer, nullable=False)
    creator_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)

    creator = relationship("Account", back_populates="events", lazy="raise")
    registrations = relationship(
        "Registration",
        back_populates="event",
        lazy="raise",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("seats > 0", name="check_event_seats_positive"),
        # Listing order and the expiry sweep both scan by date
        Index("ix_events_event_date", "event_date"),
        Index("ix_events_creator_date", "creator_id", "event_date"),
    )

    @property
    def scheduled_at(self) -> datetime:
        return parse_iso(self.event_date)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, seats={self.seats})>"
