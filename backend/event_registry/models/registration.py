"""
Registration model: one person's place at one event.

Key design decisions:
- account_id is nullable so anonymous registrations are possible
- Unique constraint on (event_id, account_id) backs the duplicate check;
  NULL account ids never collide with each other
- event_id cascades on delete so removing an event clears its registrations
"""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from event_registry.db.base import Base, CreatedAtMixin


class Registration(Base, CreatedAtMixin):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    event = relationship("Event", back_populates="registrations", lazy="raise")

    __table_args__ = (
        UniqueConstraint("event_id", "account_id", name="uq_registration_event_account"),
    )

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, event={self.event_id}, account={self.account_id})>"
