"""
Account model with secure password storage.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from event_registry.db.base import Base, CreatedAtMixin


class Account(Base, CreatedAtMixin):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")

    events = relationship("Event", back_populates="creator", lazy="raise")

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, username={self.username})>"
