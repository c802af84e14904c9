"""
Expiry sweeper: removes events whose scheduled date has passed.

Runs in two places:
  - Opportunistically before every event listing
  - On a fixed interval from a background task started with the app

Each deletion runs in its own SAVEPOINT. A row that fails to parse or
delete is logged and skipped; the rest of the sweep carries on, so
partial progress is normal.
"""

import asyncio
from datetime import datetime
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from event_registry.models.event import Event
from event_registry.core.logging import get_logger
from event_registry.core.metrics import record_sweep, sweep_failures
from event_registry.core.timestamps import parse_iso, to_iso, utcnow

logger = get_logger(__name__)


async def sweep_expired_events(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Delete every event dated strictly before `now`. Returns how many were removed."""
    now = now or utcnow()

    result = await db.execute(
        select(Event.id, Event.title, Event.event_date).where(Event.event_date < to_iso(now))
    )

    expired = []
    for event_id, title, raw_date in result.all():
        # Stored strings are re-parsed before anything is deleted
        try:
            event_date = parse_iso(raw_date)
        except ValueError as e:
            sweep_failures.inc()
            logger.warning("expired_event_unparseable", event_id=event_id, event_date=raw_date, error=str(e))
            continue

        if event_date < now:
            expired.append(event_id)
            logger.info("expired_event_found", event_id=event_id, title=title, event_date=raw_date)

    if not expired:
        return 0

    removed = 0
    for event_id in expired:
        try:
            async with db.begin_nested():
                await db.execute(delete(Event).where(Event.id == event_id))
        except SQLAlchemyError as e:
            sweep_failures.inc()
            logger.error("expired_event_delete_failed", event_id=event_id, error=str(e))
            continue
        removed += 1

    logger.info("expired_events_deleted", removed=removed, candidates=len(expired))
    return removed


async def run_expiry_sweeper(session_factory: async_sessionmaker, interval_seconds: float) -> None:
    """
    Sweep now, then once every `interval_seconds`, for the life of the process.
    A failed pass is logged and retried on the next tick.
    """
    logger.info("expiry_sweeper_started", interval_seconds=interval_seconds)
    while True:
        try:
            async with session_factory() as session:
                removed = await sweep_expired_events(session)
                await session.commit()
            record_sweep("scheduled", removed)
        except Exception as e:
            logger.error("expiry_sweep_failed", trigger="scheduled", error=str(e))

        await asyncio.sleep(interval_seconds)
