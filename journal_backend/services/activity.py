from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from journal_backend import repositories
from journal_backend.constants import ACTIVITY_COUNTERS
from journal_backend.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


def empty_activity(day_iso: str) -> dict:
    return {"date": day_iso, **{key: 0 for key in ACTIVITY_COUNTERS}, "updated_at": None}


async def record_activity(user_email: str, day_iso: str, minutes: int = 0, entries: int = 0, words: int = 0) -> dict:
    deltas = {"minutes": minutes or 0, "entries": entries or 0, "words": words or 0}
    negative = {key: value for key, value in deltas.items() if value < 0}
    if negative:
        raise ValidationError("Activity deltas must be non-negative", {"negative": negative})
    try:
        row = await repositories.add_activity(user_email, day_iso, **deltas)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to record activity", {"date": day_iso}) from exc
    logger.debug("Recorded activity for %s on %s: %s", user_email, day_iso, deltas)
    return row


async def get_activity(user_email: str, day_iso: str) -> dict:
    """Ledger row for the day; a missing row reads as all-zero counters."""
    try:
        row = await repositories.get_activity(user_email, day_iso)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to read activity", {"date": day_iso}) from exc
    return row or empty_activity(day_iso)
