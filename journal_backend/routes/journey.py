from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends

from journal_backend import clock
from journal_backend.auth import require_user_email
from journal_backend.errors import ValidationError, ok
from journal_backend.schemas import ActivityUpdate, CompleteDayPayload
from journal_backend.services import journey
from journal_backend.services.activity import record_activity

router = APIRouter(prefix="/api/journey")


def _requested_day(value: Optional[dt.date]) -> str:
    today = clock.today()
    if value is None:
        return today.isoformat()
    if value > today:
        raise ValidationError(
            "Date cannot be in the future", {"date": value.isoformat(), "today": today.isoformat()}
        )
    return value.isoformat()


@router.get("/status")
async def journey_status(user_email: str = Depends(require_user_email)):
    return ok(await journey.journey_status(user_email, clock.today().isoformat()))


@router.post("/update-activity")
async def update_activity(payload: ActivityUpdate, user_email: str = Depends(require_user_email)):
    day_iso = _requested_day(payload.date)
    row = await record_activity(
        user_email,
        day_iso,
        minutes=payload.minutes_practiced,
        entries=payload.journal_entries,
        words=payload.vocabulary_added,
    )
    return ok(row)


@router.post("/complete-day")
async def complete_day(payload: CompleteDayPayload, user_email: str = Depends(require_user_email)):
    day_iso = _requested_day(payload.date)
    signals = {
        "minutes_practiced": payload.minutes_practiced,
        "words_learned": payload.vocabulary_added,
        "entries_written": payload.journal_entries,
    }
    return ok(await journey.complete_day(user_email, day_iso, signals))


@router.post("/reset")
async def reset_journey(user_email: str = Depends(require_user_email)):
    return ok(await journey.reset_journey(user_email, clock.today().isoformat()))


@router.get("/landmarks")
async def landmarks(user_email: str = Depends(require_user_email)):
    return ok(await journey.landmarks(user_email, clock.today().isoformat()))


@router.get("/achievements")
async def achievements(user_email: str = Depends(require_user_email)):
    return ok(await journey.achievements(user_email, clock.today().isoformat()))
