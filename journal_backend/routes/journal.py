from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, Depends, Query

from journal_backend import clock, repositories
from journal_backend.auth import require_user_email
from journal_backend.errors import NotFoundError, ValidationError, ok
from journal_backend.schemas import JournalEntryCreate, JournalEntryPatch
from journal_backend.services.activity import record_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/journal")


@router.post("/entries")
async def create_entry(payload: JournalEntryCreate, user_email: str = Depends(require_user_email)):
    if not payload.english_text.strip() or not payload.german_text.strip():
        raise ValidationError("Both English and German text are required")
    record = await repositories.create_journal_entry(
        user_email, payload.english_text, payload.german_text, payload.session_duration
    )
    activity = await record_activity(
        user_email,
        clock.today().isoformat(),
        minutes=payload.session_duration,
        entries=1,
    )
    logger.info("Journal entry %s saved for %s", record["id"], user_email)
    record.pop("user_email", None)
    return ok(record, activity=activity)


@router.get("/entries")
async def list_entries(
    sort: str = Query("newest", pattern="^(newest|oldest)$"),
    limit: int = Query(50, ge=1, le=500),
    search: str | None = Query(None),
    user_email: str = Depends(require_user_email),
):
    return ok(await repositories.list_journal_entries(user_email, sort=sort, limit=limit, search=search))


@router.get("/entries/{entry_id}")
async def get_entry(entry_id: str, user_email: str = Depends(require_user_email)):
    record = await repositories.get_journal_entry(user_email, entry_id)
    if not record:
        raise NotFoundError("Journal entry not found", {"id": entry_id})
    return ok(record)


@router.put("/entries/{entry_id}")
async def update_entry(entry_id: str, payload: JournalEntryPatch, user_email: str = Depends(require_user_email)):
    patch = payload.model_dump(exclude_unset=True)
    if not patch:
        raise ValidationError("No changes provided")
    if not await repositories.get_journal_entry(user_email, entry_id):
        raise NotFoundError("Journal entry not found", {"id": entry_id})
    return ok(await repositories.update_journal_entry(user_email, entry_id, patch))


@router.delete("/entries/{entry_id}")
async def delete_entry(entry_id: str, user_email: str = Depends(require_user_email)):
    if not await repositories.delete_journal_entry(user_email, entry_id):
        raise NotFoundError("Journal entry not found", {"id": entry_id})
    return ok({"deleted": entry_id})


@router.get("/search")
async def search_entries(
    q: str | None = Query(None),
    start_date: dt.date | None = Query(None),
    end_date: dt.date | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    user_email: str = Depends(require_user_email),
):
    query = (q or "").strip()
    if not query and start_date is None and end_date is None:
        raise ValidationError("Provide a search term or a date range")
    if start_date and end_date and end_date < start_date:
        raise ValidationError(
            "end_date must not be before start_date",
            {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )
    entries = await repositories.search_journal_entries(
        user_email,
        query=query or None,
        start_iso=start_date.isoformat() if start_date else None,
        end_iso=end_date.isoformat() if end_date else None,
        limit=limit,
    )
    return ok(entries, count=len(entries))
