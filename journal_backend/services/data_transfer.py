"""Backup import for the export produced by ``repositories.export_user_data``.

``merge`` keeps existing rows and skips anything already present (same id,
same word, same phrase text). ``replace`` clears the learner's data first.
Ledger rows are merged with ``max`` per counter so re-importing a backup
never inflates or lowers a day's activity.
"""
from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from journal_backend import repositories
from journal_backend.constants import ACTIVITY_COUNTERS
from journal_backend.schemas import (
    DataImport,
    ImportedActivity,
    ImportedJournalEntry,
    ImportedNote,
    ImportedPhrase,
    ImportedWord,
    UserSettingsUpdate,
)
from journal_backend.services.activity import get_activity, record_activity
from journal_backend.services.locks import user_lock
from journal_backend.services.preferences import update_preferences
from journal_backend.services.progression import JourneyState

logger = logging.getLogger(__name__)


def _error(kind: str, index: int, exc: PydanticValidationError) -> str:
    fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
    return f"{kind}[{index}]: invalid {fields}"


async def _import_activity(user_email: str, rows: list[dict], errors: list[str]) -> int:
    imported = 0
    for index, raw in enumerate(rows):
        try:
            item = ImportedActivity.model_validate(raw)
        except PydanticValidationError as exc:
            errors.append(_error("activity", index, exc))
            continue
        day_iso = item.date.isoformat()
        existing = await get_activity(user_email, day_iso)
        deltas = {key: max(0, getattr(item, key) - int(existing.get(key) or 0)) for key in ACTIVITY_COUNTERS}
        await record_activity(
            user_email,
            day_iso,
            minutes=deltas["minutes_practiced"],
            entries=deltas["entries_written"],
            words=deltas["words_learned"],
        )
        imported += 1
    return imported


async def _import_journal(user_email: str, rows: list[dict], errors: list[str]) -> int:
    imported = 0
    for index, raw in enumerate(rows):
        try:
            item = ImportedJournalEntry.model_validate(raw)
        except PydanticValidationError as exc:
            errors.append(_error("journal_entries", index, exc))
            continue
        if item.id and await repositories.get_journal_entry(user_email, item.id):
            continue
        await repositories.create_journal_entry(
            user_email,
            item.english_text,
            item.german_text,
            item.session_minutes,
            created_at=item.created_at,
            entry_id=item.id,
        )
        imported += 1
    return imported


async def _import_vocabulary(user_email: str, rows: list[dict], errors: list[str]) -> int:
    imported = 0
    for index, raw in enumerate(rows):
        try:
            item = ImportedWord.model_validate(raw)
        except PydanticValidationError as exc:
            errors.append(_error("vocabulary", index, exc))
            continue
        if await repositories.get_vocabulary_by_word(user_email, item.word):
            continue
        await repositories.add_vocabulary_word(
            user_email, item.word, item.translation, item.context, first_seen=item.first_seen
        )
        imported += 1
    return imported


async def _import_phrases(user_email: str, rows: list[dict], errors: list[str]) -> int:
    imported = 0
    for index, raw in enumerate(rows):
        try:
            item = ImportedPhrase.model_validate(raw)
        except PydanticValidationError as exc:
            errors.append(_error("phrases", index, exc))
            continue
        if await repositories.find_duplicate_phrase(user_email, item.english, item.german):
            continue
        await repositories.create_phrase(
            user_email,
            item.english,
            item.german,
            meaning=item.meaning,
            example_english=item.example_english,
            example_german=item.example_german,
            times_reviewed=item.times_reviewed,
            created_at=item.created_at,
        )
        imported += 1
    return imported


async def _import_notes(user_email: str, rows: list[dict], errors: list[str]) -> int:
    imported = 0
    for index, raw in enumerate(rows):
        try:
            item = ImportedNote.model_validate(raw)
        except PydanticValidationError as exc:
            errors.append(_error("notes", index, exc))
            continue
        if item.id and await repositories.get_note(user_email, item.id):
            continue
        await repositories.create_note(user_email, item.title, item.content, item.created_at, item.id)
        imported += 1
    return imported


async def _import_journey(user_email: str, row: dict | None, replace: bool, errors: list[str]) -> bool:
    if not row:
        return False
    if not replace and await repositories.get_journey(user_email):
        return False
    try:
        state = JourneyState.from_row(row)
    except (KeyError, TypeError, ValueError) as exc:
        errors.append(f"journey: {exc}")
        return False
    await repositories.save_journey(user_email, state.to_row())
    return True


async def _import_settings(user_email: str, raw: dict | None, errors: list[str]) -> bool:
    if not raw:
        return False
    try:
        changes = UserSettingsUpdate.model_validate(raw).model_dump(exclude_none=True)
    except PydanticValidationError as exc:
        errors.append(_error("settings", 0, exc))
        return False
    if not changes:
        return False
    await update_preferences(user_email, changes)
    return True


async def import_user_data(user_email: str, payload: DataImport) -> dict:
    bundle = payload.data
    replace = payload.mode == "replace"
    errors: list[str] = []
    async with user_lock(user_email):
        if replace:
            await repositories.clear_user_data(user_email)
        imported = {
            "activity": await _import_activity(user_email, bundle.activity, errors),
            "journal_entries": await _import_journal(user_email, bundle.journal_entries, errors),
            "vocabulary": await _import_vocabulary(user_email, bundle.vocabulary, errors),
            "phrases": await _import_phrases(user_email, bundle.phrases, errors),
            "notes": await _import_notes(user_email, bundle.notes, errors),
            "journey": await _import_journey(user_email, bundle.journey, replace, errors),
            "settings": await _import_settings(user_email, bundle.settings, errors),
        }
    logger.info("Imported backup for %s (%s): %s, %s errors", user_email, payload.mode, imported, len(errors))
    return {"mode": payload.mode, "imported": imported, "errors": errors}
