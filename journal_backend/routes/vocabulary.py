from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from journal_backend import clock, repositories
from journal_backend.auth import require_user_email
from journal_backend.errors import NotFoundError, TranslationError, ValidationError, ok
from journal_backend.schemas import VocabularyCreate
from journal_backend.services import translation
from journal_backend.services import vocabulary as vocabulary_service
from journal_backend.services.activity import record_activity
from journal_backend.services.locks import user_lock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vocabulary")


@router.post("")
async def add_word(payload: VocabularyCreate, user_email: str = Depends(require_user_email)):
    word = " ".join(payload.word.split())
    if not word:
        raise ValidationError("Word cannot be empty")
    meaning = payload.translation
    if not meaning and payload.auto_translate:
        try:
            meaning = (await translation.translate(word, "de", "en"))["translated"]
        except TranslationError as exc:
            # Word is still saved; it just stays untranslated.
            logger.warning("Auto-translation failed for %r: %s", word, exc.message)
    async with user_lock(user_email):
        record, created = await repositories.add_vocabulary_word(
            user_email, word, meaning, payload.context, payload.source_entry_id
        )
    activity = None
    if created:
        activity = await record_activity(user_email, clock.today().isoformat(), words=1)
    return ok(record, created=created, activity=activity)


@router.get("")
async def list_words(
    search: str | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    user_email: str = Depends(require_user_email),
):
    return ok(await repositories.list_vocabulary(user_email, search=search, limit=limit))


@router.get("/stats")
async def word_stats(user_email: str = Depends(require_user_email)):
    return ok(await vocabulary_service.vocabulary_stats(user_email, clock.today()))


@router.get("/{word_id}/meaning")
async def word_meaning(word_id: str, user_email: str = Depends(require_user_email)):
    return ok(await vocabulary_service.word_meaning(user_email, word_id))


@router.put("/{word_id}/review")
async def review_word(word_id: str, user_email: str = Depends(require_user_email)):
    record = await repositories.mark_vocabulary_reviewed(user_email, word_id)
    if not record:
        raise NotFoundError("Word not found", {"id": word_id})
    return ok(record)


@router.delete("/{word_id}")
async def delete_word(word_id: str, user_email: str = Depends(require_user_email)):
    if not await repositories.delete_vocabulary_word(user_email, word_id):
        raise NotFoundError("Word not found", {"id": word_id})
    return ok({"deleted": word_id})
