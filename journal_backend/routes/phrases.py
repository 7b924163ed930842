from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from journal_backend import repositories
from journal_backend.auth import require_user_email
from journal_backend.errors import ConflictError, NotFoundError, TranslationError, ValidationError, ok
from journal_backend.schemas import PhraseCreate, PhraseUpdate
from journal_backend.services import translation
from journal_backend.services.locks import user_lock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/phrases")


@router.get("")
async def list_phrases(
    search: str | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    user_email: str = Depends(require_user_email),
):
    phrases = await repositories.list_phrases(user_email, search=search, limit=limit)
    return ok(phrases, count=len(phrases))


@router.post("")
async def add_phrase(payload: PhraseCreate, user_email: str = Depends(require_user_email)):
    english = payload.english.strip()
    if not english:
        raise ValidationError("English phrase cannot be empty")
    german = (payload.german or "").strip()
    if not german:
        try:
            german = (await translation.translate(english, "en", "de"))["translated"]
        except TranslationError as exc:
            raise TranslationError(
                "Failed to translate phrase. Please provide the German text manually.", exc.detail
            ) from exc
    examples = {"example_english": payload.example_english, "example_german": payload.example_german}
    if not examples["example_english"] or not examples["example_german"]:
        examples = await translation.example_sentences(english, german)

    async with user_lock(user_email):
        duplicate = await repositories.find_duplicate_phrase(user_email, english, german)
        if duplicate:
            raise ConflictError("This phrase already exists", {"id": duplicate["id"]})
        record = await repositories.create_phrase(
            user_email,
            english,
            german,
            meaning=payload.meaning or english,
            **examples,
        )
    logger.info("Phrase %s added for %s", record["id"], user_email)
    return ok(record)


@router.get("/{phrase_id}")
async def get_phrase(phrase_id: str, user_email: str = Depends(require_user_email)):
    record = await repositories.get_phrase(user_email, phrase_id)
    if not record:
        raise NotFoundError("Phrase not found", {"id": phrase_id})
    return ok(record)


@router.put("/{phrase_id}")
async def update_phrase(phrase_id: str, payload: PhraseUpdate, user_email: str = Depends(require_user_email)):
    english = payload.english.strip()
    german = payload.german.strip()
    if not english or not german:
        raise ValidationError("English and German text cannot be empty")
    async with user_lock(user_email):
        if not await repositories.get_phrase(user_email, phrase_id):
            raise NotFoundError("Phrase not found", {"id": phrase_id})
        duplicate = await repositories.find_duplicate_phrase(user_email, english, german, exclude_id=phrase_id)
        if duplicate:
            raise ConflictError("A phrase with this text already exists", {"id": duplicate["id"]})
        record = await repositories.update_phrase(
            user_email,
            phrase_id,
            {
                "english": english,
                "german": german,
                "meaning": payload.meaning or english,
                "example_english": payload.example_english,
                "example_german": payload.example_german,
            },
        )
    return ok(record)


@router.put("/{phrase_id}/review")
async def review_phrase(phrase_id: str, user_email: str = Depends(require_user_email)):
    record = await repositories.review_phrase(user_email, phrase_id)
    if not record:
        raise NotFoundError("Phrase not found", {"id": phrase_id})
    return ok(record)


@router.delete("/{phrase_id}")
async def delete_phrase(phrase_id: str, user_email: str = Depends(require_user_email)):
    if not await repositories.delete_phrase(user_email, phrase_id):
        raise NotFoundError("Phrase not found", {"id": phrase_id})
    return ok({"deleted": phrase_id})
