from __future__ import annotations

import logging
from datetime import date, timedelta

from journal_backend import repositories
from journal_backend.db_init import VOCABULARY_TABLE
from journal_backend.errors import NotFoundError
from journal_backend.services import translation

logger = logging.getLogger(__name__)


async def vocabulary_stats(user_email: str, today: date) -> dict:
    total = await repositories.count_rows(user_email, VOCABULARY_TABLE)
    this_week = await repositories.count_rows(
        user_email, VOCABULARY_TABLE, (today - timedelta(days=7)).isoformat(), "first_seen"
    )
    this_month = await repositories.count_rows(
        user_email, VOCABULARY_TABLE, (today - timedelta(days=30)).isoformat(), "first_seen"
    )
    average_per_week = 0.0
    oldest = await repositories.oldest_vocabulary_date(user_email)
    if oldest and total:
        first_day = date.fromisoformat(oldest[:10])
        weeks = max(1.0, (today - first_day).days / 7)
        average_per_week = round(total / weeks, 1)
    return {
        "total": total,
        "this_week": this_week,
        "this_month": this_month,
        "average_per_week": average_per_week,
    }


async def word_meaning(user_email: str, word_id: str) -> dict:
    """Stored translation of a word, translating and saving it on first request."""
    word = await repositories.get_vocabulary_word(user_email, word_id)
    if not word:
        raise NotFoundError("Word not found", {"id": word_id})
    if word.get("translation"):
        return {"id": word_id, "word": word["word"], "translation": word["translation"], "cached": True}
    result = await translation.translate(word["word"], "de", "en")
    await repositories.set_vocabulary_translation(user_email, word_id, result["translated"])
    logger.info("Saved %s translation for word %s", result["provider"], word_id)
    return {"id": word_id, "word": word["word"], "translation": result["translated"], "cached": False}
