from __future__ import annotations

import logging

from journal_backend import repositories

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = {
    "daily_goal_minutes": 60,
    "daily_sentence_goal": 10,
    "theme": "light",
}


async def get_preferences(user_email: str) -> dict:
    stored = await repositories.get_user_settings(user_email)
    if not stored:
        return {**DEFAULT_PREFERENCES, "updated_at": None}
    return stored


async def update_preferences(user_email: str, changes: dict) -> dict:
    """Apply the provided fields on top of the current (or default) preferences."""
    current = await get_preferences(user_email)
    merged = {key: current.get(key, default) for key, default in DEFAULT_PREFERENCES.items()}
    merged.update({key: value for key, value in changes.items() if value is not None})
    saved = await repositories.save_user_settings(user_email, merged)
    logger.info("Preferences updated for %s: %s", user_email, sorted(changes))
    return saved
