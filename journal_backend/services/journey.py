from __future__ import annotations

import logging

from journal_backend import repositories
from journal_backend.constants import ACTIVITY_COUNTERS, JOURNEY_LENGTH
from journal_backend.errors import PreconditionNotMetError
from journal_backend.services import progression
from journal_backend.services.activity import get_activity
from journal_backend.services.daily_tasks import all_tasks_completed
from journal_backend.services.locks import user_lock
from journal_backend.services.progression import DayThresholds, JourneyState
from journal_backend.settings import get_settings

logger = logging.getLogger(__name__)


async def ensure_journey(user_email: str, today_iso: str) -> JourneyState:
    row = await repositories.get_journey(user_email)
    if row:
        return JourneyState.from_row(row)
    state = progression.new_journey(today_iso)
    await repositories.save_journey(user_email, state.to_row())
    logger.info("Started journey for %s on %s", user_email, today_iso)
    return state


async def journey_status(user_email: str, today_iso: str) -> dict:
    state = await ensure_journey(user_email, today_iso)
    milestone = progression.next_milestone(state)
    return {
        "journey_start_date": state.start_date,
        "current_day": state.current_day,
        "completed_days": list(state.completed_days),
        "total_completed": len(state.completed_days),
        "percentage": progression.percentage(state),
        "journey_finished": state.finished,
        "next_milestone": milestone,
        "days_until_milestone": max(0, milestone - len(state.completed_days)),
        "journeys_completed": state.journeys_completed,
        "last_completed_date": state.last_completed_date,
        "today_completed": state.last_completed_date == today_iso,
        "today_activity": await get_activity(user_email, today_iso),
    }


def _merge_signals(ledger_row: dict, signals: dict) -> dict:
    merged = {key: int(ledger_row.get(key) or 0) for key in ACTIVITY_COUNTERS}
    for key, value in (signals or {}).items():
        if key in merged and value is not None:
            merged[key] = max(merged[key], int(value))
    return merged


async def complete_day(user_email: str, day_iso: str, signals: dict) -> dict:
    """Try to complete the current journey day for ``day_iso``.

    Unmet criteria come back as ``accepted: False`` with the criteria detail
    rather than as an error response.
    """
    thresholds = DayThresholds.from_settings(get_settings())
    async with user_lock(user_email):
        state = await ensure_journey(user_email, day_iso)
        ledger_row = await get_activity(user_email, day_iso)
        counters = _merge_signals(ledger_row, signals)
        tasks_done = await all_tasks_completed(user_email, day_iso)
        other_days = [row for row in await repositories.list_activity(user_email) if row["date"] != day_iso]
        already_special = progression.special_keys_met(other_days)
        try:
            new_state, result = progression.complete_day(
                state, day_iso, counters, tasks_done, thresholds, already_special, ledger_row
            )
        except PreconditionNotMetError as exc:
            return {
                "accepted": False,
                "day_completed": False,
                "reason": exc.code,
                "message": exc.message,
                "journey_day": state.current_day,
                "next_day": state.current_day,
                "milestone_reached": False,
                "achievements_unlocked": [],
                **exc.detail,
            }
        if new_state != state:
            await repositories.save_journey(user_email, new_state.to_row())

    if result["accepted"]:
        logger.info(
            "Journey day %s/%s completed for %s (%s)",
            result["journey_day"],
            JOURNEY_LENGTH,
            user_email,
            day_iso,
        )
        if result["milestone_reached"]:
            logger.info(
                "Milestone day %s reached by %s; unlocked %s",
                result["journey_day"],
                user_email,
                [ach["key"] for ach in result["achievements_unlocked"]],
            )
    return result


async def reset_journey(user_email: str, today_iso: str) -> dict:
    async with user_lock(user_email):
        row = await repositories.get_journey(user_email)
        previous = JourneyState.from_row(row) if row else None
        count = previous.journeys_completed if previous else 0
        if previous and previous.finished:
            count += 1
        state = progression.new_journey(today_iso, journeys_completed=count)
        await repositories.save_journey(user_email, state.to_row())
    logger.info("Journey reset for %s; journeys completed: %s", user_email, count)
    return {"new_journey_start_date": today_iso, "journeys_completed": count}


async def achievements(user_email: str, today_iso: str) -> dict:
    state = await ensure_journey(user_email, today_iso)
    return progression.achievement_board(state, await repositories.list_activity(user_email))


async def landmarks(user_email: str, today_iso: str) -> list[dict]:
    state = await ensure_journey(user_email, today_iso)
    return progression.landmark_board(state)
