"""30-day journey progression and derived achievement state.

Only ``completed_days`` is persisted; unlocked landmarks and achievements are
recomputed from the static catalogs on every read.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping

from journal_backend.constants import (
    ACHIEVEMENTS,
    JOURNEY_FINISHED_DAY,
    JOURNEY_LENGTH,
    LANDMARKS,
    MILESTONE_DAYS,
)
from journal_backend.errors import PreconditionNotMetError


@dataclass(frozen=True)
class DayThresholds:
    min_minutes: int = 10
    min_entries: int = 1
    min_words: int = 5

    @classmethod
    def from_settings(cls, settings) -> "DayThresholds":
        return cls(
            min_minutes=settings.journey_min_minutes,
            min_entries=settings.journey_min_entries,
            min_words=settings.journey_min_words,
        )


@dataclass(frozen=True)
class JourneyState:
    start_date: str
    current_day: int = 1
    completed_days: tuple[int, ...] = field(default_factory=tuple)
    last_completed_date: str | None = None
    journeys_completed: int = 0

    @property
    def finished(self) -> bool:
        return self.current_day > JOURNEY_LENGTH

    def to_row(self) -> dict:
        return {
            "start_date": self.start_date,
            "current_day": self.current_day,
            "completed_days_json": json.dumps(list(self.completed_days)),
            "last_completed_date": self.last_completed_date,
            "journeys_completed": self.journeys_completed,
        }

    @classmethod
    def from_row(cls, row: Mapping) -> "JourneyState":
        try:
            days = json.loads(row.get("completed_days_json") or "[]")
        except (TypeError, ValueError):
            days = []
        completed = tuple(sorted({int(day) for day in days if 1 <= int(day) <= JOURNEY_LENGTH}))
        return cls(
            start_date=str(row["start_date"]),
            current_day=next_open_day(completed),
            completed_days=completed,
            last_completed_date=row.get("last_completed_date"),
            journeys_completed=int(row.get("journeys_completed") or 0),
        )


def new_journey(start_date: str, journeys_completed: int = 0) -> JourneyState:
    return JourneyState(start_date=start_date, journeys_completed=journeys_completed)


def next_open_day(completed_days: Iterable[int]) -> int:
    done = set(completed_days)
    for day in range(1, JOURNEY_LENGTH + 1):
        if day not in done:
            return day
    return JOURNEY_FINISHED_DAY


def percentage(state: JourneyState) -> int:
    return round(len(state.completed_days) / JOURNEY_LENGTH * 100)


def next_milestone(state: JourneyState) -> int:
    done = set(state.completed_days)
    return next((day for day in MILESTONE_DAYS if day not in done), JOURNEY_LENGTH)


def evaluate_criteria(counters: Mapping[str, int], all_tasks_completed: bool, thresholds: DayThresholds) -> dict:
    minutes = int(counters.get("minutes_practiced") or 0)
    entries = int(counters.get("entries_written") or 0)
    words = int(counters.get("words_learned") or 0)
    criteria = {
        "all_daily_tasks": {"met": bool(all_tasks_completed)},
        "minutes_practiced": {"value": minutes, "required": thresholds.min_minutes,
                              "met": minutes >= thresholds.min_minutes},
        "journal_entries": {"value": entries, "required": thresholds.min_entries,
                            "met": entries >= thresholds.min_entries},
        "vocabulary_added": {"value": words, "required": thresholds.min_words,
                             "met": words >= thresholds.min_words},
    }
    return {"met": any(item["met"] for item in criteria.values()), "criteria": criteria}


def _special_met(achievement: Mapping, counters: Mapping[str, int]) -> bool:
    threshold = achievement.get("threshold") or {}
    if not threshold:
        return False
    return int(counters.get(threshold["field"]) or 0) >= int(threshold["minimum"])


def special_keys_met(activity_rows: Iterable[Mapping]) -> set[str]:
    rows = list(activity_rows)
    return {
        ach["key"]
        for ach in ACHIEVEMENTS
        if ach["category"] == "special" and any(_special_met(ach, row) for row in rows)
    }


def achievements_for_day(day: int) -> list[dict]:
    return [dict(ach) for ach in ACHIEVEMENTS if ach.get("milestone_day") == day]


def achievement_board(state: JourneyState, activity_rows: Iterable[Mapping]) -> dict:
    done = set(state.completed_days)
    specials = special_keys_met(activity_rows)
    unlocked, locked = [], []
    for ach in ACHIEVEMENTS:
        if ach["category"] == "milestone":
            is_unlocked = ach["milestone_day"] in done
        else:
            is_unlocked = ach["key"] in specials
        (unlocked if is_unlocked else locked).append({**ach, "unlocked": is_unlocked})
    return {
        "unlocked": unlocked,
        "locked": locked,
        "total_unlocked": len(unlocked),
        "total_achievements": len(ACHIEVEMENTS),
    }


def landmark_board(state: JourneyState) -> list[dict]:
    done = set(state.completed_days)
    return [{**landmark, "unlocked": landmark["day_number"] in done} for landmark in LANDMARKS]


def complete_day(
    state: JourneyState,
    day_iso: str,
    counters: Mapping[str, int],
    all_tasks_completed: bool,
    thresholds: DayThresholds,
    specials_already_unlocked: set[str] | None = None,
    ledger_counters: Mapping[str, int] | None = None,
) -> tuple[JourneyState, dict]:
    """Try to mark the journey's current day complete for calendar date ``day_iso``.

    Returns the new state and the client-facing result. A repeated request for
    a date that already completed a day, or any request after the journey is
    finished, is a no-op with ``accepted: False``. Unmet criteria raise
    ``PreconditionNotMetError`` and leave the state untouched.

    ``counters`` decide the day criteria and may include client signals.
    Special achievements are judged on ``ledger_counters`` only, the stored
    row for ``day_iso``, so the reply agrees with ``achievement_board``.
    """
    if state.finished or (state.last_completed_date and day_iso <= state.last_completed_date):
        return state, {
            "accepted": False,
            "day_completed": False,
            "reason": "journey_finished" if state.finished else "already_completed",
            "journey_day": state.current_day,
            "next_day": state.current_day,
            "milestone_reached": False,
            "achievements_unlocked": [],
            "total_completed": len(state.completed_days),
            "percentage": percentage(state),
        }

    report = evaluate_criteria(counters, all_tasks_completed, thresholds)
    if not report["met"]:
        raise PreconditionNotMetError(
            "Keep going: complete all daily tasks, practice longer, write an entry or add more words.",
            {"journey_day": state.current_day, **report},
        )

    day = state.current_day
    completed = tuple(sorted(set(state.completed_days) | {day}))
    new_state = replace(
        state,
        completed_days=completed,
        current_day=next_open_day(completed),
        last_completed_date=day_iso,
    )

    milestone_reached = day in MILESTONE_DAYS
    unlocked = achievements_for_day(day) if milestone_reached else []
    already = specials_already_unlocked or set()
    stored = ledger_counters or {}
    for ach in ACHIEVEMENTS:
        if ach["category"] == "special" and ach["key"] not in already and _special_met(ach, stored):
            unlocked.append(dict(ach))

    landmark = next((dict(item) for item in LANDMARKS if item["day_number"] == day), None)
    return new_state, {
        "accepted": True,
        "day_completed": True,
        "journey_day": day,
        "next_day": new_state.current_day,
        "milestone_reached": milestone_reached,
        "achievements_unlocked": unlocked,
        "landmark_unlocked": landmark,
        "total_completed": len(completed),
        "percentage": percentage(new_state),
        "journey_finished": new_state.finished,
    }
