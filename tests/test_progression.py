"""Journey progression: day completion, idempotency, milestones and derived unlocks."""
from datetime import date, timedelta

import pytest

from journal_backend.errors import PreconditionNotMetError
from journal_backend.services import progression
from journal_backend.services.progression import DayThresholds, JourneyState

THRESHOLDS = DayThresholds()
START = date(2024, 3, 1)
ENOUGH = {"minutes_practiced": 15, "entries_written": 0, "words_learned": 0}
NOTHING = {"minutes_practiced": 0, "entries_written": 0, "words_learned": 0}


def _day(offset: int) -> str:
    return (START + timedelta(days=offset)).isoformat()


def _journey_with(completed: int) -> JourneyState:
    days = tuple(range(1, completed + 1))
    return JourneyState(
        start_date=_day(0),
        current_day=progression.next_open_day(days),
        completed_days=days,
        last_completed_date=_day(completed - 1) if completed else None,
    )


def test_fresh_journey_first_day():
    state = progression.new_journey(_day(0))
    new_state, result = progression.complete_day(state, _day(0), ENOUGH, False, THRESHOLDS)
    assert result["accepted"] is True
    assert result["day_completed"] is True
    assert result["next_day"] == 2
    assert result["milestone_reached"] is False
    assert new_state.completed_days == (1,)
    assert new_state.current_day == 2


def test_unmet_criteria_raise_without_state_change():
    state = progression.new_journey(_day(0))
    with pytest.raises(PreconditionNotMetError) as excinfo:
        progression.complete_day(state, _day(0), NOTHING, False, THRESHOLDS)
    detail = excinfo.value.detail
    assert detail["met"] is False
    assert detail["criteria"]["minutes_practiced"]["required"] == 10


@pytest.mark.parametrize(
    "counters,tasks_done",
    [
        ({"minutes_practiced": 10}, False),
        ({"entries_written": 1}, False),
        ({"words_learned": 5}, False),
        ({}, True),
    ],
)
def test_each_criterion_is_sufficient(counters, tasks_done):
    state = progression.new_journey(_day(0))
    _, result = progression.complete_day(state, _day(0), counters, tasks_done, THRESHOLDS)
    assert result["accepted"] is True


def test_second_completion_same_date_is_noop():
    state = progression.new_journey(_day(0))
    state, _ = progression.complete_day(state, _day(0), ENOUGH, False, THRESHOLDS)
    for _ in range(2):
        again, result = progression.complete_day(state, _day(0), ENOUGH, False, THRESHOLDS)
        assert result["accepted"] is False
        assert result["day_completed"] is False
        assert again is state
    assert state.current_day == 2


def test_milestone_day_seven_unlocks_catalog_entries():
    state = _journey_with(6)
    new_state, result = progression.complete_day(state, _day(6), ENOUGH, False, THRESHOLDS)
    assert result["journey_day"] == 7
    assert result["milestone_reached"] is True
    keys = {ach["key"] for ach in result["achievements_unlocked"]}
    assert keys == {"day_7_milestone"}
    assert result["landmark_unlocked"]["key"] == "grammar_fort"

    _, result = progression.complete_day(new_state, _day(7), ENOUGH, False, THRESHOLDS)
    assert result["journey_day"] == 8
    assert result["milestone_reached"] is False
    assert result["achievements_unlocked"] == []


def test_day_thirty_finishes_journey():
    state = _journey_with(29)
    new_state, result = progression.complete_day(state, _day(29), ENOUGH, False, THRESHOLDS)
    assert result["next_day"] == 31
    assert result["journey_finished"] is True
    assert {ach["key"] for ach in result["achievements_unlocked"]} == {"day_30_milestone", "first_journey_complete"}
    assert new_state.finished

    _, result = progression.complete_day(new_state, _day(30), ENOUGH, False, THRESHOLDS)
    assert result["accepted"] is False
    assert result["reason"] == "journey_finished"


def test_special_achievement_only_reported_once():
    state = progression.new_journey(_day(0))
    counters = {"minutes_practiced": 55}
    _, result = progression.complete_day(state, _day(0), counters, False, THRESHOLDS, ledger_counters=counters)
    assert [ach["key"] for ach in result["achievements_unlocked"]] == ["dedicated_learner"]

    _, result = progression.complete_day(
        state,
        _day(0),
        counters,
        False,
        THRESHOLDS,
        specials_already_unlocked={"dedicated_learner"},
        ledger_counters=counters,
    )
    assert result["achievements_unlocked"] == []


def test_specials_ignore_counters_missing_from_ledger():
    state = progression.new_journey(_day(0))
    client_counters = {"minutes_practiced": 60, "entries_written": 0, "words_learned": 0}
    new_state, result = progression.complete_day(
        state, _day(0), client_counters, False, THRESHOLDS, ledger_counters={}
    )
    assert result["accepted"] is True
    assert result["achievements_unlocked"] == []
    board = progression.achievement_board(new_state, [])
    assert "dedicated_learner" not in {ach["key"] for ach in board["unlocked"]}


def test_achievement_board_is_derived():
    state = _journey_with(14)
    board = progression.achievement_board(state, [{"words_learned": 25}])
    unlocked = {ach["key"] for ach in board["unlocked"]}
    assert unlocked == {"day_7_milestone", "day_14_milestone", "word_hoarder"}
    assert board["total_unlocked"] + len(board["locked"]) == board["total_achievements"]


def test_landmark_board():
    board = progression.landmark_board(_journey_with(7))
    assert [item["unlocked"] for item in board] == [True, False, False, False]


def test_state_row_round_trip():
    state = _journey_with(9)
    restored = JourneyState.from_row(state.to_row())
    assert restored == state
    assert restored.current_day == 10


def test_current_day_is_smallest_gap():
    assert progression.next_open_day([1, 2, 4]) == 3
    assert progression.next_open_day(range(1, 31)) == 31
