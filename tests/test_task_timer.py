"""Daily task timer state machine, driven by a simulated wall clock."""
import pytest

from journal_backend.errors import ConflictError, InvalidStateError
from journal_backend.services import task_timer
from journal_backend.services.task_timer import TaskState

MINUTE_MS = 60_000
T0 = 1_700_000_000_000


def _states(**overrides):
    states = {key: TaskState(key) for key in ("read", "write", "listen")}
    states.update(overrides)
    return states


def test_start_sets_in_progress_and_anchor():
    state = task_timer.start(_states(), "read", T0)
    assert state.status == task_timer.IN_PROGRESS
    assert state.start_epoch_ms == T0
    assert task_timer.elapsed_seconds(state, T0 + 2 * MINUTE_MS) == 120


def test_only_one_task_in_progress():
    read = task_timer.start(_states(), "read", T0)
    with pytest.raises(ConflictError) as excinfo:
        task_timer.start(_states(read=read), "write", T0 + MINUTE_MS)
    assert excinfo.value.detail["active_task"] == "read"

    paused = task_timer.pause(read, T0 + MINUTE_MS)
    write = task_timer.start(_states(read=paused), "write", T0 + MINUTE_MS)
    assert write.status == task_timer.IN_PROGRESS


def test_start_after_completion_is_conflict():
    done = TaskState("read", status=task_timer.COMPLETED, accumulated_seconds=600)
    with pytest.raises(ConflictError):
        task_timer.start(_states(read=done), "read", T0)


def test_pause_requires_in_progress():
    with pytest.raises(InvalidStateError):
        task_timer.pause(TaskState("read"), T0)


def test_resume_requires_paused():
    with pytest.raises(InvalidStateError):
        task_timer.resume(_states(), "read", T0)


def test_resume_blocked_while_other_task_runs():
    paused = task_timer.pause(task_timer.start(_states(), "read", T0), T0 + MINUTE_MS)
    write = task_timer.start(_states(read=paused), "write", T0 + MINUTE_MS)
    with pytest.raises(ConflictError):
        task_timer.resume(_states(read=paused, write=write), "read", T0 + 2 * MINUTE_MS)


def test_paused_interval_excluded_from_elapsed_time():
    target = 10
    state = task_timer.start(_states(), "read", T0)
    now = T0 + 3 * MINUTE_MS
    state = task_timer.pause(state, now)
    assert state.accumulated_seconds == 180

    now += 5 * MINUTE_MS
    assert task_timer.elapsed_seconds(state, now) == 180
    state = task_timer.resume(_states(read=state), "read", now)
    assert task_timer.elapsed_seconds(state, now) == 180

    now += 6 * MINUTE_MS
    state, done = task_timer.tick(state, target, now)
    assert not done
    assert state.status == task_timer.IN_PROGRESS

    now += 1 * MINUTE_MS
    state, done = task_timer.tick(state, target, now)
    assert done
    assert state.status == task_timer.COMPLETED
    assert state.completed_at is not None


def test_tick_after_completion_is_noop():
    done = TaskState("read", status=task_timer.COMPLETED, accumulated_seconds=600)
    state, just_completed = task_timer.tick(done, 10, T0)
    assert state == done
    assert not just_completed


def test_complete_before_target_is_conflict():
    state = task_timer.start(_states(), "read", T0)
    with pytest.raises(ConflictError) as excinfo:
        task_timer.complete(state, 10, T0 + 4 * MINUTE_MS)
    assert excinfo.value.detail["remaining_seconds"] == 360


def test_complete_not_started_is_invalid():
    with pytest.raises(InvalidStateError):
        task_timer.complete(TaskState("read"), 10, T0)


def test_complete_from_paused_when_target_reached():
    state = task_timer.pause(task_timer.start(_states(), "read", T0), T0 + 10 * MINUTE_MS)
    completed = task_timer.complete(state, 10, T0 + 30 * MINUTE_MS)
    assert completed.status == task_timer.COMPLETED


def test_row_round_trip_preserves_elapsed_time():
    state = task_timer.start(_states(), "listen", T0)
    state = task_timer.pause(state, T0 + 4 * MINUTE_MS)
    state = task_timer.resume(_states(listen=state), "listen", T0 + 9 * MINUTE_MS)

    restored = TaskState.from_row(state.to_row())
    later = T0 + 12 * MINUTE_MS
    assert restored == state
    assert task_timer.elapsed_seconds(restored, later) == task_timer.elapsed_seconds(state, later) == 420


def test_all_completed():
    keys = ["read", "write"]
    done = TaskState("read", status=task_timer.COMPLETED)
    assert not task_timer.all_completed({"read": done}, keys)
    assert task_timer.all_completed({"read": done, "write": TaskState("write", status=task_timer.COMPLETED)}, keys)
    assert not task_timer.all_completed({}, [])
