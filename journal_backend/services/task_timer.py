"""Per-day task timer state machine.

``not_started -> in_progress -> completed`` with ``in_progress <-> paused``.
Elapsed time is always derived from the wall clock (``now - start_epoch``),
never from counted ticks, so a client that was suspended or reloaded gets the
right answer the next time it asks.
"""
from __future__ import annotations

from dataclasses import dataclass, replace, asdict
from datetime import datetime, timezone
from typing import Mapping

from journal_backend.errors import ConflictError, InvalidStateError

NOT_STARTED = "not_started"
IN_PROGRESS = "in_progress"
PAUSED = "paused"
COMPLETED = "completed"


@dataclass(frozen=True)
class TaskState:
    task_key: str
    status: str = NOT_STARTED
    start_epoch_ms: int | None = None
    accumulated_seconds: float = 0.0
    completed_at: str | None = None

    def to_row(self) -> dict:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Mapping) -> "TaskState":
        start_epoch = row.get("start_epoch_ms")
        return cls(
            task_key=str(row["task_key"]),
            status=str(row.get("status") or NOT_STARTED),
            start_epoch_ms=int(start_epoch) if start_epoch is not None else None,
            accumulated_seconds=float(row.get("accumulated_seconds") or 0.0),
            completed_at=row.get("completed_at"),
        )


def _iso_from_ms(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).isoformat()


def elapsed_seconds(state: TaskState, now_ms: int) -> float:
    if state.status == IN_PROGRESS and state.start_epoch_ms is not None:
        return max(0.0, (now_ms - state.start_epoch_ms) / 1000)
    return state.accumulated_seconds


def remaining_seconds(state: TaskState, target_minutes: int, now_ms: int) -> float:
    if state.status == COMPLETED:
        return 0.0
    return max(0.0, target_minutes * 60 - elapsed_seconds(state, now_ms))


def active_task_key(states: Mapping[str, TaskState], exclude: str | None = None) -> str | None:
    for key, state in states.items():
        if key != exclude and state.status == IN_PROGRESS:
            return key
    return None


def start(states: Mapping[str, TaskState], task_key: str, now_ms: int) -> TaskState:
    state = states.get(task_key) or TaskState(task_key)
    if state.status == COMPLETED:
        raise ConflictError("Task already completed today", {"task_key": task_key})
    if state.status == IN_PROGRESS:
        raise ConflictError("Task already in progress", {"task_key": task_key})
    if state.status == PAUSED:
        raise ConflictError("Task is paused, resume it instead", {"task_key": task_key})
    active = active_task_key(states, exclude=task_key)
    if active:
        raise ConflictError("Another task is in progress", {"task_key": task_key, "active_task": active})
    return replace(state, status=IN_PROGRESS, start_epoch_ms=now_ms, accumulated_seconds=0.0)


def pause(state: TaskState, now_ms: int) -> TaskState:
    if state.status != IN_PROGRESS:
        raise InvalidStateError("Task is not in progress", {"task_key": state.task_key, "status": state.status})
    return replace(state, status=PAUSED, accumulated_seconds=elapsed_seconds(state, now_ms))


def resume(states: Mapping[str, TaskState], task_key: str, now_ms: int) -> TaskState:
    state = states.get(task_key) or TaskState(task_key)
    if state.status != PAUSED:
        raise InvalidStateError("Task is not paused", {"task_key": task_key, "status": state.status})
    active = active_task_key(states, exclude=task_key)
    if active:
        raise ConflictError("Another task is in progress", {"task_key": task_key, "active_task": active})
    start_epoch = now_ms - int(round(state.accumulated_seconds * 1000))
    return replace(state, status=IN_PROGRESS, start_epoch_ms=start_epoch)


def _mark_completed(state: TaskState, target_minutes: int, now_ms: int) -> TaskState:
    return replace(
        state,
        status=COMPLETED,
        accumulated_seconds=float(target_minutes * 60),
        completed_at=_iso_from_ms(now_ms),
    )


def tick(state: TaskState, target_minutes: int, now_ms: int) -> tuple[TaskState, bool]:
    """Complete the task if its target has elapsed; returns ``(state, just_completed)``."""
    if state.status != IN_PROGRESS:
        return state, False
    if elapsed_seconds(state, now_ms) < target_minutes * 60:
        return state, False
    return _mark_completed(state, target_minutes, now_ms), True


def complete(state: TaskState, target_minutes: int, now_ms: int) -> TaskState:
    if state.status == COMPLETED:
        raise ConflictError("Task already completed", {"task_key": state.task_key})
    if state.status == NOT_STARTED:
        raise InvalidStateError("Task not started yet", {"task_key": state.task_key})
    remaining = remaining_seconds(state, target_minutes, now_ms)
    if remaining > 0:
        raise ConflictError(
            "Task target duration not reached",
            {"task_key": state.task_key, "remaining_seconds": round(remaining, 1)},
        )
    return _mark_completed(state, target_minutes, now_ms)


def all_completed(states: Mapping[str, TaskState], task_keys: list[str]) -> bool:
    if not task_keys:
        return False
    return all((states.get(key) or TaskState(key)).status == COMPLETED for key in task_keys)
