from __future__ import annotations

import logging

from journal_backend import repositories
from journal_backend.constants import DAILY_TASKS, DAILY_TASKS_BY_KEY
from journal_backend.errors import NotFoundError
from journal_backend.services import task_timer
from journal_backend.services.activity import record_activity
from journal_backend.services.locks import user_lock
from journal_backend.services.task_timer import TaskState

logger = logging.getLogger(__name__)

TASK_KEYS = [task["key"] for task in DAILY_TASKS]


def _catalog_entry(task_key: str) -> dict:
    task = DAILY_TASKS_BY_KEY.get(task_key)
    if not task:
        raise NotFoundError("Task not found", {"task_key": task_key})
    return task


async def load_states(user_email: str, day_iso: str) -> dict[str, TaskState]:
    rows = await repositories.list_task_progress(user_email, day_iso)
    states = {key: TaskState(key) for key in TASK_KEYS}
    for row in rows:
        if row.get("task_key") in states:
            states[row["task_key"]] = TaskState.from_row(row)
    return states


def describe(task: dict, state: TaskState, now_ms: int) -> dict:
    return {
        **task,
        "status": state.status,
        "completed": state.status == task_timer.COMPLETED,
        "in_progress": state.status == task_timer.IN_PROGRESS,
        "start_epoch_ms": state.start_epoch_ms,
        "completed_at": state.completed_at,
        "elapsed_seconds": round(task_timer.elapsed_seconds(state, now_ms), 1),
        "remaining_seconds": round(task_timer.remaining_seconds(state, task["duration_minutes"], now_ms), 1),
    }


def summarize(states: dict[str, TaskState], day_iso: str, now_ms: int) -> dict:
    tasks = [describe(task, states[task["key"]], now_ms) for task in DAILY_TASKS]
    completed_count = sum(1 for item in tasks if item["completed"])
    return {
        "date": day_iso,
        "tasks": tasks,
        "completed_count": completed_count,
        "total_tasks": len(tasks),
        "all_completed": task_timer.all_completed(states, TASK_KEYS),
        "completion_percentage": round(completed_count / len(tasks) * 100) if tasks else 0,
    }


async def all_tasks_completed(user_email: str, day_iso: str) -> bool:
    return task_timer.all_completed(await load_states(user_email, day_iso), TASK_KEYS)


async def _credit_completion(user_email: str, day_iso: str, task: dict) -> None:
    await record_activity(user_email, day_iso, minutes=task["duration_minutes"])
    logger.info("Daily task %s completed for %s on %s", task["key"], user_email, day_iso)


async def transition(user_email: str, day_iso: str, task_key: str, action: str, now_ms: int) -> dict:
    """Apply ``action`` (start/pause/resume/tick/complete) to one of today's tasks."""
    task = _catalog_entry(task_key)
    async with user_lock(user_email):
        states = await load_states(user_email, day_iso)
        current = states[task_key]
        just_completed = False
        if action == "start":
            updated = task_timer.start(states, task_key, now_ms)
        elif action == "pause":
            updated = task_timer.pause(current, now_ms)
        elif action == "resume":
            updated = task_timer.resume(states, task_key, now_ms)
        elif action == "tick":
            updated, just_completed = task_timer.tick(current, task["duration_minutes"], now_ms)
        elif action == "complete":
            updated = task_timer.complete(current, task["duration_minutes"], now_ms)
            just_completed = True
        else:
            raise NotFoundError("Unknown task action", {"action": action})

        if updated != current:
            await repositories.save_task_progress(user_email, day_iso, updated.to_row())
            states[task_key] = updated
        if just_completed:
            await _credit_completion(user_email, day_iso, task)

    return {
        "task": describe(task, updated, now_ms),
        "just_completed": just_completed,
        "all_completed": task_timer.all_completed(states, TASK_KEYS),
    }
