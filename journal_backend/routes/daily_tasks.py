from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, Query

from journal_backend import clock, repositories
from journal_backend.auth import require_user_email
from journal_backend.errors import ok
from journal_backend.services import daily_tasks

router = APIRouter(prefix="/api/daily-tasks")


@router.get("")
async def list_daily_tasks(user_email: str = Depends(require_user_email)):
    day_iso = clock.today().isoformat()
    states = await daily_tasks.load_states(user_email, day_iso)
    return ok(daily_tasks.summarize(states, day_iso, clock.now_ms()))


@router.get("/progress")
async def daily_progress(user_email: str = Depends(require_user_email)):
    day_iso = clock.today().isoformat()
    states = await daily_tasks.load_states(user_email, day_iso)
    summary = daily_tasks.summarize(states, day_iso, clock.now_ms())
    summary.pop("tasks")
    return ok(summary)


@router.get("/history")
async def task_history(days: int = Query(7, ge=1, le=365), user_email: str = Depends(require_user_email)):
    start = clock.today() - timedelta(days=days)
    rows = await repositories.list_completed_tasks_since(user_email, start.isoformat())
    history: dict[str, list[dict]] = {}
    for row in rows:
        history.setdefault(row["task_date"], []).append(row)
    return ok({"history": history, "days_requested": days})


async def _transition(task_key: str, action: str, user_email: str) -> dict:
    result = await daily_tasks.transition(user_email, clock.today().isoformat(), task_key, action, clock.now_ms())
    return ok(result)


@router.post("/{task_key}/start")
async def start_task(task_key: str, user_email: str = Depends(require_user_email)):
    return await _transition(task_key, "start", user_email)


@router.post("/{task_key}/pause")
async def pause_task(task_key: str, user_email: str = Depends(require_user_email)):
    return await _transition(task_key, "pause", user_email)


@router.post("/{task_key}/resume")
async def resume_task(task_key: str, user_email: str = Depends(require_user_email)):
    return await _transition(task_key, "resume", user_email)


@router.post("/{task_key}/tick")
async def tick_task(task_key: str, user_email: str = Depends(require_user_email)):
    return await _transition(task_key, "tick", user_email)


@router.post("/{task_key}/complete")
async def complete_task(task_key: str, user_email: str = Depends(require_user_email)):
    return await _transition(task_key, "complete", user_email)
