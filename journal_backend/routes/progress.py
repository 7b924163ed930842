from __future__ import annotations

from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query

from journal_backend import clock, repositories
from journal_backend.auth import require_user_email
from journal_backend.db_init import JOURNAL_TABLE, VOCABULARY_TABLE
from journal_backend.errors import ok
from journal_backend.services.streaks import compute_streak

router = APIRouter(prefix="/api/progress")

DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


async def _series(user_email: str, days: int) -> list[dict]:
    today = clock.today()
    start = today - timedelta(days=days - 1)
    rows = await repositories.list_activity(user_email, start.isoformat(), today.isoformat())
    by_date = {row["date"]: row for row in rows}
    series = []
    for idx in range(days):
        current = start + timedelta(days=idx)
        row = by_date.get(current.isoformat(), {})
        series.append(
            {
                "date": current.isoformat(),
                "words_learned": int(row.get("words_learned") or 0),
                "entries_written": int(row.get("entries_written") or 0),
                "minutes_practiced": int(row.get("minutes_practiced") or 0),
            }
        )
    return series


@router.get("/streak")
async def streak(user_email: str = Depends(require_user_email)):
    dates = [date.fromisoformat(value) for value in await repositories.list_active_dates(user_email)]
    return ok(compute_streak(dates, clock.today()))


@router.get("/stats")
async def stats(user_email: str = Depends(require_user_email)):
    week_ago = (clock.today() - timedelta(days=7)).isoformat()
    totals = await repositories.activity_totals(user_email)
    return ok(
        {
            "vocabulary": {
                "total": await repositories.count_rows(user_email, VOCABULARY_TABLE),
                "this_week": await repositories.count_rows(user_email, VOCABULARY_TABLE, week_ago, "first_seen"),
            },
            "entries": {
                "total": await repositories.count_rows(user_email, JOURNAL_TABLE),
                "this_week": await repositories.count_rows(user_email, JOURNAL_TABLE, week_ago),
            },
            "time": {"total_minutes": totals["minutes_practiced"]},
            "active_days": len(await repositories.list_active_dates(user_email)),
        }
    )


@router.get("/history")
async def history(days: int = Query(7, ge=1, le=365), user_email: str = Depends(require_user_email)):
    return ok(await _series(user_email, days))


@router.get("/chart-data")
async def chart_data(days: int = Query(7, ge=1, le=365), user_email: str = Depends(require_user_email)):
    series = await _series(user_email, days)
    return ok(
        {
            "labels": [DAY_LABELS[date.fromisoformat(item["date"]).weekday()] for item in series],
            "datasets": {
                "words": [item["words_learned"] for item in series],
                "entries": [item["entries_written"] for item in series],
                "minutes": [item["minutes_practiced"] for item in series],
            },
        }
    )


@router.get("/active-days")
async def active_days(user_email: str = Depends(require_user_email)):
    dates = set(await repositories.list_active_dates(user_email))
    dates.update(await repositories.list_content_dates(user_email))
    return ok({"active_days": len(dates), "dates": sorted(dates, reverse=True)})
