from __future__ import annotations

from datetime import date
from typing import Iterable


def _longest_run(dates_desc: list[date]) -> int:
    if not dates_desc:
        return 0
    longest = 1
    run = 1
    for newer, older in zip(dates_desc, dates_desc[1:]):
        if (newer - older).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def compute_streak(activity_dates: Iterable[date], today: date) -> dict:
    """Current and longest run of consecutive active calendar days.

    The current streak survives a missing ``today`` (the most recent activity
    may be yesterday); two or more idle days reset it to zero. The longest run
    is purely historical and unaffected by a broken current streak. Dates
    after ``today`` are ignored.
    """
    dates = sorted({day for day in activity_dates if day <= today}, reverse=True)
    if not dates:
        return {"current": 0, "longest": 0, "last_active": None}

    current = 0
    if (today - dates[0]).days <= 1:
        current = 1
        for newer, older in zip(dates, dates[1:]):
            if (newer - older).days != 1:
                break
            current += 1

    longest = max(_longest_run(dates), current, 1)
    return {"current": current, "longest": longest, "last_active": dates[0].isoformat()}
