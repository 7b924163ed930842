from __future__ import annotations

import time
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from journal_backend.settings import get_settings


def now_ms() -> int:
    return int(time.time() * 1000)


def today() -> date:
    tz_name = get_settings().app_timezone
    try:
        return datetime.now(ZoneInfo(tz_name)).date()
    except ZoneInfoNotFoundError:
        return date.today()
