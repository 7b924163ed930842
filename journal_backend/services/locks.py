from __future__ import annotations

import asyncio
from collections import defaultdict

# Task transitions, day completion and vocabulary upserts are read-then-write;
# serialize them per user. One lock per learner email for the life of the
# process: the allow-list keeps that set to a handful of people, so the map
# is left unbounded.
_user_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)


def user_lock(user_email: str) -> asyncio.Lock:
    return _user_locks[user_email]


def reset_locks() -> None:
    _user_locks.clear()
