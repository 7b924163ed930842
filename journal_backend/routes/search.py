from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from journal_backend.auth import require_user_email
from journal_backend.errors import ok
from journal_backend.services.search import global_search

router = APIRouter(prefix="/api/search")


@router.get("")
async def search(q: str | None = Query(None), user_email: str = Depends(require_user_email)):
    return ok(await global_search(user_email, q))
