from __future__ import annotations

from fastapi import APIRouter, Depends

from journal_backend.auth import require_user_email
from journal_backend.errors import ok
from journal_backend.schemas import UserSettingsUpdate
from journal_backend.services import preferences

router = APIRouter(prefix="/api/settings")


@router.get("")
async def get_settings(user_email: str = Depends(require_user_email)):
    return ok(await preferences.get_preferences(user_email))


@router.put("")
async def update_settings(payload: UserSettingsUpdate, user_email: str = Depends(require_user_email)):
    return ok(await preferences.update_preferences(user_email, payload.model_dump(exclude_none=True)))
