from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from journal_backend import repositories
from journal_backend.auth import require_user_email
from journal_backend.errors import ValidationError, ok
from journal_backend.schemas import DataImport
from journal_backend.services import data_transfer
from journal_backend.services.locks import user_lock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data")


@router.get("/export")
async def export_data(user_email: str = Depends(require_user_email)):
    return ok(await repositories.export_user_data(user_email))


@router.delete("/clear")
async def clear_data(confirm: bool = Query(False), user_email: str = Depends(require_user_email)):
    if not confirm:
        raise ValidationError("Pass confirm=true to delete all data")
    async with user_lock(user_email):
        await repositories.clear_user_data(user_email)
    logger.warning("All data cleared for %s", user_email)
    return ok({"cleared": True})


@router.post("/import")
async def import_data(payload: DataImport, user_email: str = Depends(require_user_email)):
    result = await data_transfer.import_user_data(user_email, payload)
    return ok(result)
