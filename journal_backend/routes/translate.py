from __future__ import annotations

from fastapi import APIRouter, Depends

from journal_backend.auth import require_user_email
from journal_backend.errors import ok
from journal_backend.schemas import TextPayload, TranslateRequest
from journal_backend.services import translation

router = APIRouter(prefix="/api")


@router.post("/translate")
async def translate(payload: TranslateRequest, user_email: str = Depends(require_user_email)):
    result = await translation.translate(payload.text, payload.source_lang, payload.target_lang)
    return ok({"original": payload.text, **result})


@router.post("/translate/reverse")
async def translate_reverse(payload: TextPayload, user_email: str = Depends(require_user_email)):
    result = await translation.translate(payload.text, "de", "en")
    return ok({"original": payload.text, **result})
