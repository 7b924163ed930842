from __future__ import annotations

import logging
import secrets

from fastapi import Header, HTTPException

from journal_backend.settings import get_settings

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Backend-Token"
EMAIL_HEADER = "X-User-Email"


def _token_matches(token: str | None, secret: str) -> bool:
    if not token or not secret:
        return False
    return secrets.compare_digest(token.encode("utf-8"), secret.encode("utf-8"))


def normalize_email(raw: str | None) -> str | None:
    email = (raw or "").strip().lower()
    local, _, domain = email.partition("@")
    if not local or not domain:
        return None
    return email


async def require_user_email(
    x_user_email: str | None = Header(default=None, alias=EMAIL_HEADER),
    x_backend_token: str | None = Header(default=None, alias=TOKEN_HEADER),
) -> str:
    """Resolve the learner a request acts for; every journal row is keyed by this email."""
    settings = get_settings()
    if not _token_matches(x_backend_token, settings.backend_session_secret):
        raise HTTPException(status_code=401, detail="Invalid backend token")
    email = normalize_email(x_user_email)
    if email is None:
        raise HTTPException(status_code=401, detail="Missing or malformed user email")
    if settings.allowed_emails and email not in settings.allowed_emails:
        logger.warning("Rejected request for learner outside the allow-list: %s", email)
        raise HTTPException(status_code=403, detail="User not allowed")
    return email
