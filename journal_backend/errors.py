"""Error kinds raised by the progress engine and the uniform response envelope.

Every route answers with ``{"success": bool, "data": ..., "error": ...}``.
Services raise the exceptions below; ``register_exception_handlers`` turns
them into envelopes with the matching HTTP status.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, detail: dict | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"


class InvalidStateError(ConflictError):
    code = "invalid_state"


class PreconditionNotMetError(AppError):
    """Day-completion criteria are not satisfied yet.

    Not an HTTP failure: the journey route renders it as ``accepted: false``.
    """

    status_code = 200
    code = "precondition_not_met"


class StorageError(AppError):
    status_code = 500
    code = "storage_error"


class TranslationError(AppError):
    status_code = 502
    code = "translation_failed"


def ok(data: Any = None, **extra: Any) -> dict:
    payload = {"success": True, "data": data}
    payload.update(extra)
    return payload


def error_response(status_code: int, message: str, code: str, detail: dict | None = None) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "data": None, "error": message, "code": code}
    if detail:
        content["detail"] = detail
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return error_response(exc.status_code, exc.message, exc.code, exc.detail)

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), "http_error")

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")}
            for err in exc.errors()
        ]
        return error_response(400, "Invalid request", ValidationError.code, {"errors": errors})

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage failure: %s", exc)
        return error_response(500, "Storage failure", StorageError.code)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return error_response(500, "Internal error", AppError.code)
