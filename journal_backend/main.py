from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from journal_backend.db import dispose_engine
from journal_backend.db_init import init_db
from journal_backend.errors import register_exception_handlers
from journal_backend.routes import (
    daily_tasks,
    data,
    journal,
    journey,
    notes,
    phrases,
    preferences,
    progress,
    search,
    translate,
    vocabulary,
)


def create_app() -> FastAPI:
    logging.basicConfig(
        level=os.getenv("BACKEND_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    app = FastAPI(title="Language Journal API", version="0.1.0")

    app.include_router(journey.router)
    app.include_router(daily_tasks.router)
    app.include_router(progress.router)
    app.include_router(journal.router)
    app.include_router(vocabulary.router)
    app.include_router(translate.router)
    app.include_router(phrases.router)
    app.include_router(notes.router)
    app.include_router(search.router)
    app.include_router(preferences.router)
    app.include_router(data.router)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def _startup():
        await init_db()

    @app.on_event("shutdown")
    async def _shutdown():
        await dispose_engine()

    @app.get("/health")
    async def health():
        return {"success": True, "data": {"ok": True}}

    return app


app = create_app()
