from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from journal_backend.settings import get_settings

logger = logging.getLogger(__name__)

# Sync-style schemes seen in hosting dashboards, mapped to the async drivers.
ASYNC_SCHEMES = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}
LOCAL_HOSTS = {"", "localhost", "127.0.0.1"}
# asyncpg rejects libpq-only options.
LIBPQ_ONLY_OPTIONS = {"sslmode", "channel_binding", "ssl"}


def _postgres_query(query: str) -> str:
    options = parse_qsl(query, keep_blank_values=True)
    wants_ssl = any(key == "sslmode" for key, _ in options)
    kept = [(key, value) for key, value in options if key not in LIBPQ_ONLY_OPTIONS]
    if wants_ssl:
        kept.append(("ssl", "true"))
    return urlencode(kept)


def async_database_url(database_url: str) -> str:
    """Rewrite ``DATABASE_URL`` for the async driver of its backend."""
    url = str(database_url or "").strip()
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    url = f"{ASYNC_SCHEMES.get(scheme, scheme)}://{rest}"
    if not url.startswith("postgresql+asyncpg://"):
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        logger.warning("DATABASE_URL could not be parsed; using it as given")
        return url
    return urlunsplit(parts._replace(query=_postgres_query(parts.query)))


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Single file, one writer: the default pool is enough.
        return {"future": True}
    options: dict = {"pool_pre_ping": True, "future": True, "pool_size": 10, "max_overflow": 5}
    try:
        host = urlsplit(url).hostname or ""
    except ValueError:
        host = ""
    if host not in LOCAL_HOSTS:
        options["connect_args"] = {"ssl": True}
    return options


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        url = async_database_url(get_settings().database_url)
        _engine = create_async_engine(url, **_engine_options(url))
        logger.info("Database engine created for %s", url.split("://", 1)[0])
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
