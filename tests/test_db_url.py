import pytest

from journal_backend.db import _engine_options, async_database_url


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("postgres://u:p@db.example.com/journal", "postgresql+asyncpg://u:p@db.example.com/journal"),
        ("postgresql://u@localhost/journal", "postgresql+asyncpg://u@localhost/journal"),
        (
            "postgresql://u@db.example.com/journal?sslmode=require&channel_binding=require&application_name=journal",
            "postgresql+asyncpg://u@db.example.com/journal?application_name=journal&ssl=true",
        ),
        ("sqlite:///tmp/journal.db", "sqlite+aiosqlite:///tmp/journal.db"),
        ("sqlite+aiosqlite:///tmp/journal.db", "sqlite+aiosqlite:///tmp/journal.db"),
    ],
)
def test_async_database_url(raw, expected):
    assert async_database_url(raw) == expected


def test_remote_postgres_requests_ssl():
    remote = _engine_options("postgresql+asyncpg://u@db.example.com/journal")
    assert remote["connect_args"] == {"ssl": True}
    assert "connect_args" not in _engine_options("postgresql+asyncpg://u@localhost/journal")
    assert _engine_options("sqlite+aiosqlite:///tmp/journal.db") == {"future": True}
