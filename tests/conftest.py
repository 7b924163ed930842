"""Shared fixtures: a fresh SQLite database per test and a controllable clock."""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from journal_backend import clock, db, settings
from journal_backend.main import create_app
from journal_backend.services import locks

SECRET = "test-secret"
USER = "learner@example.com"


class FakeClock:
    def __init__(self, today: date, now_ms: int = 1_700_000_000_000):
        self.current_date = today
        self.current_ms = now_ms

    def today(self) -> date:
        return self.current_date

    def now_ms(self) -> int:
        return self.current_ms

    def advance_minutes(self, minutes: float) -> None:
        self.current_ms += int(minutes * 60 * 1000)


@pytest.fixture()
def fake_clock(monkeypatch):
    fake = FakeClock(date(2024, 3, 10))
    monkeypatch.setattr(clock, "today", fake.today)
    monkeypatch.setattr(clock, "now_ms", fake.now_ms)
    return fake


@pytest.fixture()
def client(tmp_path, monkeypatch, fake_clock):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'journal-test.db'}")
    monkeypatch.setenv("BACKEND_SESSION_SECRET", SECRET)
    monkeypatch.setenv("ALLOWED_EMAILS", "")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    settings.reset_settings()
    monkeypatch.setattr(db, "_engine", None)
    monkeypatch.setattr(db, "_session_factory", None)
    locks.reset_locks()

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    settings.reset_settings()


@pytest.fixture()
def auth_headers():
    return {"X-Backend-Token": SECRET, "X-User-Email": USER}
