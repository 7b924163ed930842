from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    backend_session_secret: str = Field(..., alias="BACKEND_SESSION_SECRET")

    app_timezone: str = Field("Europe/Berlin", alias="APP_TIMEZONE")
    allowed_emails_raw: str = Field("", alias="ALLOWED_EMAILS")

    gemini_api_key: str | None = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL")
    mymemory_url: str = Field("https://api.mymemory.translated.net/get", alias="MYMEMORY_URL")
    translation_timeout_seconds: float = Field(20.0, alias="TRANSLATION_TIMEOUT_SECONDS")

    journey_min_minutes: int = Field(10, alias="JOURNEY_MIN_MINUTES")
    journey_min_entries: int = Field(1, alias="JOURNEY_MIN_ENTRIES")
    journey_min_words: int = Field(5, alias="JOURNEY_MIN_WORDS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def allowed_emails(self) -> List[str]:
        return [email.strip().lower() for email in self.allowed_emails_raw.split(",") if email.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
