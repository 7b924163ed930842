from __future__ import annotations

from sqlalchemy import text as sql_text

from journal_backend.db import get_engine


ACTIVITY_TABLE = "activity_days"
JOURNEY_TABLE = "journey_progress"
TASK_PROGRESS_TABLE = "daily_task_progress"
JOURNAL_TABLE = "journal_entries"
VOCABULARY_TABLE = "vocabulary"
PHRASES_TABLE = "phrases"
NOTES_TABLE = "notes"
USER_SETTINGS_TABLE = "user_settings"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {ACTIVITY_TABLE} (
                    user_email TEXT NOT NULL,
                    date TEXT NOT NULL,
                    minutes_practiced INTEGER NOT NULL DEFAULT 0,
                    entries_written INTEGER NOT NULL DEFAULT 0,
                    words_learned INTEGER NOT NULL DEFAULT 0,
                    updated_at TEXT,
                    PRIMARY KEY (user_email, date)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {JOURNEY_TABLE} (
                    user_email TEXT PRIMARY KEY,
                    start_date TEXT NOT NULL,
                    current_day INTEGER NOT NULL DEFAULT 1,
                    completed_days_json TEXT NOT NULL DEFAULT '[]',
                    last_completed_date TEXT,
                    journeys_completed INTEGER NOT NULL DEFAULT 0,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {TASK_PROGRESS_TABLE} (
                    user_email TEXT NOT NULL,
                    task_date TEXT NOT NULL,
                    task_key TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'not_started',
                    start_epoch_ms BIGINT,
                    accumulated_seconds REAL DEFAULT 0,
                    completed_at TEXT,
                    updated_at TEXT,
                    PRIMARY KEY (user_email, task_date, task_key)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {JOURNAL_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    english_text TEXT NOT NULL,
                    german_text TEXT NOT NULL,
                    word_count INTEGER DEFAULT 0,
                    session_minutes INTEGER DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {VOCABULARY_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    word TEXT NOT NULL,
                    word_key TEXT NOT NULL,
                    translation TEXT,
                    context TEXT,
                    source_entry_id TEXT,
                    times_seen INTEGER DEFAULT 1,
                    first_seen TEXT NOT NULL,
                    last_seen TEXT,
                    UNIQUE (user_email, word_key)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {PHRASES_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    english TEXT NOT NULL,
                    german TEXT NOT NULL,
                    english_key TEXT NOT NULL,
                    german_key TEXT NOT NULL,
                    meaning TEXT,
                    example_english TEXT,
                    example_german TEXT,
                    times_reviewed INTEGER NOT NULL DEFAULT 0,
                    last_reviewed TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {NOTES_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USER_SETTINGS_TABLE} (
                    user_email TEXT PRIMARY KEY,
                    daily_goal_minutes INTEGER NOT NULL DEFAULT 60,
                    daily_sentence_goal INTEGER NOT NULL DEFAULT 10,
                    theme TEXT NOT NULL DEFAULT 'light',
                    updated_at TEXT
                )
                """
            )
        )

    async def ensure_column(table_name: str, column_name: str, column_ddl: str) -> None:
        try:
            async with engine.begin() as conn:
                await conn.execute(
                    sql_text(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_ddl}")
                )
        except Exception:
            return

    async def ensure_index(index_sql: str) -> None:
        try:
            async with engine.begin() as conn:
                await conn.execute(sql_text(index_sql))
        except Exception:
            return

    await ensure_column(VOCABULARY_TABLE, "last_reviewed", "TEXT")

    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{JOURNAL_TABLE}_user_created "
        f"ON {JOURNAL_TABLE} (user_email, created_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{TASK_PROGRESS_TABLE}_user_date "
        f"ON {TASK_PROGRESS_TABLE} (user_email, task_date)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{PHRASES_TABLE}_user_created "
        f"ON {PHRASES_TABLE} (user_email, created_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{NOTES_TABLE}_user_created "
        f"ON {NOTES_TABLE} (user_email, created_at)"
    )
