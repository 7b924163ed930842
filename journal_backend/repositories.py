from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text

from journal_backend.db import get_sessionmaker
from journal_backend.db_init import (
    ACTIVITY_TABLE,
    JOURNAL_TABLE,
    JOURNEY_TABLE,
    NOTES_TABLE,
    PHRASES_TABLE,
    TASK_PROGRESS_TABLE,
    USER_SETTINGS_TABLE,
    VOCABULARY_TABLE,
)

ACTIVITY_COLUMNS = ["date", "minutes_practiced", "entries_written", "words_learned", "updated_at"]
JOURNEY_COLUMNS = [
    "start_date",
    "current_day",
    "completed_days_json",
    "last_completed_date",
    "journeys_completed",
    "updated_at",
]
TASK_COLUMNS = ["task_key", "status", "start_epoch_ms", "accumulated_seconds", "completed_at", "updated_at"]
JOURNAL_COLUMNS = [
    "id",
    "english_text",
    "german_text",
    "word_count",
    "session_minutes",
    "created_at",
    "updated_at",
]
VOCABULARY_COLUMNS = [
    "id",
    "word",
    "translation",
    "context",
    "source_entry_id",
    "times_seen",
    "first_seen",
    "last_seen",
    "last_reviewed",
]
PHRASE_COLUMNS = [
    "id",
    "english",
    "german",
    "meaning",
    "example_english",
    "example_german",
    "times_reviewed",
    "last_reviewed",
    "created_at",
    "updated_at",
]
NOTE_COLUMNS = ["id", "title", "content", "created_at", "updated_at"]
SETTINGS_COLUMNS = ["daily_goal_minutes", "daily_sentence_goal", "theme", "updated_at"]

EXPORT_VERSION = "1.0"

USER_TABLES = (
    ACTIVITY_TABLE,
    JOURNEY_TABLE,
    TASK_PROGRESS_TABLE,
    JOURNAL_TABLE,
    VOCABULARY_TABLE,
    PHRASES_TABLE,
    NOTES_TABLE,
    USER_SETTINGS_TABLE,
)


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _count_words(text: str) -> int:
    return len([token for token in str(text or "").split() if token.strip()])


# --- activity ledger ---


async def add_activity(user_email: str, day_iso: str, minutes: int = 0, entries: int = 0, words: int = 0) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {ACTIVITY_TABLE}
                    (user_email, date, minutes_practiced, entries_written, words_learned, updated_at)
                VALUES
                    (:user_email, :date, :minutes, :entries, :words, :updated_at)
                ON CONFLICT(user_email, date) DO UPDATE SET
                    minutes_practiced = {ACTIVITY_TABLE}.minutes_practiced + EXCLUDED.minutes_practiced,
                    entries_written = {ACTIVITY_TABLE}.entries_written + EXCLUDED.entries_written,
                    words_learned = {ACTIVITY_TABLE}.words_learned + EXCLUDED.words_learned,
                    updated_at = EXCLUDED.updated_at
                """
            ),
            {
                "user_email": user_email,
                "date": day_iso,
                "minutes": int(minutes or 0),
                "entries": int(entries or 0),
                "words": int(words or 0),
                "updated_at": _now_iso(),
            },
        )
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(ACTIVITY_COLUMNS)} FROM {ACTIVITY_TABLE} "
                "WHERE user_email = :user_email AND date = :date"
            ),
            {"user_email": user_email, "date": day_iso},
        )).mappings().fetchone()
        await session.commit()
    return dict(row)


async def get_activity(user_email: str, day_iso: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(ACTIVITY_COLUMNS)} FROM {ACTIVITY_TABLE} "
                "WHERE user_email = :user_email AND date = :date"
            ),
            {"user_email": user_email, "date": day_iso},
        )).mappings().fetchone()
    return dict(row) if row else None


async def list_activity(user_email: str, start_iso: str | None = None, end_iso: str | None = None) -> list[dict]:
    clauses = ["user_email = :user_email"]
    params = {"user_email": user_email}
    if start_iso:
        clauses.append("date >= :start_date")
        params["start_date"] = start_iso
    if end_iso:
        clauses.append("date <= :end_date")
        params["end_date"] = end_iso
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"SELECT {', '.join(ACTIVITY_COLUMNS)} FROM {ACTIVITY_TABLE} "
                f"WHERE {' AND '.join(clauses)} ORDER BY date"
            ),
            params,
        )).mappings().all()
    return [dict(row) for row in rows]


async def list_active_dates(user_email: str) -> list[str]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT date FROM {ACTIVITY_TABLE}
                WHERE user_email = :user_email
                  AND (minutes_practiced > 0 OR entries_written > 0 OR words_learned > 0)
                ORDER BY date DESC
                """
            ),
            {"user_email": user_email},
        )).all()
    return [str(row[0]) for row in rows]


async def activity_totals(user_email: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"""
                SELECT
                    COALESCE(SUM(minutes_practiced), 0) AS minutes_practiced,
                    COALESCE(SUM(entries_written), 0) AS entries_written,
                    COALESCE(SUM(words_learned), 0) AS words_learned,
                    COUNT(*) AS days_tracked
                FROM {ACTIVITY_TABLE}
                WHERE user_email = :user_email
                """
            ),
            {"user_email": user_email},
        )).mappings().fetchone()
    return {key: int(value or 0) for key, value in dict(row).items()}


# --- journey ---


async def get_journey(user_email: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {', '.join(JOURNEY_COLUMNS)} FROM {JOURNEY_TABLE} WHERE user_email = :user_email"),
            {"user_email": user_email},
        )).mappings().fetchone()
    return dict(row) if row else None


async def save_journey(user_email: str, state_row: dict) -> None:
    payload = {"user_email": user_email, **state_row, "updated_at": _now_iso()}
    columns = ["user_email"] + JOURNEY_COLUMNS
    updates = ", ".join(f"{col}=EXCLUDED.{col}" for col in JOURNEY_COLUMNS)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {JOURNEY_TABLE} ({', '.join(columns)})
                VALUES ({', '.join(f':{col}' for col in columns)})
                ON CONFLICT(user_email) DO UPDATE SET {updates}
                """
            ),
            payload,
        )
        await session.commit()


# --- daily task progress ---


async def list_task_progress(user_email: str, day_iso: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"SELECT {', '.join(TASK_COLUMNS)} FROM {TASK_PROGRESS_TABLE} "
                "WHERE user_email = :user_email AND task_date = :task_date"
            ),
            {"user_email": user_email, "task_date": day_iso},
        )).mappings().all()
    return [dict(row) for row in rows]


async def save_task_progress(user_email: str, day_iso: str, state_row: dict) -> None:
    fields = ["task_key", "status", "start_epoch_ms", "accumulated_seconds", "completed_at"]
    payload = {key: state_row.get(key) for key in fields}
    payload.update({"user_email": user_email, "task_date": day_iso, "updated_at": _now_iso()})
    columns = ["user_email", "task_date"] + fields + ["updated_at"]
    updates = ", ".join(f"{col}=EXCLUDED.{col}" for col in fields[1:] + ["updated_at"])
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {TASK_PROGRESS_TABLE} ({', '.join(columns)})
                VALUES ({', '.join(f':{col}' for col in columns)})
                ON CONFLICT(user_email, task_date, task_key) DO UPDATE SET {updates}
                """
            ),
            payload,
        )
        await session.commit()


async def list_completed_tasks_since(user_email: str, start_iso: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT task_date, task_key, completed_at
                FROM {TASK_PROGRESS_TABLE}
                WHERE user_email = :user_email
                  AND task_date >= :start_date
                  AND status = 'completed'
                ORDER BY task_date DESC, completed_at ASC
                """
            ),
            {"user_email": user_email, "start_date": start_iso},
        )).mappings().all()
    return [dict(row) for row in rows]


# --- journal ---


async def create_journal_entry(
    user_email: str,
    english_text: str,
    german_text: str,
    session_minutes: int,
    created_at: str | None = None,
    entry_id: str | None = None,
) -> dict:
    now = created_at or _now_iso()
    record = {
        "id": entry_id or _new_id(),
        "user_email": user_email,
        "english_text": english_text.strip(),
        "german_text": german_text.strip(),
        "word_count": _count_words(german_text),
        "session_minutes": int(session_minutes or 0),
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {JOURNAL_TABLE}
                (id, user_email, english_text, german_text, word_count, session_minutes, created_at, updated_at)
                VALUES
                (:id, :user_email, :english_text, :german_text, :word_count, :session_minutes, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return record


async def list_journal_entries(user_email: str, sort: str = "newest", limit: int = 50, search: str | None = None) -> list[dict]:
    order = "ASC" if sort == "oldest" else "DESC"
    clauses = ["user_email = :user_email"]
    params: dict = {"user_email": user_email, "limit": int(limit)}
    if search:
        clauses.append("(LOWER(english_text) LIKE :search OR LOWER(german_text) LIKE :search)")
        params["search"] = f"%{search.lower()}%"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(JOURNAL_COLUMNS)}
                FROM {JOURNAL_TABLE}
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at {order}
                LIMIT :limit
                """
            ),
            params,
        )).mappings().all()
    return [dict(row) for row in rows]


async def get_journal_entry(user_email: str, entry_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(JOURNAL_COLUMNS)} FROM {JOURNAL_TABLE} "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": entry_id, "user_email": user_email},
        )).mappings().fetchone()
    return dict(row) if row else None


async def update_journal_entry(user_email: str, entry_id: str, patch: dict) -> dict | None:
    allowed = {"english_text", "german_text"}
    updates = []
    params = {"id": entry_id, "user_email": user_email}
    for key, value in patch.items():
        if key not in allowed or value is None:
            continue
        updates.append(f"{key} = :{key}")
        params[key] = str(value).strip()
    if "german_text" in params:
        updates.append("word_count = :word_count")
        params["word_count"] = _count_words(params["german_text"])
    if not updates:
        return await get_journal_entry(user_email, entry_id)
    updates.append("updated_at = :updated_at")
    params["updated_at"] = _now_iso()
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {JOURNAL_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_email = :user_email"
            ),
            params,
        )
        await session.commit()
    return await get_journal_entry(user_email, entry_id)


async def delete_journal_entry(user_email: str, entry_id: str) -> bool:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {JOURNAL_TABLE} WHERE id = :id AND user_email = :user_email"),
            {"id": entry_id, "user_email": user_email},
        )
        await session.commit()
    return bool(result.rowcount)


# --- vocabulary ---


async def get_vocabulary_by_word(user_email: str, word: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(VOCABULARY_COLUMNS)} FROM {VOCABULARY_TABLE} "
                "WHERE user_email = :user_email AND word_key = :word_key"
            ),
            {"user_email": user_email, "word_key": word.strip().lower()},
        )).mappings().fetchone()
    return dict(row) if row else None


async def add_vocabulary_word(
    user_email: str,
    word: str,
    translation: str | None = None,
    context: str | None = None,
    source_entry_id: str | None = None,
    first_seen: str | None = None,
) -> tuple[dict, bool]:
    """Insert a word, or bump ``times_seen`` when it is already known. Returns ``(record, created)``."""
    clean_word = " ".join(str(word or "").split())
    existing = await get_vocabulary_by_word(user_email, clean_word)
    now = _now_iso()
    session_factory = get_sessionmaker()
    if existing:
        async with session_factory() as session:
            await session.execute(
                sql_text(
                    f"""
                    UPDATE {VOCABULARY_TABLE}
                    SET times_seen = COALESCE(times_seen, 0) + 1,
                        last_seen = :last_seen,
                        translation = COALESCE(:translation, translation),
                        context = COALESCE(:context, context)
                    WHERE id = :id AND user_email = :user_email
                    """
                ),
                {
                    "id": existing["id"],
                    "user_email": user_email,
                    "last_seen": now,
                    "translation": translation,
                    "context": context,
                },
            )
            await session.commit()
        return await get_vocabulary_by_word(user_email, clean_word), False

    record = {
        "id": _new_id(),
        "user_email": user_email,
        "word": clean_word,
        "word_key": clean_word.lower(),
        "translation": translation,
        "context": context,
        "source_entry_id": source_entry_id,
        "times_seen": 1,
        "first_seen": first_seen or now,
        "last_seen": now,
    }
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {VOCABULARY_TABLE}
                (id, user_email, word, word_key, translation, context, source_entry_id, times_seen, first_seen, last_seen)
                VALUES
                (:id, :user_email, :word, :word_key, :translation, :context, :source_entry_id, :times_seen, :first_seen, :last_seen)
                """
            ),
            record,
        )
        await session.commit()
    return {key: record.get(key) for key in VOCABULARY_COLUMNS}, True


async def list_vocabulary(user_email: str, search: str | None = None, limit: int = 200) -> list[dict]:
    clauses = ["user_email = :user_email"]
    params: dict = {"user_email": user_email, "limit": int(limit)}
    if search:
        clauses.append("(word_key LIKE :search OR LOWER(COALESCE(translation, '')) LIKE :search)")
        params["search"] = f"%{search.lower()}%"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(VOCABULARY_COLUMNS)}
                FROM {VOCABULARY_TABLE}
                WHERE {' AND '.join(clauses)}
                ORDER BY first_seen DESC
                LIMIT :limit
                """
            ),
            params,
        )).mappings().all()
    return [dict(row) for row in rows]


async def delete_vocabulary_word(user_email: str, word_id: str) -> bool:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {VOCABULARY_TABLE} WHERE id = :id AND user_email = :user_email"),
            {"id": word_id, "user_email": user_email},
        )
        await session.commit()
    return bool(result.rowcount)


async def count_rows(user_email: str, table: str, since_iso: str | None = None, column: str = "created_at") -> int:
    params = {"user_email": user_email}
    where = "user_email = :user_email"
    if since_iso:
        where += f" AND {column} >= :since"
        params["since"] = since_iso
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        count = (await session.execute(
            sql_text(f"SELECT COUNT(*) FROM {table} WHERE {where}"),
            params,
        )).scalar_one()
    return int(count or 0)


async def get_vocabulary_word(user_email: str, word_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(VOCABULARY_COLUMNS)} FROM {VOCABULARY_TABLE} "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": word_id, "user_email": user_email},
        )).mappings().fetchone()
    return dict(row) if row else None


async def set_vocabulary_translation(user_email: str, word_id: str, translation: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {VOCABULARY_TABLE} SET translation = :translation "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": word_id, "user_email": user_email, "translation": translation},
        )
        await session.commit()


async def mark_vocabulary_reviewed(user_email: str, word_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(
                f"UPDATE {VOCABULARY_TABLE} SET last_reviewed = :now "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": word_id, "user_email": user_email, "now": _now_iso()},
        )
        await session.commit()
    if not result.rowcount:
        return None
    return await get_vocabulary_word(user_email, word_id)


async def oldest_vocabulary_date(user_email: str) -> str | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        value = (await session.execute(
            sql_text(f"SELECT MIN(first_seen) FROM {VOCABULARY_TABLE} WHERE user_email = :user_email"),
            {"user_email": user_email},
        )).scalar_one_or_none()
    return str(value) if value else None


async def search_journal_entries(
    user_email: str,
    query: str | None = None,
    start_iso: str | None = None,
    end_iso: str | None = None,
    limit: int = 50,
) -> list[dict]:
    """Entries matching ``query`` in either language, created within ``[start_iso, end_iso]`` (dates, inclusive)."""
    clauses = ["user_email = :user_email"]
    params: dict = {"user_email": user_email, "limit": int(limit)}
    if query:
        clauses.append("(LOWER(english_text) LIKE :search OR LOWER(german_text) LIKE :search)")
        params["search"] = f"%{query.lower()}%"
    if start_iso:
        clauses.append("created_at >= :start")
        params["start"] = start_iso
    if end_iso:
        # created_at is a full timestamp; compare on its date prefix.
        clauses.append("SUBSTR(created_at, 1, 10) <= :end")
        params["end"] = end_iso
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(JOURNAL_COLUMNS)}
                FROM {JOURNAL_TABLE}
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC
                LIMIT :limit
                """
            ),
            params,
        )).mappings().all()
    return [dict(row) for row in rows]


# --- phrases ---


def _text_key(value: str) -> str:
    return " ".join(str(value or "").split()).lower()


async def list_phrases(user_email: str, search: str | None = None, limit: int = 200) -> list[dict]:
    clauses = ["user_email = :user_email"]
    params: dict = {"user_email": user_email, "limit": int(limit)}
    if search:
        clauses.append(
            "(english_key LIKE :search OR german_key LIKE :search "
            "OR LOWER(COALESCE(example_english, '')) LIKE :search "
            "OR LOWER(COALESCE(example_german, '')) LIKE :search)"
        )
        params["search"] = f"%{search.lower()}%"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(PHRASE_COLUMNS)}
                FROM {PHRASES_TABLE}
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC
                LIMIT :limit
                """
            ),
            params,
        )).mappings().all()
    return [dict(row) for row in rows]


async def get_phrase(user_email: str, phrase_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(PHRASE_COLUMNS)} FROM {PHRASES_TABLE} "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": phrase_id, "user_email": user_email},
        )).mappings().fetchone()
    return dict(row) if row else None


async def find_duplicate_phrase(
    user_email: str, english: str, german: str, exclude_id: str | None = None
) -> dict | None:
    """A phrase whose English or German text equals the given text, ignoring case and spacing."""
    params = {
        "user_email": user_email,
        "english_key": _text_key(english),
        "german_key": _text_key(german),
        "exclude_id": exclude_id or "",
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(PHRASE_COLUMNS)}
                FROM {PHRASES_TABLE}
                WHERE user_email = :user_email
                  AND id <> :exclude_id
                  AND (english_key = :english_key OR german_key = :german_key)
                LIMIT 1
                """
            ),
            params,
        )).mappings().fetchone()
    return dict(row) if row else None


async def create_phrase(
    user_email: str,
    english: str,
    german: str,
    meaning: str | None = None,
    example_english: str | None = None,
    example_german: str | None = None,
    times_reviewed: int = 0,
    created_at: str | None = None,
) -> dict:
    now = created_at or _now_iso()
    record = {
        "id": _new_id(),
        "user_email": user_email,
        "english": english.strip(),
        "german": german.strip(),
        "english_key": _text_key(english),
        "german_key": _text_key(german),
        "meaning": meaning,
        "example_english": example_english,
        "example_german": example_german,
        "times_reviewed": int(times_reviewed or 0),
        "last_reviewed": None,
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {PHRASES_TABLE}
                (id, user_email, english, german, english_key, german_key, meaning,
                 example_english, example_german, times_reviewed, last_reviewed, created_at, updated_at)
                VALUES
                (:id, :user_email, :english, :german, :english_key, :german_key, :meaning,
                 :example_english, :example_german, :times_reviewed, :last_reviewed, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return {key: record[key] for key in PHRASE_COLUMNS}


async def update_phrase(user_email: str, phrase_id: str, fields: dict) -> dict | None:
    params = {
        "id": phrase_id,
        "user_email": user_email,
        "english": fields["english"].strip(),
        "german": fields["german"].strip(),
        "english_key": _text_key(fields["english"]),
        "german_key": _text_key(fields["german"]),
        "meaning": fields.get("meaning"),
        "example_english": fields.get("example_english"),
        "example_german": fields.get("example_german"),
        "updated_at": _now_iso(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                UPDATE {PHRASES_TABLE}
                SET english = :english,
                    german = :german,
                    english_key = :english_key,
                    german_key = :german_key,
                    meaning = :meaning,
                    example_english = :example_english,
                    example_german = :example_german,
                    updated_at = :updated_at
                WHERE id = :id AND user_email = :user_email
                """
            ),
            params,
        )
        await session.commit()
    return await get_phrase(user_email, phrase_id)


async def review_phrase(user_email: str, phrase_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(
                f"""
                UPDATE {PHRASES_TABLE}
                SET times_reviewed = COALESCE(times_reviewed, 0) + 1,
                    last_reviewed = :now
                WHERE id = :id AND user_email = :user_email
                """
            ),
            {"id": phrase_id, "user_email": user_email, "now": _now_iso()},
        )
        await session.commit()
    if not result.rowcount:
        return None
    return await get_phrase(user_email, phrase_id)


async def delete_phrase(user_email: str, phrase_id: str) -> bool:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {PHRASES_TABLE} WHERE id = :id AND user_email = :user_email"),
            {"id": phrase_id, "user_email": user_email},
        )
        await session.commit()
    return bool(result.rowcount)


# --- notes ---

NOTE_ORDERING = {
    "newest": "created_at DESC",
    "oldest": "created_at ASC",
    "az": "LOWER(title) ASC",
    "za": "LOWER(title) DESC",
}


async def list_notes(user_email: str, sort: str = "newest") -> list[dict]:
    order = NOTE_ORDERING.get(sort, NOTE_ORDERING["newest"])
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"SELECT {', '.join(NOTE_COLUMNS)} FROM {NOTES_TABLE} "
                f"WHERE user_email = :user_email ORDER BY {order}"
            ),
            {"user_email": user_email},
        )).mappings().all()
    return [dict(row) for row in rows]


async def get_note(user_email: str, note_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(NOTE_COLUMNS)} FROM {NOTES_TABLE} "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": note_id, "user_email": user_email},
        )).mappings().fetchone()
    return dict(row) if row else None


async def create_note(
    user_email: str, title: str, content: str, created_at: str | None = None, note_id: str | None = None
) -> dict:
    now = created_at or _now_iso()
    record = {
        "id": note_id or _new_id(),
        "user_email": user_email,
        "title": title.strip(),
        "content": content.strip(),
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {NOTES_TABLE} (id, user_email, title, content, created_at, updated_at)
                VALUES (:id, :user_email, :title, :content, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return {key: record[key] for key in NOTE_COLUMNS}


async def update_note(user_email: str, note_id: str, title: str, content: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(
                f"""
                UPDATE {NOTES_TABLE}
                SET title = :title, content = :content, updated_at = :updated_at
                WHERE id = :id AND user_email = :user_email
                """
            ),
            {
                "id": note_id,
                "user_email": user_email,
                "title": title.strip(),
                "content": content.strip(),
                "updated_at": _now_iso(),
            },
        )
        await session.commit()
    if not result.rowcount:
        return None
    return await get_note(user_email, note_id)


async def delete_note(user_email: str, note_id: str) -> bool:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {NOTES_TABLE} WHERE id = :id AND user_email = :user_email"),
            {"id": note_id, "user_email": user_email},
        )
        await session.commit()
    return bool(result.rowcount)


# --- user settings ---


async def get_user_settings(user_email: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(SETTINGS_COLUMNS)} FROM {USER_SETTINGS_TABLE} "
                "WHERE user_email = :user_email"
            ),
            {"user_email": user_email},
        )).mappings().fetchone()
    return dict(row) if row else None


async def save_user_settings(user_email: str, values: dict) -> dict:
    payload = {
        "user_email": user_email,
        "daily_goal_minutes": int(values["daily_goal_minutes"]),
        "daily_sentence_goal": int(values["daily_sentence_goal"]),
        "theme": values["theme"],
        "updated_at": _now_iso(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {USER_SETTINGS_TABLE}
                    (user_email, daily_goal_minutes, daily_sentence_goal, theme, updated_at)
                VALUES
                    (:user_email, :daily_goal_minutes, :daily_sentence_goal, :theme, :updated_at)
                ON CONFLICT(user_email) DO UPDATE SET
                    daily_goal_minutes = EXCLUDED.daily_goal_minutes,
                    daily_sentence_goal = EXCLUDED.daily_sentence_goal,
                    theme = EXCLUDED.theme,
                    updated_at = EXCLUDED.updated_at
                """
            ),
            payload,
        )
        await session.commit()
    return {key: payload[key] for key in SETTINGS_COLUMNS}


# --- bulk data ---


async def list_content_dates(user_email: str) -> list[str]:
    """Calendar dates on which a journal entry was written or a word was first seen."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT SUBSTR(created_at, 1, 10) FROM {JOURNAL_TABLE} WHERE user_email = :user_email
                UNION
                SELECT SUBSTR(first_seen, 1, 10) FROM {VOCABULARY_TABLE} WHERE user_email = :user_email
                """
            ),
            {"user_email": user_email},
        )).all()
    return [str(row[0]) for row in rows if row[0]]


async def export_user_data(user_email: str) -> dict:
    return {
        "version": EXPORT_VERSION,
        "exported_at": _now_iso(),
        "activity": await list_activity(user_email),
        "journey": await get_journey(user_email),
        "journal_entries": await list_journal_entries(user_email, sort="oldest", limit=100000),
        "vocabulary": await list_vocabulary(user_email, limit=100000),
        "phrases": await list_phrases(user_email, limit=100000),
        "notes": await list_notes(user_email, sort="oldest"),
        "settings": await get_user_settings(user_email),
    }


async def clear_user_data(user_email: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        for table in USER_TABLES:
            await session.execute(
                sql_text(f"DELETE FROM {table} WHERE user_email = :user_email"),
                {"user_email": user_email},
            )
        await session.commit()
