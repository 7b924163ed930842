from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ActivityUpdate(BaseModel):
    minutes_practiced: int = Field(0, ge=0)
    journal_entries: int = Field(0, ge=0)
    vocabulary_added: int = Field(0, ge=0)
    date: Optional[dt.date] = None


class CompleteDayPayload(BaseModel):
    date: Optional[dt.date] = None
    minutes_practiced: int = Field(0, ge=0)
    vocabulary_added: int = Field(0, ge=0)
    journal_entries: int = Field(0, ge=0)


class JournalEntryCreate(BaseModel):
    english_text: str = Field(..., min_length=1)
    german_text: str = Field(..., min_length=1)
    session_duration: int = Field(0, ge=0)


class JournalEntryPatch(BaseModel):
    english_text: Optional[str] = None
    german_text: Optional[str] = None


class VocabularyCreate(BaseModel):
    word: str = Field(..., min_length=1, max_length=120)
    translation: Optional[str] = None
    context: Optional[str] = None
    source_entry_id: Optional[str] = None
    auto_translate: bool = False


class TranslateRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
    source_lang: str = "en"
    target_lang: str = "de"


class PhraseCreate(BaseModel):
    english: str = Field(..., min_length=1, max_length=500)
    german: Optional[str] = Field(None, max_length=500)
    meaning: Optional[str] = None
    example_english: Optional[str] = None
    example_german: Optional[str] = None


class PhraseUpdate(BaseModel):
    english: str = Field(..., min_length=1, max_length=500)
    german: str = Field(..., min_length=1, max_length=500)
    meaning: Optional[str] = None
    example_english: Optional[str] = None
    example_german: Optional[str] = None


class NotePayload(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)


class UserSettingsUpdate(BaseModel):
    daily_goal_minutes: Optional[int] = Field(None, ge=1, le=480)
    daily_sentence_goal: Optional[int] = Field(None, ge=1, le=100)
    theme: Optional[Literal["light", "dark"]] = None


class TextPayload(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


# Import rows mirror the export format; unknown keys are ignored.


class ImportedActivity(BaseModel):
    date: dt.date
    minutes_practiced: int = Field(0, ge=0)
    entries_written: int = Field(0, ge=0)
    words_learned: int = Field(0, ge=0)


class ImportedJournalEntry(BaseModel):
    id: Optional[str] = None
    english_text: str = Field(..., min_length=1)
    german_text: str = Field(..., min_length=1)
    session_minutes: int = Field(0, ge=0)
    created_at: Optional[str] = None


class ImportedWord(BaseModel):
    word: str = Field(..., min_length=1, max_length=120)
    translation: Optional[str] = None
    context: Optional[str] = None
    first_seen: Optional[str] = None


class ImportedPhrase(BaseModel):
    english: str = Field(..., min_length=1)
    german: str = Field(..., min_length=1)
    meaning: Optional[str] = None
    example_english: Optional[str] = None
    example_german: Optional[str] = None
    times_reviewed: int = Field(0, ge=0)
    created_at: Optional[str] = None


class ImportedNote(BaseModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    created_at: Optional[str] = None


class ExportBundle(BaseModel):
    activity: List[dict] = Field(default_factory=list)
    journey: Optional[dict] = None
    journal_entries: List[dict] = Field(default_factory=list)
    vocabulary: List[dict] = Field(default_factory=list)
    phrases: List[dict] = Field(default_factory=list)
    notes: List[dict] = Field(default_factory=list)
    settings: Optional[dict] = None


class DataImport(BaseModel):
    data: ExportBundle
    mode: Literal["merge", "replace"] = "merge"
