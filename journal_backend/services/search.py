from __future__ import annotations

import re

from journal_backend import repositories
from journal_backend.errors import ValidationError

SEARCH_LIMIT = 50

_SENTENCE = re.compile(r"[^.!?]+[.!?]+")


def sentences_with_term(text: str | None, term: str) -> list[str]:
    """Sentences of ``text`` containing ``term``, case-insensitively.

    Text without terminal punctuation counts as one sentence.
    """
    if not text or not term:
        return []
    sentences = _SENTENCE.findall(text) or [text]
    needle = term.lower()
    return [sentence.strip() for sentence in sentences if needle in sentence.lower()]


def _journal_sentences(entries: list[dict], term: str) -> list[dict]:
    found = []
    for entry in entries:
        for language, field, suffix in (("german", "german_text", ""), ("english", "english_text", "-en")):
            for sentence in sentences_with_term(entry.get(field), term):
                found.append(
                    {
                        "id": f"{entry['id']}{suffix}",
                        "entry_id": entry["id"],
                        "sentence": sentence,
                        "language": language,
                        "date": entry.get("created_at"),
                    }
                )
    return found


async def global_search(user_email: str, query: str | None) -> dict:
    term = (query or "").strip()
    if not term:
        raise ValidationError("Search query is required")
    vocabulary = await repositories.list_vocabulary(user_email, search=term, limit=SEARCH_LIMIT)
    entries = await repositories.search_journal_entries(user_email, query=term, limit=SEARCH_LIMIT)
    phrases = await repositories.list_phrases(user_email, search=term, limit=SEARCH_LIMIT)
    sentences = _journal_sentences(entries, term)
    return {
        "query": term,
        "vocabulary": vocabulary,
        "journal_sentences": sentences,
        "phrases": phrases,
        "counts": {
            "vocabulary": len(vocabulary),
            "journal_sentences": len(sentences),
            "phrases": len(phrases),
        },
    }
