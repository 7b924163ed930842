from __future__ import annotations

import logging

import httpx

from journal_backend.errors import TranslationError, ValidationError
from journal_backend.settings import get_settings

logger = logging.getLogger(__name__)

GEMINI_API = "https://generativelanguage.googleapis.com/v1beta/models"

LANGUAGE_NAMES = {
    "de": "German",
    "en": "English",
}


def _language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code.lower(), code)


async def _gemini_generate(prompt: str) -> str:
    settings = get_settings()
    if not settings.gemini_api_key:
        raise TranslationError("GEMINI_API_KEY is not set")
    payload = {"contents": [{"parts": [{"text": prompt}]}]}
    url = f"{GEMINI_API}/{settings.gemini_model}:generateContent"
    async with httpx.AsyncClient(timeout=settings.translation_timeout_seconds) as client:
        response = await client.post(url, json=payload, headers={"x-goog-api-key": settings.gemini_api_key})
    response.raise_for_status()
    data = response.json()
    try:
        generated = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise TranslationError("Unexpected response format from Gemini API") from exc
    return str(generated).strip()


async def translate_with_gemini(text: str, source_lang: str, target_lang: str) -> str:
    prompt = (
        f"Translate the following {_language_name(source_lang)} text to {_language_name(target_lang)}. "
        f'Only return the translated text without any explanation or markdown formatting: "{text}"'
    )
    return await _gemini_generate(prompt)


async def translate_with_mymemory(text: str, source_lang: str, target_lang: str) -> str:
    settings = get_settings()
    params = {"q": text, "langpair": f"{source_lang}|{target_lang}"}
    async with httpx.AsyncClient(timeout=settings.translation_timeout_seconds) as client:
        response = await client.get(settings.mymemory_url, params=params, headers={"Accept": "application/json"})
    response.raise_for_status()
    data = response.json()
    translated = (data.get("responseData") or {}).get("translatedText") if isinstance(data, dict) else None
    if not translated:
        raise TranslationError("Invalid response from MyMemory")
    return str(translated).strip()


async def translate(text: str, source_lang: str = "en", target_lang: str = "de") -> dict:
    """Translate with Gemini; on any failure fall back to MyMemory once."""
    clean = str(text or "").strip()
    if not clean:
        raise ValidationError("Text to translate cannot be empty")
    try:
        translated = await translate_with_gemini(clean, source_lang, target_lang)
        return {"translated": translated, "provider": "gemini"}
    except (httpx.HTTPError, ValueError, TranslationError) as exc:
        logger.warning("Gemini translation %s->%s failed, falling back to MyMemory: %s", source_lang, target_lang, exc)
    try:
        translated = await translate_with_mymemory(clean, source_lang, target_lang)
    except (httpx.HTTPError, ValueError) as exc:
        raise TranslationError("Translation failed", {"reason": str(exc)}) from exc
    return {"translated": translated, "provider": "mymemory"}


def fallback_examples(phrase: str, german: str) -> dict:
    return {
        "example_english": f"{phrase}, I didn't expect to see you here!",
        "example_german": f"{german}, ich habe nicht erwartet, dich hier zu sehen!",
    }


async def example_sentences(phrase: str, german: str) -> dict:
    """An English example sentence using ``phrase`` and its German translation.

    Falls back to a fixed template when Gemini is unavailable.
    """
    prompt = (
        f'Create a natural example sentence using the phrase "{phrase}". '
        "Keep it simple and conversational. Return only the sentence, without quotes or explanation."
    )
    try:
        example_english = await _gemini_generate(prompt)
        example_german = await translate_with_gemini(example_english, "en", "de")
    except (httpx.HTTPError, ValueError, TranslationError) as exc:
        logger.info("Example sentence generation unavailable for %r: %s", phrase, exc)
        return fallback_examples(phrase, german)
    return {"example_english": example_english, "example_german": example_german}
