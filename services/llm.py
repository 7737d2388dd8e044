"""LLM wrapper.

Primary: Google Gemini if GEMINI_API_KEY is set.
Fallbacks: Groq, then OpenRouter (both OpenAI-compatible), when their keys are set.

Keys are read at call time so a running app picks up .env / test overrides.
"""

from __future__ import annotations

import os
import json
import logging
import requests

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

SYSTEM_PROMPT = "You are an expert Ayurvedic nutritionist. Respond only with the requested JSON."


class GenerationError(Exception):
    """Text generation failed upstream. The message is safe to show to end users."""


def _timeout() -> float:
    return float(os.getenv("AI_TIMEOUT_SECONDS", "60"))


def _chat_content(data: dict) -> str | None:
    return (((data.get("choices") or [{}])[0]).get("message") or {}).get("content")


def gemini_generate(prompt: str, *, model: str | None = None, max_tokens: int = 8192) -> str:
    """Single generateContent call. Raises GenerationError on any failure."""
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        raise GenerationError("GEMINI_API_KEY is not configured.")
    url = GEMINI_URL.format(model=model or os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp"))
    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": 0.7,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": max_tokens,
        },
    }
    try:
        r = requests.post(
            url,
            params={"key": key},
            headers={"Content-Type": "application/json"},
            data=json.dumps(payload),
            timeout=_timeout(),
        )
    except requests.RequestException as e:
        logger.error("Gemini request failed: %s", e)
        raise GenerationError("Could not reach the AI service. Please try again.") from e

    if not r.ok:
        logger.error("Gemini API error: %s %s", r.status_code, (r.text or "")[:500])
        if r.status_code == 503:
            raise GenerationError("AI service is temporarily overloaded. Please try again in a moment.")
        if r.status_code == 429:
            raise GenerationError("Rate limit exceeded. Please wait a moment before trying again.")
        raise GenerationError(f"AI service error: {r.status_code}")

    try:
        data = r.json() or {}
    except ValueError as e:
        raise GenerationError("AI service returned an unreadable response.") from e

    candidate = (data.get("candidates") or [{}])[0] or {}
    parts = (candidate.get("content") or {}).get("parts") or [{}]
    text = (parts[0] or {}).get("text")
    if not text:
        raise GenerationError("No recommendation generated")
    return text


def openrouter_chat(messages: list[dict], *, model: str | None = None, max_tokens: int = 4096) -> str | None:
    key = os.getenv("OPENROUTER_API_KEY")
    if not key:
        return None
    url = "https://openrouter.ai/api/v1/chat/completions"
    payload = {
        "model": model or os.getenv("OPENROUTER_MODEL", "google/gemma-2-9b-it"),
        "messages": messages,
        "temperature": 0.7,
        "max_tokens": max_tokens,
    }
    headers = {
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
        # optional but recommended by OpenRouter
        "HTTP-Referer": os.getenv("OPENROUTER_SITE", "http://localhost"),
        "X-Title": os.getenv("OPENROUTER_APP", "AyurDiet"),
    }
    try:
        r = requests.post(url, headers=headers, data=json.dumps(payload), timeout=_timeout())
        r.raise_for_status()
        return _chat_content(r.json() or {})
    except (requests.RequestException, ValueError) as e:
        logger.warning("OpenRouter request failed: %s", e)
        return None


def groq_chat(messages: list[dict], *, model: str | None = None, max_tokens: int = 4096) -> str | None:
    key = os.getenv("GROQ_API_KEY")
    if not key:
        return None
    url = "https://api.groq.com/openai/v1/chat/completions"
    payload = {
        "model": model or os.getenv("GROQ_MODEL", "llama-3.1-8b-instant"),
        "messages": messages,
        "temperature": 0.7,
        "max_tokens": max_tokens,
    }
    try:
        r = requests.post(url, headers={"Authorization": f"Bearer {key}", "Content-Type": "application/json"}, data=json.dumps(payload), timeout=_timeout())
        r.raise_for_status()
        return _chat_content(r.json() or {})
    except (requests.RequestException, ValueError) as e:
        logger.warning("Groq request failed: %s", e)
        return None


def generate(prompt: str, *, system: str = SYSTEM_PROMPT) -> str:
    """Raw text from the first provider that answers.

    Raises GenerationError when nothing is configured or every provider fails.
    """
    last_error: GenerationError | None = None
    if os.getenv("GEMINI_API_KEY"):
        try:
            return gemini_generate(prompt)
        except GenerationError as e:
            last_error = e
            logger.warning("Gemini failed, trying fallbacks: %s", e)

    msg = [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]
    g = groq_chat(msg)
    if g:
        return g
    o = openrouter_chat(msg)
    if o:
        return o

    if last_error is not None:
        raise last_error
    if not any(os.getenv(k) for k in ("GEMINI_API_KEY", "GROQ_API_KEY", "OPENROUTER_API_KEY")):
        raise GenerationError("No AI provider is configured. Set GEMINI_API_KEY, GROQ_API_KEY or OPENROUTER_API_KEY.")
    raise GenerationError("AI service returned no recommendation. Please try again.")
