"""
Generative phrasing adapter (Gemini REST API) with strict fallback.
Turns a finished Analysis into a user-facing message. Any missing key,
timeout, quota exhaustion or malformed answer raises PhrasingFallbackError so
callers can fall back to the deterministic template.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, List

import httpx
from cachetools import TTLCache

from .config import Settings, get_settings
from .errors import PhrasingFallbackError
from .http import http_client
from .models import Analysis

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

LANGUAGE_INSTRUCTIONS = {
    "si": "Respond in Sinhala (සිංහල). Keep technical terms such as URLs in English.",
    "ta": "Respond in Tamil (தமிழ்). Keep technical terms such as URLs in English.",
    "en": "Respond in English.",
}


def build_prompt(analysis: Analysis, language: str) -> str:
    instruction = LANGUAGE_INSTRUCTIONS.get(language, LANGUAGE_INSTRUCTIONS["si" if language == "mixed" else "en"])
    reasons = "\n".join(f"- {reason}" for reason in analysis.reasons)
    if analysis.verdict == "unanalyzable":
        return (
            f"You are a fact-checking assistant. {instruction}\n\n"
            f'The user submitted: "{analysis.claim_text}"\n\n'
            "This input is too short or vague to fact-check. Politely explain why it "
            "cannot be analyzed and ask for a complete claim, statement or article.\n\n"
            f"Details:\n{reasons}"
        )
    support = "\n".join(f"- {link.title}: {link.url}" for link in analysis.support_links[:3]) or "- none"
    debunk = "\n".join(f"- {link.title}: {link.url}" for link in analysis.debunk_links[:3]) or "- none"
    return (
        f"You are a fact-checking assistant. {instruction}\n\n"
        f'Claim: "{analysis.claim_text}"\n'
        f"Verdict: {analysis.verdict}\n"
        f"Confidence: {round(analysis.confidence * 100)}%\n\n"
        f"Reasons:\n{reasons}\n\n"
        f"Supporting sources:\n{support}\n\n"
        f"Debunking sources:\n{debunk}\n\n"
        "Write a short, clear explanation of this verdict for a general audience. "
        "Do not change the verdict or the confidence. End with a one-line reminder "
        "that this is an automated estimation and official sources should be checked."
    )


class PhrasingClient:
    """Gemini generateContent client; tries each configured model in turn."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client
        self._timeout = self._settings.phrasing_timeout
        self._cache: TTLCache = TTLCache(maxsize=self._settings.cache_maxsize, ttl=self._settings.cache_ttl)

    @property
    def configured(self) -> bool:
        return bool(self._settings.gemini_api_key)

    async def phrase(self, analysis: Analysis, language: str = "en") -> str:
        api_key = self._settings.gemini_api_key
        if not api_key:
            raise PhrasingFallbackError("GEMINI_API_KEY not configured")
        prompt = build_prompt(analysis, language)
        cache_key = self._cache_key(prompt)
        if cache_key in self._cache:
            return self._cache[cache_key]

        errors: List[str] = []
        async with http_client(self._client, timeout=self._timeout) as client:
            for model in self._settings.gemini_models:
                try:
                    text = await self._generate(client, model, api_key, prompt)
                except httpx.HTTPStatusError as exc:
                    errors.append(f"{model}: HTTP {exc.response.status_code}")
                    if exc.response.status_code == 429:
                        logger.info("Gemini model %s rate limited, trying next", model)
                        continue
                    break
                except (httpx.HTTPError, ValueError) as exc:
                    errors.append(f"{model}: {exc}")
                    break
                self._cache[cache_key] = text
                return text
        logger.warning("Phrasing service unavailable: %s", "; ".join(errors) or "no models configured")
        raise PhrasingFallbackError("All Gemini models failed")

    async def _generate(self, client: httpx.AsyncClient, model: str, api_key: str, prompt: str) -> str:
        response = await client.post(
            GEMINI_ENDPOINT.format(model=model),
            params={"key": api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
            timeout=self._timeout,
        )
        response.raise_for_status()
        return self._extract_text(response.json())

    @staticmethod
    def _extract_text(payload: Any) -> str:
        try:
            parts = payload["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts).strip()
        except (KeyError, IndexError, TypeError) as exc:
            raise ValueError(f"Unexpected Gemini response shape: {exc}") from exc
        if not text:
            raise ValueError("Empty Gemini response")
        return text

    @staticmethod
    def _cache_key(prompt: str) -> str:
        return hashlib.sha256(prompt.encode("utf-8")).hexdigest()
