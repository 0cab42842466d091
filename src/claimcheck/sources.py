from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from duckduckgo_search import DDGS

from .config import Settings, get_settings
from .domains import hostname
from .http import http_client
from .models import EvidenceLink

logger = logging.getLogger(__name__)

SERPAPI_ENDPOINT = "https://serpapi.com/search"
FACT_CHECK_ENDPOINT = "https://factchecktools.googleapis.com/v1alpha1/claims:search"
REGIONAL_LANGUAGES = ("si", "ta", "mixed")


class EvidenceSearchClient:
    """General web search plus fact-check search; both return [] on any failure."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client
        self._timeout = timeout or self._settings.search_timeout

    @property
    def configured(self) -> dict[str, bool]:
        return {
            "serpapi": bool(self._settings.serpapi_api_key),
            "duckduckgo": self._settings.duckduckgo_fallback,
            "google_factcheck": bool(self._settings.google_factcheck_api_key),
        }

    async def search(self, query: str, language: str = "en") -> list[EvidenceLink]:
        query = query[: self._settings.search_query_length]
        if self._settings.serpapi_api_key:
            return await self._query_serpapi(query, language)
        if self._settings.duckduckgo_fallback:
            return await asyncio.to_thread(self._ddg_text_sync, query, language)
        logger.debug("No general search provider configured")
        return []

    async def search_fact_checks(self, query: str) -> list[EvidenceLink]:
        api_key = self._settings.google_factcheck_api_key
        if not api_key:
            logger.debug("GOOGLE_FACTCHECK_API_KEY not configured")
            return []
        params = {"key": api_key, "query": query[: self._settings.search_query_length], "languageCode": "en"}
        payload = await self._get_json(FACT_CHECK_ENDPOINT, params, service="google-factcheck")
        if not isinstance(payload, dict):
            return []
        output: list[EvidenceLink] = []
        for claim in payload.get("claims", []) or []:
            reviews = claim.get("claimReview") or []
            if not reviews:
                continue
            review = reviews[0]
            link = review.get("url")
            if not link:
                continue
            output.append(
                EvidenceLink(
                    title=claim.get("text") or review.get("title") or "Fact Check",
                    url=link,
                    source=(review.get("publisher") or {}).get("name") or "Fact Checker",
                    rating=review.get("textualRating"),
                    snippet=review.get("title") or claim.get("text"),
                    confidence=0.9,
                )
            )
        return output

    async def _query_serpapi(self, query: str, language: str) -> list[EvidenceLink]:
        regional = language in REGIONAL_LANGUAGES
        params = {
            "api_key": self._settings.serpapi_api_key,
            "q": query,
            "engine": "google",
            "num": 10,
            "gl": "lk" if regional else "us",
            "hl": ("ta" if language == "ta" else "si") if regional else "en",
        }
        payload = await self._get_json(SERPAPI_ENDPOINT, params, service="serpapi")
        if not isinstance(payload, dict):
            return []
        output: list[EvidenceLink] = []
        for item in payload.get("organic_results", []) or []:
            link = item.get("link")
            if not link:
                continue
            output.append(
                EvidenceLink(
                    title=item.get("title") or "Search result",
                    url=link,
                    source=hostname(link),
                    snippet=item.get("snippet"),
                )
            )
        return output

    def _ddg_text_sync(self, query: str, language: str) -> list[EvidenceLink]:
        region = "lk-en" if language in REGIONAL_LANGUAGES else "wt-wt"
        output: list[EvidenceLink] = []
        try:
            with DDGS() as ddgs:
                for item in ddgs.text(query, region=region, safesearch="moderate", max_results=10) or []:
                    link = item.get("href") or item.get("url")
                    if not link:
                        continue
                    output.append(
                        EvidenceLink(
                            title=item.get("title") or "DuckDuckGo result",
                            url=link,
                            source=hostname(link),
                            snippet=item.get("body"),
                        )
                    )
        except Exception as exc:  # noqa: BLE001
            logger.warning("DuckDuckGo search failed: %s", exc)
            return []
        return output

    async def _get_json(self, url: str, params: dict[str, Any], *, service: str) -> Any:
        async with http_client(self._client, timeout=self._timeout) as client:
            try:
                response = await client.get(url, params=params, timeout=self._timeout)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPError as exc:
                logger.warning("%s request failed: %s", service, exc)
            except ValueError as exc:
                logger.warning("%s returned malformed JSON: %s", service, exc)
        return None
