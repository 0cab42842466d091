"""
Expert and official corroboration: professional fact-checker endpoints plus
topic-matched official advisories.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any, Dict, List

import httpx

from ..config import Settings, get_settings
from ..errors import ExternalServiceError
from ..http import http_client
from ..models import FactCheckerResult, SignalAdjustment
from ..reference import ExpertTopic, FactCheckerEndpoint, ReferenceData
from .base import ContextAnalyzer

logger = logging.getLogger(__name__)

VERDICT_ALIASES = {
    "false": "false",
    "fake": "false",
    "incorrect": "false",
    "pants on fire": "false",
    "misleading": "misleading",
    "partly false": "misleading",
    "half true": "mixed",
    "mixed": "mixed",
    "true": "true",
    "correct": "true",
    "accurate": "true",
}


def normalize_verdict(raw: Any) -> str:
    value = str(raw or "").strip().lower()
    return VERDICT_ALIASES.get(value, "unverified")


class ExpertCorroborationAnalyzer(ContextAnalyzer):
    """Query external fact-checking endpoints and official advisories."""

    name = "experts"
    minimum = -0.30
    maximum = 0.40

    def __init__(
        self,
        reference: ReferenceData,
        *,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._reference = reference
        self._client = client
        self.timeout = self._settings.fact_checker_timeout

    async def query_endpoint(self, endpoint: FactCheckerEndpoint, claim: str) -> List[FactCheckerResult]:
        api_key = endpoint.api_key()
        if not api_key:
            logger.debug("%s API key not configured", endpoint.name)
            return []

        headers = (
            {"X-API-Key": api_key}
            if endpoint.auth == "x-api-key"
            else {"Authorization": f"Bearer {api_key}"}
        )
        payload = {endpoint.query_param: claim, **endpoint.extra_params}
        async with http_client(self._client, timeout=self.timeout) as client:
            try:
                if endpoint.method.upper() == "POST":
                    response = await client.post(endpoint.url, json=payload, headers=headers, timeout=self.timeout)
                else:
                    response = await client.get(endpoint.url, params=payload, headers=headers, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPError as exc:
                raise ExternalServiceError(endpoint.name, f"API error: {exc}") from exc
            except ValueError as exc:
                raise ExternalServiceError(endpoint.name, f"malformed JSON: {exc}") from exc

        items = data.get(endpoint.results_key) if isinstance(data, dict) else None
        if not isinstance(items, list):
            return []
        fields = endpoint.fields
        results: List[FactCheckerResult] = []
        for item in items:
            if not isinstance(item, dict) or not item.get(fields.get("url", "url")):
                continue
            try:
                confidence = float(item.get(fields.get("confidence", "confidence")) or endpoint.default_confidence)
            except (TypeError, ValueError):
                confidence = endpoint.default_confidence
            results.append(
                FactCheckerResult(
                    source=endpoint.name,
                    url=str(item[fields.get("url", "url")]),
                    verdict=normalize_verdict(item.get(fields.get("verdict", "verdict"))),
                    confidence=max(0.0, min(1.0, confidence)),
                    published_date=item.get(fields.get("published_date", "published_date")),
                    summary=item.get(fields.get("summary", "summary")),
                )
            )
        return results

    async def check_all(self, claim: str) -> List[FactCheckerResult]:
        """Run every configured endpoint in parallel."""
        tasks = [self.query_endpoint(endpoint, claim) for endpoint in self._reference.fact_checkers]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        merged: List[FactCheckerResult] = []
        for endpoint, result in zip(self._reference.fact_checkers, results, strict=False):
            if isinstance(result, BaseException):
                logger.warning("%s lookup failed: %s", endpoint.name, result)
                continue
            merged.extend(result)
        return merged

    def match_topics(self, claim: str) -> List[ExpertTopic]:
        return [topic for topic in self._reference.expert_topics if topic.pattern.search(claim)]

    async def analyze(self, text: str, urls: Sequence[str] = ()) -> SignalAdjustment:
        checks = await self.check_all(text)
        false_checks = [c for c in checks if c.verdict == "false"]
        misleading = [c for c in checks if c.verdict == "misleading"]
        confirmed = [c for c in checks if c.verdict == "true"]

        raw = 0.0
        reasons: list[str] = []
        if false_checks:
            raw = 0.3 + 0.05 * (len(false_checks) - 1)
            names = ", ".join(dict.fromkeys(c.source for c in false_checks))
            reasons.append(f"Debunked by {len(false_checks)} professional fact-checker(s): {names}")
        elif misleading:
            raw = 0.15
            reasons.append(f"Rated misleading by {len(misleading)} professional fact-checker(s)")
        elif confirmed:
            raw = -0.2
            reasons.append(f"Confirmed by {len(confirmed)} professional fact-checker(s)")

        for topic in self.match_topics(text):
            reasons.append(f"{topic.expert}: {topic.opinion}")

        return self.adjustment(
            raw,
            reasons,
            fact_checks=[c.model_dump() for c in checks[:5]],
        )

    def status(self) -> Dict[str, Dict[str, bool]]:
        return {
            endpoint.name: {"enabled": True, "configured": bool(endpoint.api_key())}
            for endpoint in self._reference.fact_checkers
        }
