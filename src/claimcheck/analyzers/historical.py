from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from ..models import HistoricalClaimRecord, SignalAdjustment
from ..reference import ReferenceData
from ..text import normalize_words
from .base import ContextAnalyzer

MATCH_THRESHOLD = 0.3
STRONG_MATCH = 0.4
RECURRING_MATCH = 0.6
MAX_MATCHES = 3


def jaccard_similarity(left: str, right: str) -> float:
    left_words = set(normalize_words(left))
    right_words = set(normalize_words(right))
    union = left_words | right_words
    if not union:
        return 0.0
    return len(left_words & right_words) / len(union)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoricalPatternMatcher(ContextAnalyzer):
    """Compares a claim against the catalog of previously debunked claims."""

    name = "historical"
    minimum = 0.0
    maximum = 0.35

    def __init__(self, reference: ReferenceData, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._reference = reference
        self._clock = clock

    def match(self, text: str) -> list[tuple[HistoricalClaimRecord, float]]:
        scored = [(record, jaccard_similarity(text, record.text)) for record in self._reference.catalog]
        matches = [item for item in scored if item[1] > MATCH_THRESHOLD]
        matches.sort(key=lambda item: item[1], reverse=True)
        return matches[:MAX_MATCHES]

    async def analyze(self, text: str, urls: Sequence[str] = ()) -> SignalAdjustment:
        matches = self.match(text)
        if not matches:
            return self.adjustment(0.0, similarity=0.0, matched=[])

        seasons = self._reference.current_seasons(self._clock().month)
        best_record, best = matches[0]
        raw = 0.0
        reasons: list[str] = []
        if best > RECURRING_MATCH:
            raw += 0.25
        elif best > STRONG_MATCH:
            raw += 0.15
        if raw:
            reasons.append(f"Similar to previously debunked claim ({round(best * 100)}% match)")

        seasonal = any(record.season in seasons for record, _ in matches if record.season)
        if seasonal:
            raw += 0.1
            reasons.append("Common fake news pattern for this time period")

        return self.adjustment(
            raw,
            reasons,
            similarity=round(best, 4),
            recurring=best > RECURRING_MATCH,
            seasonal=seasonal,
            category=best_record.category,
            matched=[record.id for record, _ in matches],
        )

    def catalog_stats(self) -> dict[str, object]:
        by_category: dict[str, int] = {}
        for record in self._reference.catalog:
            by_category[record.category] = by_category.get(record.category, 0) + 1
        dates = sorted(record.debunked_date for record in self._reference.catalog)
        return {
            "total_claims": len(self._reference.catalog),
            "by_category": by_category,
            "current_seasons": self._reference.current_seasons(self._clock().month),
            "latest_debunk": dates[-1].isoformat() if dates else None,
            "version": self._reference.versions.get("debunked_claims"),
        }
