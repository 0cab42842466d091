from __future__ import annotations

import asyncio
import logging
from calendar import timegm
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import feedparser
import httpx

from ..config import Settings, get_settings
from ..http import http_client
from ..models import SignalAdjustment
from ..reference import MonitoredSource, ReferenceData
from ..text import find_terms, normalize_words
from .base import ContextAnalyzer

logger = logging.getLogger(__name__)

BREAKING_INDICATORS = (
    "breaking", "just now", "today", "this morning", "tonight", "currently",
    "happening now", "live", "urgent", "alert", "breaking news",
    "දැන්", "අද", "මේ වනවිට", "හදිසි",
    "இப்போது", "இன்று", "அவசர",
)
RECENT_INDICATORS = (
    "yesterday", "last night", "this week", "recent", "latest",
    "ඊයේ", "මෑතකදී",
    "நேற்று", "சமீபத்தில்",
)
STOP_WORDS = frozenset({"the", "is", "at", "which", "on", "a", "an", "and", "or", "but", "will", "from", "with", "that", "this"})
ALERT_KINDS = ("emergency", "weather")
ALERT_WINDOW = timedelta(hours=48)


@dataclass(frozen=True)
class FeedItem:
    source: str
    title: str
    link: str = ""
    summary: str = ""
    published: datetime | None = None


FeedFetcher = Callable[[MonitoredSource], Awaitable[list[FeedItem]]]


def extract_keywords(claim: str, limit: int = 5) -> list[str]:
    words = [w for w in normalize_words(claim) if len(w) > 3 and w not in STOP_WORDS]
    return list(dict.fromkeys(words))[:limit]


def analyze_recency(claim: str) -> tuple[bool, str]:
    if find_terms(claim, BREAKING_INDICATORS):
        return True, "immediate"
    if find_terms(claim, RECENT_INDICATORS):
        return True, "recent"
    return False, "unknown"


class RssFeedFetcher:
    """Download a feed with httpx and parse it with feedparser."""

    def __init__(self, *, timeout: float = 5.0, client: httpx.AsyncClient | None = None) -> None:
        self._timeout = timeout
        self._client = client

    async def __call__(self, source: MonitoredSource) -> list[FeedItem]:
        async with http_client(self._client, timeout=self._timeout) as client:
            try:
                response = await client.get(source.url, timeout=self._timeout)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.warning("Feed %s unavailable: %s", source.name, exc)
                return []
        feed = await asyncio.to_thread(feedparser.parse, response.text)
        items: list[FeedItem] = []
        for entry in getattr(feed, "entries", [])[:30]:
            parsed = entry.get("published_parsed") or entry.get("updated_parsed")
            published = datetime.fromtimestamp(timegm(parsed), tz=timezone.utc) if parsed else None
            items.append(
                FeedItem(
                    source=source.name,
                    title=entry.get("title") or "",
                    link=entry.get("link") or "",
                    summary=entry.get("summary") or "",
                    published=published,
                )
            )
        return items


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RealTimeCorroborationAnalyzer(ContextAnalyzer):
    """Cross-checks breaking claims against news feeds and official sources."""

    name = "realtime"
    minimum = -0.30
    maximum = 0.25

    def __init__(
        self,
        reference: ReferenceData,
        *,
        settings: Settings | None = None,
        fetcher: FeedFetcher | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._settings = settings or get_settings()
        self._reference = reference
        self._fetcher = fetcher or RssFeedFetcher(timeout=self._settings.feed_timeout)
        self._clock = clock

    async def _fetch_many(self, sources: Sequence[MonitoredSource]) -> list[list[FeedItem]]:
        results = await asyncio.gather(*(self._fetcher(s) for s in sources), return_exceptions=True)
        output: list[list[FeedItem]] = []
        for source, result in zip(sources, results, strict=False):
            if isinstance(result, BaseException):
                logger.warning("Feed %s failed: %s", source.name, result)
                output.append([])
            else:
                output.append(result)
        return output

    @staticmethod
    def _relevant(items: list[FeedItem], keywords: list[str]) -> list[FeedItem]:
        if not keywords:
            return []
        needed = min(2, len(keywords))
        return [
            item
            for item in items
            if len(find_terms(f"{item.title} {item.summary}", keywords)) >= needed
        ]

    async def analyze(self, text: str, urls: Sequence[str] = ()) -> SignalAdjustment:
        keywords = extract_keywords(text)
        is_breaking, timeframe = analyze_recency(text)
        lowered = text.lower()

        government = [
            s for s in self._reference.government_sources if s.pattern is not None and s.pattern.search(lowered)
        ]
        alert_sources = [s for s in self._reference.government_sources if s.kind in ALERT_KINDS]
        news_sources = list(self._reference.news_feeds)

        monitored = list(dict.fromkeys([*news_sources, *government, *alert_sources]))
        fetched = dict(zip(monitored, await self._fetch_many(monitored), strict=False))

        breaking_news = self._relevant([i for s in news_sources for i in fetched[s]], keywords)
        statements = self._relevant([i for s in government for i in fetched[s]], keywords)
        now = self._clock()
        alerts = [
            item
            for s in alert_sources
            for item in fetched[s]
            if item.published is not None and now - item.published <= ALERT_WINDOW
        ]

        raw = 0.0
        notes: list[str] = []
        if is_breaking and not statements and not breaking_news:
            raw += 0.2
            notes.append("Claim mentions breaking news but no official sources found - exercise caution")
        if statements:
            raw -= 0.25
            notes.append("Official government statement available - verify against it")
            notes.extend(f"Check: {item.source} - {item.title}" for item in statements[:3])
        if alerts:
            notes.append("Active emergency alert found - verify claim against official alerts")
            notes.extend(f"{item.source}: {item.title}" for item in alerts[:3])
        if breaking_news:
            notes.append(f"{len(breaking_news)} news source(s) reporting on this topic")

        return self.adjustment(
            raw,
            notes,
            breaking=is_breaking,
            timeframe=timeframe,
            keywords=keywords,
            official_statements=len(statements),
            active_alerts=len(alerts),
        )

    def status(self) -> dict[str, object]:
        return {
            "government_sources": len(self._reference.government_sources),
            "news_sources": len(self._reference.news_feeds),
            "last_check": self._clock().isoformat(),
            "status": "operational",
        }
