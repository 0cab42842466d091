"""
Read-only reference data (curated domain lists, the debunked-claims catalog,
fact-checker endpoints, monitored feeds) built once from the JSON datasets and
shared by every evaluation.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict

from pydantic import ValidationError

from data_loader import load_datasets

from .domains import domain_matches
from .models import HistoricalClaimRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrustedSource:
    domain: str
    name: str
    group: str
    trust_score: float


@dataclass(frozen=True)
class FactCheckerEndpoint:
    name: str
    url: str
    method: str = "GET"
    api_key_env: str = ""
    auth: str = "bearer"
    query_param: str = "q"
    extra_params: Dict[str, Any] = field(default_factory=dict)
    results_key: str = "results"
    fields: Dict[str, str] = field(default_factory=dict)
    default_confidence: float = 0.7

    def api_key(self) -> str | None:
        return os.getenv(self.api_key_env) if self.api_key_env else None


@dataclass(frozen=True)
class ExpertTopic:
    pattern: re.Pattern
    expert: str
    field: str
    opinion: str


@dataclass(frozen=True)
class MonitoredSource:
    key: str
    name: str
    url: str
    kind: str = "news"
    pattern: re.Pattern | None = None


@dataclass(frozen=True)
class ReferenceData:
    trusted_sources: tuple[TrustedSource, ...] = ()
    direct_publishers: tuple[str, ...] = ()
    low_trust: tuple[str, ...] = ()
    suspicious_tlds: tuple[str, ...] = ()
    catalog: tuple[HistoricalClaimRecord, ...] = ()
    seasons: Dict[str, tuple[int, ...]] = field(default_factory=dict)
    fact_checkers: tuple[FactCheckerEndpoint, ...] = ()
    expert_topics: tuple[ExpertTopic, ...] = ()
    government_sources: tuple[MonitoredSource, ...] = ()
    news_feeds: tuple[MonitoredSource, ...] = ()
    versions: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, data_dir: str | os.PathLike[str]) -> "ReferenceData":
        return cls.from_datasets(load_datasets(data_dir))

    @classmethod
    def from_datasets(cls, datasets: Dict[str, Any]) -> "ReferenceData":
        trusted_payload = datasets.get("trusted_sources") or {}
        catalog_payload = datasets.get("debunked_claims") or {}
        checkers_payload = datasets.get("fact_checkers") or {}
        topics_payload = datasets.get("expert_topics") or {}
        monitoring_payload = datasets.get("monitoring_sources") or {}

        trusted = tuple(
            TrustedSource(
                domain=item["domain"],
                name=item.get("name") or item["domain"],
                group=item.get("group", "international"),
                trust_score=float(item.get("trust_score", 0.85)),
            )
            for item in trusted_payload.get("sources", [])
        )

        catalog: list[HistoricalClaimRecord] = []
        for item in catalog_payload.get("claims", []):
            try:
                catalog.append(HistoricalClaimRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skip invalid catalog entry %s: %s", item.get("id"), exc)

        topics = tuple(
            ExpertTopic(
                pattern=item["_regex"],
                expert=item.get("expert", ""),
                field=item.get("field", ""),
                opinion=item.get("opinion", ""),
            )
            for item in topics_payload.get("topics", [])
            if item.get("_regex") is not None
        )
        government = tuple(
            MonitoredSource(
                key=item.get("key") or item["name"],
                name=item["name"],
                url=item["url"],
                kind=item.get("kind", "government"),
                pattern=item.get("_regex"),
            )
            for item in monitoring_payload.get("government", [])
        )
        news = tuple(
            MonitoredSource(key=item["name"], name=item["name"], url=item["url"])
            for item in monitoring_payload.get("news", [])
        )
        checkers = tuple(
            FactCheckerEndpoint(**{k: v for k, v in item.items() if not k.startswith("_")})
            for item in checkers_payload.get("endpoints", [])
        )
        versions = {
            name: str(payload.get("version", "0"))
            for name, payload in datasets.items()
            if isinstance(payload, dict) and not name.startswith("_")
        }
        return cls(
            trusted_sources=trusted,
            direct_publishers=tuple(trusted_payload.get("direct_publishers", [])),
            low_trust=tuple(trusted_payload.get("low_trust", [])),
            suspicious_tlds=tuple(trusted_payload.get("suspicious_tlds", [])),
            catalog=tuple(catalog),
            seasons={
                name: tuple(int(m) for m in months)
                for name, months in (catalog_payload.get("seasons") or {}).items()
            },
            fact_checkers=checkers,
            expert_topics=topics,
            government_sources=government,
            news_feeds=news,
            versions=versions,
        )

    def trusted_entry(self, domain: str) -> TrustedSource | None:
        """Most specific curated entry covering ``domain``."""
        matches = [s for s in self.trusted_sources if domain_matches(domain, [s.domain])]
        if not matches:
            return None
        return max(matches, key=lambda s: len(s.domain))

    def is_trusted(self, domain: str) -> bool:
        return self.trusted_entry(domain) is not None

    def is_regional(self, domain: str) -> bool:
        entry = self.trusted_entry(domain)
        return entry is not None and entry.group == "regional"

    def is_low_trust(self, domain: str) -> bool:
        return domain_matches(domain, self.low_trust)

    def is_direct_publisher(self, domain: str) -> bool:
        return domain_matches(domain, self.direct_publishers)

    def current_seasons(self, month: int) -> list[str]:
        return [name for name, months in self.seasons.items() if month in months]
