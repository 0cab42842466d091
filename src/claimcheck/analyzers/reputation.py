from __future__ import annotations

import asyncio
import logging
import re
import ssl
from collections.abc import Awaitable, Callable, Sequence

import httpx
from cachetools import TTLCache

from ..config import Settings, get_settings
from ..domains import hostname, is_https, public_suffix
from ..models import DomainReputation, SignalAdjustment
from ..reference import ReferenceData
from .base import ContextAnalyzer

logger = logging.getLogger(__name__)

TlsProbe = Callable[[str], Awaitable[bool | None]]

VAGUE_AUTHORS = ("staff", "admin", "user", "guest", "anonymous", "unknown")
_DIGIT_RUN = re.compile(r"\d{3,}")


def _is_certificate_error(exc: BaseException) -> bool:
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, ssl.SSLError):
            return True
        if "CERTIFICATE_VERIFY_FAILED" in str(current):
            return True
        current = current.__cause__ or current.__context__
    return False


class HttpsProbe:
    """HEAD request with certificate verification; None when the host is unreachable."""

    def __init__(self, *, timeout: float = 3.0, client: httpx.AsyncClient | None = None) -> None:
        self._timeout = timeout
        self._client = client

    async def __call__(self, url: str) -> bool | None:
        try:
            if self._client is not None:
                await self._client.head(url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout, verify=True) as client:
                    await client.head(url)
        except httpx.HTTPError as exc:
            if _is_certificate_error(exc):
                return False
            logger.debug("TLS probe for %s inconclusive: %s", url, exc)
            return None
        return True


def author_credibility(author: str | None) -> float:
    if not author or not author.strip():
        return 0.3
    if any(term in author.lower() for term in VAGUE_AUTHORS):
        return 0.4
    return 0.6


class SourceReputationScorer(ContextAnalyzer):
    """Scores the trustworthiness of every evidence URL and derives a delta."""

    name = "reputation"
    minimum = -0.25
    maximum = 0.30
    uses_evidence = True

    def __init__(
        self,
        reference: ReferenceData,
        *,
        settings: Settings | None = None,
        tls_probe: TlsProbe | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._reference = reference
        self._tls_probe = tls_probe or HttpsProbe(timeout=self._settings.tls_probe_timeout)
        self._cache: TTLCache = TTLCache(maxsize=self._settings.cache_maxsize, ttl=self._settings.cache_ttl)

    async def fetch(self, url: str) -> DomainReputation:
        domain = hostname(url)
        https = is_https(url)
        key = (domain, https)
        if key in self._cache:
            return self._cache[key]
        tls_valid: bool | None = None
        if https and self._settings.check_tls:
            tls_valid = await self._tls_probe(url)
        profile = self._score_domain(url, domain, https, tls_valid)
        # Profiles with an unknown TLS result are never cached.
        if not (https and self._settings.check_tls and tls_valid is None):
            self._cache[key] = profile
        return profile

    async def batch_fetch(self, urls: Sequence[str]) -> list[DomainReputation]:
        tasks = [self.fetch(url) for url in urls]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return [
            result if isinstance(result, DomainReputation) else self._default_profile(url)
            for url, result in zip(urls, results, strict=False)
        ]

    async def analyze(
        self,
        text: str,
        urls: Sequence[str] = (),
        authors: Sequence[str | None] | None = None,
    ) -> SignalAdjustment:
        profiles = await self.batch_fetch(list(urls)) if urls else []
        domain_avg = sum(p.trust_score for p in profiles) / len(profiles) if profiles else 0.5
        if authors:
            author_avg = sum(author_credibility(a) for a in authors) / len(authors)
            overall = domain_avg * 0.7 + author_avg * 0.3
        else:
            overall = domain_avg

        warnings: list[str] = []
        suspicious = sum(1 for p in profiles if p.category == "suspicious")
        if suspicious:
            warnings.append(f"{suspicious} suspicious domain(s) detected")
        insecure = sum(1 for p in profiles if not p.is_https)
        if insecure:
            warnings.append(f"{insecure} source(s) not using HTTPS")
        if authors is not None and not any(a and a.strip() for a in authors):
            warnings.append("No author attribution found")

        if overall < 0.3:
            raw = 0.25
        elif overall < 0.5:
            raw = 0.15
        elif overall > 0.8:
            raw = -0.2
        else:
            raw = 0.0
        return self.adjustment(
            raw,
            warnings,
            overall=round(overall, 4),
            domains={p.domain: p.trust_score for p in profiles},
        )

    def _score_domain(self, url: str, domain: str, https: bool, tls_valid: bool | None) -> DomainReputation:
        flags: list[str] = []
        trusted = self._reference.trusted_entry(domain)
        trust = trusted.trust_score if trusted else 0.5
        suspicious_tld = public_suffix(url).rsplit(".", 1)[-1] in self._reference.suspicious_tlds
        if suspicious_tld:
            trust -= 0.3
            flags.append("suspicious-tld")
        if len(domain) > 40:
            trust -= 0.2
            flags.append("long-domain")
        if domain.count("-") > 3:
            trust -= 0.15
            flags.append("many-hyphens")
        if _DIGIT_RUN.search(domain):
            trust -= 0.1
            flags.append("digit-run")
        if not https:
            trust -= 0.2
            flags.append("no-https")
        elif tls_valid is False:
            trust -= 0.15
            flags.append("invalid-tls")
        if self._reference.is_low_trust(domain):
            flags.append("low-trust-list")

        trust = max(0.0, min(1.0, trust))
        if suspicious_tld or trust < 0.4:
            category = "suspicious"
        elif trust >= 0.7:
            category = "trusted"
        else:
            category = "neutral"
        return DomainReputation(
            domain=domain,
            is_https=https,
            has_valid_tls=tls_valid,
            trust_score=round(trust, 4),
            category=category,
            flags=tuple(flags),
        )

    def _default_profile(self, url: str) -> DomainReputation:
        return DomainReputation(domain=hostname(url), is_https=is_https(url), trust_score=0.5)
