from __future__ import annotations

from collections.abc import Iterable, Sequence

from .domains import hostname
from .models import ClassifiedEvidence, EvidenceLink
from .reference import ReferenceData

DEBUNK_KEYWORDS = (
    "debunk",
    "fact-check",
    "fact check",
    "false",
    "incorrect",
    "misleading",
    "hoax",
    "not true",
    "fake",
    "fabricated",
)
SUPPORT_KEYWORDS = (
    "confirmed",
    "reported",
    "official",
    "announced",
    "said",
    "statement",
    "according to",
    "verifiable",
)
FALSE_RATINGS = ("false", "incorrect", "misleading", "pants on fire")
TRUE_RATINGS = ("true", "correct", "accurate")


def _mentions(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def classify_links(
    general: Sequence[EvidenceLink],
    fact_checks: Sequence[EvidenceLink],
    reference: ReferenceData,
) -> ClassifiedEvidence:
    """
    Split search results into support and debunk collections.

    General results are judged by keywords in title and snippet, weighted by
    the curated trust of their domain; fact-check results by their rating.
    Inputs are never mutated and a URL lands in at most one collection.
    """
    support: list[EvidenceLink] = []
    debunk: list[EvidenceLink] = []
    placed: set[str] = set()

    def place(target: list[EvidenceLink], link: EvidenceLink, confidence: float) -> None:
        if link.url in placed:
            return
        placed.add(link.url)
        target.append(link.model_copy(update={"confidence": round(min(1.0, confidence), 4)}))

    for link in general:
        domain = link.source or hostname(link.url)
        trusted = reference.is_trusted(domain)
        confidence = 0.5
        if trusted:
            confidence = max(confidence, 0.75)
        if reference.is_low_trust(domain):
            confidence = min(confidence, 0.25)
        if link.confidence is not None:
            confidence = link.confidence

        text = f"{link.title} {link.snippet or ''}".lower()
        has_debunk = _mentions(text, DEBUNK_KEYWORDS)
        has_support = _mentions(text, SUPPORT_KEYWORDS)
        if has_debunk and not has_support:
            place(debunk, link, confidence + 0.25)
        elif has_support and not has_debunk:
            place(support, link, confidence + 0.2)
        elif trusted:
            place(support, link, confidence)

    for link in fact_checks:
        rating = (link.rating or "").lower()
        confidence = link.confidence if link.confidence is not None else 0.9
        if _mentions(rating, FALSE_RATINGS):
            place(debunk, link, confidence)
        elif _mentions(rating, TRUE_RATINGS):
            place(support, link, confidence)
        else:
            place(debunk, link, min(0.85, confidence))

    return ClassifiedEvidence(support_links=tuple(support), debunk_links=tuple(debunk))


def merge_results(*batches: Sequence[EvidenceLink]) -> list[EvidenceLink]:
    """Concatenate result batches keeping the first occurrence of each URL."""
    seen_urls: set[str] = set()
    unique: list[EvidenceLink] = []
    for batch in batches:
        for item in batch:
            if item.url in seen_urls:
                continue
            seen_urls.add(item.url)
            unique.append(item)
    return unique
