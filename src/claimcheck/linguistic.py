from __future__ import annotations

import re

from .models import LinguisticResult
from .text import find_terms

MIN_CONTENT_LENGTH = 15
INSUFFICIENT_REASON = (
    "Minimum 15 characters required for analysis. Please provide a complete claim to fact-check."
)


class HeuristicLinguisticScorer:
    """Rule-based base score: 0 looks factual, 1 looks fabricated."""

    SENSATIONAL_WORDS = (
        "shocking",
        "unbelievable",
        "secret",
        "exposed",
        "revealed",
        "scandal",
        "urgent",
        "breaking",
        "exclusive",
        "miracle",
        "dangerous",
        "terrifying",
        "amazing",
        "incredible",
    )
    KNOWN_ACRONYMS = frozenset(
        {"USA", "UK", "EU", "UN", "WHO", "NATO", "UNICEF", "UNHCR", "FBI", "CIA", "CDC", "NASA"}
    )
    ALL_CAPS_PATTERN = re.compile(r"\b[A-Z]{3,}\b")
    ATTRIBUTION_PATTERN = re.compile(r"according to|source|study|research|report|said|stated", re.I)
    CREDIBLE_OUTLETS = (
        "reuters",
        "ap news",
        "associated press",
        "bbc",
        "guardian",
        "new york times",
        "nytimes",
        "washington post",
        "who",
        "world health organization",
    )
    OFFICIAL_ROLES = (
        "president",
        "minister",
        "ministry",
        "command",
        "department",
        "spokesperson",
        "spokesman",
        "spokeswoman",
        "secretary",
        "foreign minister",
        "defense minister",
        "africom",
        "state department",
    )
    VAGUE_PHRASES = ("they say", "people are saying", "many believe", "experts claim", "sources say")
    EMOTIONAL_WORDS = ("fear", "hate", "love", "angry", "outraged", "devastated", "heartbreaking")
    CONSPIRACY_PHRASES = (
        "cover-up",
        "conspiracy",
        "hidden truth",
        "they don't want you to know",
        "wake up",
    )

    def score(self, text: str) -> LinguisticResult:
        text = text or ""
        if len(text.strip()) < MIN_CONTENT_LENGTH:
            return LinguisticResult(score=0.5, reasons=(INSUFFICIENT_REASON,), insufficient=True)

        score = 0.5
        reasons: list[str] = []
        negatives = 0

        sensational = find_terms(text, self.SENSATIONAL_WORDS)
        if len(sensational) >= 3:
            score += 0.2
            negatives += 1
            reasons.append("Contains multiple sensational phrases designed to provoke strong emotions")
        elif sensational:
            score += 0.1
            negatives += 1
            reasons.append(f"Contains sensational wording: {', '.join(sensational)}")

        if text.count("!") >= 3:
            score += 0.15
            negatives += 1
            reasons.append("Contains excessive exclamation marks, a common tactic in misleading content")

        caps_words = [w for w in self.ALL_CAPS_PATTERN.findall(text) if w not in self.KNOWN_ACRONYMS]
        if len(caps_words) >= 3:
            score += 0.08
            negatives += 1
            reasons.append(
                "Uses ALL CAPS formatting excessively, often seen in sensationalized content "
                "(ignoring standard acronyms)"
            )

        if len(text) < 100:
            score += 0.1
            negatives += 1
            reasons.append("Very short content without sufficient context or detail")
        elif len(text) > 1000:
            score -= 0.05

        if not self.ATTRIBUTION_PATTERN.search(text):
            if len(text) > 200:
                score += 0.15
                negatives += 1
                reasons.append("No clear attribution or sources mentioned in the content")
        else:
            score -= 0.1
            if find_terms(text, self.CREDIBLE_OUTLETS):
                score -= 0.08
                reasons.append("Mentions credible sources or official statements")
            if len(find_terms(text, self.OFFICIAL_ROLES)) >= 2:
                score -= 0.12
                reasons.append("Multiple named official sources are cited")

        if len(find_terms(text, self.VAGUE_PHRASES)) >= 2:
            score += 0.1
            negatives += 1
            reasons.append("Uses vague attributions without naming specific sources")

        if len(find_terms(text, self.EMOTIONAL_WORDS)) >= 3:
            score += 0.1
            negatives += 1
            reasons.append("Heavy use of emotional language designed to manipulate readers")

        if find_terms(text, self.CONSPIRACY_PHRASES):
            score += 0.15
            negatives += 1
            reasons.append("Contains conspiracy-related language and rhetoric")

        score = round(max(0.0, min(1.0, score)), 4)
        if negatives == 0 and score < 0.4:
            reasons.append("Content appears measured and factual in tone")
            reasons.append("No obvious sensational or manipulative language detected")
        return LinguisticResult(score=score, reasons=tuple(reasons), negative_indicators=negatives)
