from __future__ import annotations

from collections.abc import Sequence

from ..domains import hostname
from ..models import SignalAdjustment
from ..reference import ReferenceData
from ..text import uppercase_ratio
from .base import ContextAnalyzer

URGENT_PHRASES = (
    "share fast", "pls share", "please share", "forward immediately",
    "urgent", "breaking news", "must share", "share this",
    "අනතුරයි", "යාලුවනෙ", "හැමෝම බලන්න", "බෙදාගන්න", "ඉක්මනට", "වැදගත්",
    "விரைவாக பகிரவும்", "அவசரம்", "முக்கியம்", "பகிருங்கள்",
)
FORWARD_INDICATORS = ("*forwarded*", "forwarded message", "ස්ථිර කරන්න", "பகிர்ந்து")
VAGUE_AUTHORITY = (
    "doctor said", "doctors say", "government confirmed", "official announcement",
    "වෛද්‍යවරු කියයි", "රජය පවසයි", "மருத்துவர்கள்",
)
LOCATIONS = (
    "colombo", "kandy", "galle", "jaffna", "trincomalee", "anuradhapura", "polonnaruwa",
    "matara", "negombo", "කොළඹ", "මහනුවර", "ගාල්ල", "යාපනය", "கொழும்பு", "கண்டி", "யாழ்ப்பாணம்",
)
INSTITUTIONS = (
    "parliament", "president", "ministry", "minister", "police", "army", "navy", "air force",
    "central bank", "cbsl", "පාර්ලිමේන්තුව", "ජනාධිපති", "பாராளுமன்றம்", "அமைச்சர்",
)
RUMOR_CAP = 0.3


def rumor_patterns(text: str) -> tuple[float, list[str]]:
    """Viral-forward heuristics; the total is capped at ``RUMOR_CAP``."""
    lowered = text.lower()
    patterns: list[str] = []
    score = 0.0

    phrase = next((p for p in URGENT_PHRASES if p in lowered), None)
    if phrase:
        score += 0.1
        patterns.append(f'Urgent sharing phrase: "{phrase}"')
    if uppercase_ratio(text) > 0.6 and len(text) > 20:
        score += 0.1
        patterns.append("Excessive uppercase text (screaming)")
    if len(text) < 80 and text.count("!") >= 2:
        score += 0.08
        patterns.append("Very short with multiple exclamation marks")
    if any(indicator in lowered for indicator in FORWARD_INDICATORS):
        score += 0.05
        patterns.append("WhatsApp forward indicator detected")
    if any(claim in lowered for claim in VAGUE_AUTHORITY) and "http" not in lowered and "source" not in lowered:
        score += 0.08
        patterns.append("Vague authority claim without source")
    return min(score, RUMOR_CAP), patterns


def local_context(text: str) -> list[str]:
    lowered = text.lower()
    context = [f"Sri Lankan location mentioned: {loc}" for loc in LOCATIONS if loc in lowered]
    context.extend(f"Sri Lankan institution mentioned: {inst}" for inst in INSTITUTIONS if inst in lowered)
    return context


class RegionalSignalAnalyzer(ContextAnalyzer):
    """Trusted regional outlets among the evidence plus viral-rumor patterns."""

    name = "regional"
    minimum = -0.15
    maximum = 0.30
    uses_evidence = True

    def __init__(self, reference: ReferenceData) -> None:
        self._reference = reference

    def validate_sources(self, urls: Sequence[str]) -> tuple[float, int]:
        trusted = len({hostname(u) for u in urls if self._reference.is_regional(hostname(u))})
        if trusted >= 2:
            return -0.15, trusted
        if trusted == 1:
            return -0.05, trusted
        return 0.0, 0

    async def analyze(self, text: str, urls: Sequence[str] = ()) -> SignalAdjustment:
        source_delta, trusted_count = self.validate_sources(urls)
        rumor_delta, patterns = rumor_patterns(text)
        reasons = list(patterns)
        if trusted_count:
            reasons.append(f"Confirmed by {trusted_count} trusted Sri Lankan source(s)")
        return self.adjustment(
            source_delta + rumor_delta,
            reasons,
            trusted_sources=trusted_count,
            rumor_score=round(rumor_delta, 4),
            context=local_context(text),
        )
