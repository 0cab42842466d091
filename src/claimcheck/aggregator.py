from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .errors import AdjustmentRangeError
from .models import SignalAdjustment

logger = logging.getLogger(__name__)

FAKE_THRESHOLD = 0.65
REAL_THRESHOLD = 0.35
UNCERTAIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.95
DEBUNK_BASE = 0.2
DEBUNK_PER_LINK = 0.05
SUPPORT_MIN_LINKS = 3
SUPPORT_CORRECTION = 0.15
DIRECT_PUBLISHER_CORRECTION = 0.35


@dataclass
class ScoreBreakdown:
    score: float
    components: dict[str, float] = field(default_factory=dict)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _checked_delta(adjustment: SignalAdjustment, strict: bool) -> float:
    if adjustment.in_range:
        return adjustment.delta
    message = (
        f"{adjustment.name} delta {adjustment.delta} outside "
        f"[{adjustment.minimum}, {adjustment.maximum}]"
    )
    if strict:
        raise AdjustmentRangeError(message)
    logger.error("%s; clamping", message)
    return max(adjustment.minimum, min(adjustment.maximum, adjustment.delta))


def aggregate(
    base: float,
    adjustments: Sequence[SignalAdjustment],
    *,
    support_count: int,
    debunk_count: int,
    direct_publisher: bool = False,
    strict: bool = False,
) -> ScoreBreakdown:
    """
    Combine the base score with analyzer deltas and evidence corrections.

    Order: clamp(base + sum of deltas), then the debunk penalty, then the
    corroboration bonus (only with no debunks), then the direct-publisher
    bonus. Every step is clamped to [0, 1].
    """
    components: dict[str, float] = {"base": round(base, 4)}
    total = 0.0
    for adjustment in adjustments:
        delta = _checked_delta(adjustment, strict)
        components[adjustment.name] = round(delta, 4)
        total += delta
    score = clamp01(base + total)

    if debunk_count > 0:
        correction = DEBUNK_BASE + DEBUNK_PER_LINK * debunk_count
        score = clamp01(score + correction)
        components["debunk_evidence"] = round(correction, 4)
    if support_count >= SUPPORT_MIN_LINKS and debunk_count == 0:
        score = clamp01(score - SUPPORT_CORRECTION)
        components["support_evidence"] = -SUPPORT_CORRECTION
    if direct_publisher:
        score = clamp01(score - DIRECT_PUBLISHER_CORRECTION)
        components["direct_publisher"] = -DIRECT_PUBLISHER_CORRECTION

    score = round(score, 4)
    components["final"] = score
    return ScoreBreakdown(score=score, components=components)


def score_to_verdict(score: float, *, insufficient: bool = False) -> str:
    if insufficient:
        return "unanalyzable"
    if score >= FAKE_THRESHOLD:
        return "fake"
    if score <= REAL_THRESHOLD:
        return "real"
    return "uncertain"


def score_to_confidence(score: float, verdict: str) -> float:
    if verdict == "unanalyzable":
        return 0.0
    if verdict == "uncertain":
        return UNCERTAIN_CONFIDENCE
    distance = abs(score - 0.5) * 2
    return round(min(MAX_CONFIDENCE, distance**0.7), 4)
