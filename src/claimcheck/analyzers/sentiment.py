from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from ..models import SignalAdjustment
from ..text import find_terms, uppercase_ratio
from .base import ContextAnalyzer

FEAR_TRIGGERS = (
    "danger", "threat", "deadly", "fatal", "death", "die", "kill", "harmful", "toxic",
    "pandemic", "outbreak", "epidemic", "virus", "disease", "cancer", "poison",
    "disaster", "catastrophe", "emergency", "urgent", "warning", "alert",
    "scary", "terrifying", "horrifying", "shocking", "crisis", "collapse",
    "භයානක", "මරණය", "අනතුර", "අර්බුදය", "මරාගෙන",
    "ஆபத்து", "மரணம்", "நோய்", "அவசரம்",
)
ANGER_TRIGGERS = (
    "outrage", "scandal", "betrayal", "lie", "fraud", "cheat", "steal", "corrupt",
    "injustice", "unfair", "attack", "destroy", "ruin", "evil", "criminal",
    "hate", "disgrace", "shame", "insult", "abuse", "exploit",
    "වංචා", "දුෂණය", "අපරාධ", "මෝසම", "කෝප",
    "ஊழல்", "மோசடி", "குற்றம்", "கோபம்",
)
PEOPLE = (
    "president", "prime minister", "minister", "mp", "member of parliament",
    "ජනාධිපති", "අගමැති", "ප්‍රධාන", "පාර්ලිමේන්තු",
    "ஜனாதிபதி", "பிரதமர்", "அமைச்சர்",
)
PLACES = (
    "colombo", "kandy", "galle", "jaffna", "anuradhapura", "trincomalee", "batticaloa",
    "negombo", "matara", "kurunegala", "ratnapura", "badulla", "ampara", "vavuniya",
    "කොළඹ", "මහනුවර", "ගාල්ල", "යාපනය", "අනුරාධපුර",
    "கொழும்பு", "கண்டி", "யாழ்ப்பாணம்", "திருகோணமலை",
    "sri lanka", "ශ්‍රී ලංකා", "இலங்கை",
)
ORGANIZATIONS = (
    "parliament", "government", "ministry", "police", "army", "navy", "air force",
    "central bank", "cbsl", "elections commission", "health ministry", "education ministry",
    "පාර්ලිමේන්තුව", "රජය", "අමාත්‍යාංශය", "පොලීසිය", "හමුදාව",
    "பாராளுமன்றம்", "அரசாங்கம்", "அமைச்சகம்", "காவல்துறை",
)

NUMERIC_DATE = re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})\b")
NAMED_DATE = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\s+(\d{1,2}),?\s+(\d{4})\b", re.I
)
NUMBER = re.compile(r"\b\d+(?:,\d{3})*(?:\.\d+)?\b")
MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")


@dataclass
class SentimentProfile:
    sentiment: str
    emotional_score: float
    manipulation_score: float
    fear_triggers: list[str] = field(default_factory=list)
    anger_triggers: list[str] = field(default_factory=list)


@dataclass
class EntityProfile:
    people: list[str] = field(default_factory=list)
    places: list[str] = field(default_factory=list)
    organizations: list[str] = field(default_factory=list)
    suspicious_dates: list[str] = field(default_factory=list)
    suspicious_numbers: list[str] = field(default_factory=list)
    date_count: int = 0
    number_count: int = 0


def analyze_sentiment(text: str) -> SentimentProfile:
    fear = find_terms(text, FEAR_TRIGGERS)
    anger = find_terms(text, ANGER_TRIGGERS)
    fear_score = min(len(fear) / 3, 1.0)
    anger_score = min(len(anger) / 3, 1.0)
    emotional = max(fear_score, anger_score)
    if fear_score > 0.3:
        sentiment = "fear"
    elif anger_score > 0.3:
        sentiment = "anger"
    elif emotional > 0:
        sentiment = "negative"
    else:
        sentiment = "neutral"
    manipulation = min(emotional * 0.5 + uppercase_ratio(text) * 0.3 + text.count("!") / 10 * 0.2, 1.0)
    return SentimentProfile(
        sentiment=sentiment,
        emotional_score=round(emotional, 4),
        manipulation_score=round(manipulation, 4),
        fear_triggers=fear,
        anger_triggers=anger,
    )


def _parse_numeric_date(day: str, month: str, year: str) -> date | None:
    full_year = int(year) + 2000 if len(year) == 2 else int(year)
    # day-first is the regional convention; fall back to month-first
    for d, m in ((int(day), int(month)), (int(month), int(day))):
        try:
            return date(full_year, m, d)
        except ValueError:
            continue
    return None


def _parse_named_date(month: str, day: str, year: str) -> date | None:
    try:
        return date(int(year), MONTHS.index(month.lower()[:3]) + 1, int(day))
    except ValueError:
        return None


def is_plausible_date(value: date | None, today: date) -> bool:
    if value is None:
        return False
    year_diff = abs(value.year - today.year)
    return year_diff <= 10 and (value <= today or year_diff <= 1)


def is_plausible_number(raw: str) -> bool:
    cleaned = raw.replace(",", "")
    try:
        value = float(cleaned)
    except ValueError:
        return False
    if value > 1e12:
        return False
    if "." not in cleaned and value >= 1_000_000 and value % 100_000 == 0:
        return False
    return True


def extract_entities(text: str, today: date) -> EntityProfile:
    profile = EntityProfile(
        people=find_terms(text, PEOPLE),
        places=find_terms(text, PLACES),
        organizations=find_terms(text, ORGANIZATIONS),
    )
    for match in NUMERIC_DATE.finditer(text):
        profile.date_count += 1
        if not is_plausible_date(_parse_numeric_date(*match.groups()), today):
            profile.suspicious_dates.append(match.group(0))
    for match in NAMED_DATE.finditer(text):
        profile.date_count += 1
        if not is_plausible_date(_parse_named_date(*match.groups()), today):
            profile.suspicious_dates.append(match.group(0))
    for match in NUMBER.finditer(text):
        profile.number_count += 1
        if not is_plausible_number(match.group(0)):
            profile.suspicious_numbers.append(match.group(0))
    return profile


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SentimentEntityAnalyzer(ContextAnalyzer):
    """Emotional manipulation plus plausibility of named dates and figures."""

    name = "sentiment"
    minimum = 0.0
    maximum = 0.40

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    async def analyze(self, text: str, urls: Sequence[str] = ()) -> SignalAdjustment:
        sentiment = analyze_sentiment(text)
        entities = extract_entities(text, self._clock().date())
        raw = 0.0
        warnings: list[str] = []

        if sentiment.manipulation_score > 0.6:
            raw += 0.2
            warnings.append("High emotional manipulation detected")
        elif sentiment.manipulation_score > 0.4:
            raw += 0.1
            warnings.append("Moderate emotional language detected")
        if sentiment.sentiment == "fear":
            raw += 0.1
            warnings.append(f"Fear triggers: {', '.join(sentiment.fear_triggers)}")
        if sentiment.sentiment == "anger":
            raw += 0.1
            warnings.append(f"Anger triggers: {', '.join(sentiment.anger_triggers)}")
        if entities.suspicious_dates:
            raw += 0.1
            warnings.append(f"Suspicious dates: {', '.join(entities.suspicious_dates)}")
        if entities.suspicious_numbers:
            raw += 0.1
            warnings.append(f"Suspicious numbers: {', '.join(entities.suspicious_numbers)}")

        return self.adjustment(
            raw,
            warnings,
            sentiment=sentiment.sentiment,
            manipulation=sentiment.manipulation_score,
            people=entities.people,
            places=entities.places,
            organizations=entities.organizations,
        )
