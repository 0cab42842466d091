"""
Text helpers shared by the scorer and analyzers: script detection, term
matching and the follow-up heuristic used by the conversational surface.
"""

from __future__ import annotations

import re
import string
from collections.abc import Iterable
from functools import lru_cache

_SINHALA = re.compile(r"[\u0D80-\u0DFF]")
_TAMIL = re.compile(r"[\u0B80-\u0BFF]")
_PUNCTUATION = str.maketrans({ch: " " for ch in string.punctuation + "\u201c\u201d\u2018\u2019\u2026" if ch not in "'-"})

FOLLOW_UP_WORDS = (
    "why",
    "how",
    "what",
    "where",
    "when",
    "who",
    "which",
    "proof",
    "source",
    "evidence",
    "sure",
    "certain",
)

LANGUAGE_NAMES = {"en": "English", "si": "Sinhala", "ta": "Tamil", "mixed": "Sinhala/Tamil"}


def detect_language(text: str) -> str:
    """Classify text by script: Sinhala, Tamil, both (mixed) or English."""
    has_sinhala = bool(_SINHALA.search(text or ""))
    has_tamil = bool(_TAMIL.search(text or ""))
    if has_sinhala and has_tamil:
        return "mixed"
    if has_sinhala:
        return "si"
    if has_tamil:
        return "ta"
    return "en"


@lru_cache(maxsize=2048)
def _term_pattern(term: str) -> re.Pattern | None:
    if not term.isascii():
        return None
    return re.compile(rf"(?<!\w){re.escape(term)}(?!\w)", re.I)


def contains_term(text: str, term: str) -> bool:
    """Whole-word match for Latin-script terms, substring match otherwise."""
    pattern = _term_pattern(term)
    if pattern is None:
        return term in text
    return bool(pattern.search(text))


def find_terms(text: str, terms: Iterable[str]) -> list[str]:
    lowered = text.lower()
    return [term for term in terms if contains_term(lowered, term.lower())]


def normalize_words(text: str) -> list[str]:
    """Lowercase, strip punctuation and split on whitespace."""
    cleaned = (text or "").lower().translate(_PUNCTUATION)
    return [word.strip("'-") for word in cleaned.split() if word.strip("'-")]


def is_url(text: str) -> bool:
    return "http://" in text or "https://" in text


def is_follow_up_question(text: str) -> bool:
    if "?" in text:
        return True
    return len(text) < 200 and bool(find_terms(text, FOLLOW_UP_WORDS))


def uppercase_ratio(text: str) -> float:
    if not text:
        return 0.0
    return sum(1 for ch in text if "A" <= ch <= "Z") / len(text)
