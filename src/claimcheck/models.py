from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from .text import detect_language

Verdict = Literal["fake", "real", "uncertain", "unanalyzable"]
Language = Literal["en", "si", "ta", "mixed"]
ClaimCategory = Literal["political", "health", "natural-disaster", "social", "economic", "other"]
Season = Literal["election", "budget", "exam", "festival"]
FactCheckVerdict = Literal["true", "false", "misleading", "unverified", "mixed"]
DomainCategory = Literal["trusted", "neutral", "suspicious", "unknown"]


class FrozenDict(dict):
    """Read-only dict for fields of frozen models; serializes as a plain dict."""

    def _readonly(self, *args, **kwargs):
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = __delitem__ = __ior__ = _readonly
    clear = pop = popitem = setdefault = update = _readonly

    def __reduce__(self):
        return (type(self), (dict(self),))


FrozenMapping = Annotated[dict[str, Any], AfterValidator(FrozenDict)]
FrozenScores = Annotated[dict[str, float], AfterValidator(FrozenDict)]


class Claim(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_text: str
    language: Language = "en"
    display_text: str

    @classmethod
    def from_text(cls, text: str, *, display_length: int = 500) -> "Claim":
        return cls(
            raw_text=text,
            language=detect_language(text),
            display_text=text[:display_length],
        )


class TranslationContext(BaseModel):
    """Translation supplied by the caller; the engine never translates."""

    model_config = ConfigDict(frozen=True)

    original_language: Language
    english_text: str = Field(..., min_length=1)


class EvidenceLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    source: str
    rating: str | None = None
    snippet: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)


class ClassifiedEvidence(BaseModel):
    model_config = ConfigDict(frozen=True)

    support_links: tuple[EvidenceLink, ...] = ()
    debunk_links: tuple[EvidenceLink, ...] = ()

    @model_validator(mode="after")
    def _disjoint(self) -> "ClassifiedEvidence":
        support_urls = {link.url for link in self.support_links}
        overlap = support_urls.intersection(link.url for link in self.debunk_links)
        if overlap:
            raise ValueError(f"Links classified as both support and debunk: {sorted(overlap)}")
        return self

    @property
    def urls(self) -> list[str]:
        return [link.url for link in self.support_links] + [link.url for link in self.debunk_links]


class SignalAdjustment(BaseModel):
    """A bounded delta on the fake-likelihood scale produced by one analyzer."""

    model_config = ConfigDict(frozen=True)

    name: str
    delta: float
    minimum: float
    maximum: float
    reasons: tuple[str, ...] = ()
    details: FrozenMapping = Field(default_factory=FrozenDict)

    @classmethod
    def bounded(
        cls,
        name: str,
        raw: float,
        minimum: float,
        maximum: float,
        *,
        reasons: list[str] | tuple[str, ...] = (),
        details: dict[str, Any] | None = None,
    ) -> "SignalAdjustment":
        return cls(
            name=name,
            delta=round(max(minimum, min(maximum, raw)), 4),
            minimum=minimum,
            maximum=maximum,
            reasons=tuple(reasons),
            details=details or {},
        )

    @classmethod
    def neutral(cls, name: str, minimum: float, maximum: float) -> "SignalAdjustment":
        return cls(name=name, delta=0.0, minimum=minimum, maximum=maximum, details={"neutral": True})

    @property
    def in_range(self) -> bool:
        return self.minimum <= self.delta <= self.maximum


class LinguisticResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0.0, le=1.0)
    reasons: tuple[str, ...] = ()
    insufficient: bool = False
    negative_indicators: int = 0


class HistoricalClaimRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    original_text: str
    debunked_date: date
    category: ClaimCategory = "other"
    season: Season | None = None
    sources: tuple[str, ...] = ()


class FactCheckerResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    url: str
    verdict: FactCheckVerdict = "unverified"
    confidence: float = Field(0.5, ge=0.0, le=1.0)
    published_date: str | None = None
    summary: str | None = None


class DomainReputation(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: str
    is_https: bool
    has_valid_tls: bool | None = None
    trust_score: float = Field(..., ge=0.0, le=1.0)
    category: DomainCategory = "unknown"
    flags: tuple[str, ...] = ()


class Analysis(BaseModel):
    """Immutable outcome of a single evaluation."""

    model_config = ConfigDict(frozen=True)

    claim_text: str
    verdict: Verdict
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasons: tuple[str, ...]
    support_links: tuple[EvidenceLink, ...] = ()
    debunk_links: tuple[EvidenceLink, ...] = ()
    score: float = Field(0.5, ge=0.0, le=1.0)
    language: Language = "en"
    components: FrozenScores = Field(default_factory=FrozenDict)


class EvaluationResponse(BaseModel):
    message: str
    analysis: Analysis
