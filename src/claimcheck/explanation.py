from __future__ import annotations

from collections.abc import Mapping, Sequence

from .models import Analysis

# Sections in the order they appear in the explanation trail.
SECTION_ORDER = (
    "language",
    "linguistic",
    "historical",
    "source_validation",
    "nlp",
    "experts",
    "realtime",
    "evidence",
)

VERDICT_LABELS = {
    "en": {"fake": "fake", "real": "real", "uncertain": "uncertain", "unanalyzable": "cannot be analyzed"},
    "si": {"fake": "ව්‍යාජ", "real": "සත්‍ය", "uncertain": "අවිනිශ්චිත", "unanalyzable": "විශ්ලේෂණ කළ නොහැක"},
    "ta": {
        "fake": "போலி",
        "real": "உண்மை",
        "uncertain": "உறுதியற்றது",
        "unanalyzable": "பகுப்பாய்வு செய்ய முடியாது",
    },
}

TEMPLATES = {
    "en": (
        "Analysis complete. This claim appears to be **{verdict}** with {confidence}% confidence."
        "\n\n{reasons}\n\n*This is an automated estimation. Please verify with official sources.*"
    ),
    "si": (
        "විශ්ලේෂණය සම්පූර්ණයි. මෙම ප්‍රකාශය **{verdict}** ලෙස පෙනී යන අතර විශ්වාසය {confidence}% කි."
        "\n\n{reasons}\n\n*මෙය ස්වයංක්‍රීය තක්සේරුවකි. කරුණාකර නිල මූලාශ්‍ර සමඟ සත්‍යාපනය කරන්න.*"
    ),
    "ta": (
        "பகுப்பாய்வு முடிந்தது. இந்தக் கூற்று **{verdict}** என {confidence}% நம்பகத்தன்மையுடன் தோன்றுகிறது."
        "\n\n{reasons}\n\n*இது ஒரு தானியங்கி மதிப்பீடு. அதிகாரப்பூர்வ மூலங்களுடன் சரிபார்க்கவும்.*"
    ),
}


def evidence_summary(support_count: int, debunk_count: int) -> list[str]:
    if support_count == 0 and debunk_count == 0:
        return ["Limited verifiable sources found online for this claim"]
    notes: list[str] = []
    if support_count:
        notes.append(f"Found {support_count} source(s) from trusted news outlets")
    if debunk_count:
        notes.append(f"Found {debunk_count} fact-checking article(s) addressing this claim")
    return notes


class ExplanationAssembler:
    """Concatenates per-section reasons in fixed precedence within a size budget."""

    def __init__(self, *, max_reasons: int = 25, max_chars: int = 4000) -> None:
        self.max_reasons = max_reasons
        self.max_chars = max_chars

    def assemble(self, sections: Mapping[str, Sequence[str]]) -> tuple[str, ...]:
        unknown = set(sections) - set(SECTION_ORDER)
        if unknown:
            raise ValueError(f"Unknown explanation sections: {sorted(unknown)}")
        reasons: list[str] = []
        used = 0
        for section in SECTION_ORDER:
            for reason in sections.get(section, ()):
                if not reason:
                    continue
                if len(reasons) >= self.max_reasons or used + len(reason) > self.max_chars:
                    return tuple(reasons)
                reasons.append(reason)
                used += len(reason)
        return tuple(reasons)


def render_template(analysis: Analysis, language: str = "en") -> str:
    """Deterministic message used whenever the phrasing service is unavailable."""
    lang = language if language in TEMPLATES else ("si" if language == "mixed" else "en")
    verdict = VERDICT_LABELS[lang][analysis.verdict]
    return TEMPLATES[lang].format(
        verdict=verdict,
        confidence=round(analysis.confidence * 100),
        reasons="\n\n".join(analysis.reasons),
    )
