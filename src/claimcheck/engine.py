from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from .aggregator import aggregate, score_to_confidence, score_to_verdict
from .analyzers.base import ContextAnalyzer
from .analyzers.experts import ExpertCorroborationAnalyzer
from .analyzers.historical import HistoricalPatternMatcher
from .analyzers.realtime import RealTimeCorroborationAnalyzer
from .analyzers.regional import RegionalSignalAnalyzer
from .analyzers.reputation import SourceReputationScorer
from .analyzers.sentiment import SentimentEntityAnalyzer
from .config import Settings, get_settings
from .domains import hostname
from .errors import PhrasingFallbackError
from .evidence import classify_links, merge_results
from .explanation import ExplanationAssembler, evidence_summary, render_template
from .linguistic import HeuristicLinguisticScorer
from .models import (
    Analysis,
    Claim,
    ClassifiedEvidence,
    EvaluationResponse,
    SignalAdjustment,
    TranslationContext,
)
from .phrasing import PhrasingClient
from .reference import ReferenceData
from .sources import EvidenceSearchClient
from .text import LANGUAGE_NAMES, is_follow_up_question, is_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ClaimEvaluator:
    reference: ReferenceData
    search_client: EvidenceSearchClient
    analyzers: list[ContextAnalyzer]
    scorer: HeuristicLinguisticScorer = field(default_factory=HeuristicLinguisticScorer)
    phraser: PhrasingClient | None = None
    settings: Settings = field(default_factory=get_settings)

    def __post_init__(self) -> None:
        names = [analyzer.name for analyzer in self.analyzers]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate analyzer names: {names}")
        self._assembler = ExplanationAssembler(
            max_reasons=self.settings.max_reasons,
            max_chars=self.settings.max_reason_chars,
        )

    async def evaluate(
        self,
        claim_text: str,
        existing_context: Analysis | None = None,
        *,
        source_url: str | None = None,
        source_title: str | None = None,
        translation: TranslationContext | None = None,
    ) -> Analysis:
        if existing_context is not None and is_follow_up_question(claim_text) and not is_url(claim_text):
            logger.info("Follow-up question; returning prior analysis")
            return existing_context

        claim = Claim.from_text(claim_text, display_length=self.settings.claim_display_length)
        language = translation.original_language if translation else claim.language
        analysis_text = translation.english_text if translation else claim.raw_text

        # Length is judged on the text the user sent, never on a translation.
        base = self.scorer.score(claim.raw_text)
        if translation is not None and not base.insufficient:
            base = self.scorer.score(analysis_text)
        if base.insufficient:
            logger.info("Claim too short for analysis (%d chars)", len(claim_text.strip()))
            return Analysis(
                claim_text=claim.display_text,
                verdict="unanalyzable",
                confidence=0.0,
                reasons=base.reasons,
                score=base.score,
                language=language,
                components={"base": base.score},
            )

        query = claim_text if not source_title else f"{source_title} {claim_text}"
        evidence, adjustments = await self._gather_signals(query, language, analysis_text, translation)

        direct_domain = hostname(source_url) if source_url else ""
        direct_publisher = bool(direct_domain) and self.reference.is_direct_publisher(direct_domain)

        breakdown = aggregate(
            base.score,
            [adjustments[analyzer.name] for analyzer in self.analyzers],
            support_count=len(evidence.support_links),
            debunk_count=len(evidence.debunk_links),
            direct_publisher=direct_publisher,
            strict=self.settings.strict_invariants,
        )
        verdict = score_to_verdict(breakdown.score)
        confidence = score_to_confidence(breakdown.score, verdict)

        def reasons_of(name: str) -> tuple[str, ...]:
            adjustment = adjustments.get(name)
            return adjustment.reasons if adjustment else ()

        source_notes: list[str] = []
        if direct_publisher:
            source_notes.append(f"Content published directly by trusted source: {direct_domain}")
        source_notes.extend(reasons_of("regional"))
        source_notes.extend(reasons_of("reputation"))

        reasons = self._assembler.assemble(
            {
                "language": self._language_notes(translation),
                "linguistic": base.reasons,
                "historical": reasons_of("historical"),
                "source_validation": source_notes,
                "nlp": reasons_of("sentiment"),
                "experts": reasons_of("experts"),
                "realtime": reasons_of("realtime"),
                "evidence": evidence_summary(len(evidence.support_links), len(evidence.debunk_links)),
            }
        )
        logger.info(
            "Evaluated claim: verdict=%s score=%.4f components=%s",
            verdict,
            breakdown.score,
            breakdown.components,
        )
        limit = self.settings.evidence_display_count
        return Analysis(
            claim_text=claim.display_text,
            verdict=verdict,
            confidence=confidence,
            reasons=reasons,
            support_links=evidence.support_links[:limit],
            debunk_links=evidence.debunk_links[:limit],
            score=breakdown.score,
            language=language,
            components=breakdown.components,
        )

    async def explain(self, analysis: Analysis, language: str | None = None) -> str:
        language = language or analysis.language
        if self.phraser is not None:
            try:
                return await self.phraser.phrase(analysis, language)
            except PhrasingFallbackError as exc:
                logger.info("Using template explanation: %s", exc)
        return render_template(analysis, language)

    async def evaluate_and_explain(
        self,
        claim_text: str,
        existing_context: Analysis | None = None,
        *,
        source_url: str | None = None,
        source_title: str | None = None,
        translation: TranslationContext | None = None,
        language: str | None = None,
    ) -> EvaluationResponse:
        analysis = await self.evaluate(
            claim_text,
            existing_context,
            source_url=source_url,
            source_title=source_title,
            translation=translation,
        )
        message = await self.explain(analysis, language)
        return EvaluationResponse(message=message, analysis=analysis)

    async def _gather_signals(
        self,
        query: str,
        language: str,
        analysis_text: str,
        translation: TranslationContext | None,
    ) -> tuple[ClassifiedEvidence, dict[str, SignalAdjustment]]:
        """
        Phase A starts the searches and every analyzer that only needs the
        text; phase B starts the evidence-dependent analyzers as soon as the
        search results are classified.
        """
        timeout = self.settings.analyzer_timeout
        tasks: dict[str, asyncio.Task[SignalAdjustment]] = {}
        for analyzer in self.analyzers:
            if not analyzer.uses_evidence:
                tasks[analyzer.name] = asyncio.create_task(
                    self._guarded(analyzer.name, analyzer.analyze(analysis_text), timeout, analyzer.neutral())
                )

        evidence = await self._search(query, language, translation)
        urls = evidence.urls
        for analyzer in self.analyzers:
            if analyzer.uses_evidence:
                call = analyzer.analyze(analysis_text, list(urls))
                tasks[analyzer.name] = asyncio.create_task(
                    self._guarded(analyzer.name, call, timeout, analyzer.neutral())
                )

        results = await asyncio.gather(*tasks.values())
        return evidence, dict(zip(tasks.keys(), results, strict=True))

    async def _search(
        self,
        query: str,
        language: str,
        translation: TranslationContext | None,
    ) -> ClassifiedEvidence:
        timeout = self.settings.search_timeout
        searches = [
            self._guarded("search", self.search_client.search(query, language), timeout, []),
            self._guarded("fact-check-search", self.search_client.search_fact_checks(query), timeout, []),
        ]
        if translation is not None:
            searches.append(
                self._guarded("translated-search", self.search_client.search(translation.english_text, "en"), timeout, [])
            )
        general, fact_checks, *translated = await asyncio.gather(*searches)
        merged = merge_results(general, *translated)
        logger.debug("Search returned %d general and %d fact-check results", len(merged), len(fact_checks))
        return classify_links(merged, fact_checks, self.reference)

    @staticmethod
    async def _guarded(name: str, call: Awaitable[T], timeout: float, fallback: T) -> T:
        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs; using neutral result", name, timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning("%s failed: %s; using neutral result", name, exc, exc_info=True)
        return fallback

    @staticmethod
    def _language_notes(translation: TranslationContext | None) -> list[str]:
        if translation is None or translation.original_language == "en":
            return []
        return [f"Content translated from {LANGUAGE_NAMES[translation.original_language]} for analysis"]


def build_evaluator(
    reference: ReferenceData,
    settings: Settings | None = None,
    *,
    search_client: EvidenceSearchClient | None = None,
    analyzers: Sequence[ContextAnalyzer] | None = None,
    phraser: PhrasingClient | None = None,
) -> ClaimEvaluator:
    """Wire the default analyzer set around one shared reference snapshot."""
    settings = settings or get_settings()
    if analyzers is None:
        analyzers = [
            HistoricalPatternMatcher(reference),
            SourceReputationScorer(reference, settings=settings),
            SentimentEntityAnalyzer(),
            ExpertCorroborationAnalyzer(reference, settings=settings),
            RealTimeCorroborationAnalyzer(reference, settings=settings),
            RegionalSignalAnalyzer(reference),
        ]
    return ClaimEvaluator(
        reference=reference,
        search_client=search_client or EvidenceSearchClient(settings=settings),
        analyzers=list(analyzers),
        phraser=phraser if phraser is not None else PhrasingClient(settings=settings),
        settings=settings,
    )

