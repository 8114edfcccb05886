from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .aggregator import AggregationWeights, ScoreAggregator
from .analyzers import ContentLexicalScorer, LanguageRiskScorer, SourceCredibilityScorer
from .classifier import ClassifierAdapter
from .config import Settings, get_settings
from .errors import AnalysisFailure, InsufficientContent, InvalidInput
from .models import (
    AnalysisError,
    AnalysisInput,
    AnalysisResult,
    ExtractedContent,
    InputKind,
    ScoreReport,
    SignalBreakdown,
)
from .normalizer import normalize
from .rate_limiter import RateLimiter
from .scraper import ContentScraper

logger = logging.getLogger(__name__)

T = TypeVar("T")

PREVIEW_LENGTH = 200
FAILED_SCORE = 50


@dataclass
class AnalysisEngine:
    """
    Drive one request from raw input to verdict.

    Input is classified as text or URL; URLs are scraped. Content from a known
    satire site short-circuits to a fixed verdict. Otherwise the three heuristic
    scorers and the external classifier run concurrently and their outputs are
    combined by the aggregator. Failures before usable text exists end the
    request with an error result; failures after that degrade the affected
    signal to a neutral value.
    """

    settings: Settings = field(default_factory=get_settings)
    rate_limiter: RateLimiter | None = None
    scraper: ContentScraper | None = None
    content_scorer: ContentLexicalScorer | None = None
    source_scorer: SourceCredibilityScorer | None = None
    language_scorer: LanguageRiskScorer | None = None
    classifier: ClassifierAdapter | None = None
    aggregator: ScoreAggregator | None = None

    def __post_init__(self) -> None:
        settings = self.settings
        if self.rate_limiter is None:
            self.rate_limiter = RateLimiter(settings.rate_limit_quota, settings.rate_limit_window)
        if self.content_scorer is None:
            self.content_scorer = ContentLexicalScorer(
                fake_indicators=settings.fake_indicators,
                credible_markers=settings.credible_markers,
            )
        if self.source_scorer is None:
            self.source_scorer = SourceCredibilityScorer(
                satire_domains=settings.satire_domains,
                credible_domains=settings.credible_domains,
            )
        if self.scraper is None:
            self.scraper = ContentScraper(
                settings=settings,
                rate_limiter=self.rate_limiter,
                source_scorer=self.source_scorer,
            )
        if self.language_scorer is None:
            self.language_scorer = LanguageRiskScorer(
                clickbait_phrases=settings.clickbait_phrases,
                emotional_terms=settings.emotional_terms,
                sensational_tokens=settings.sensational_tokens,
            )
        if self.classifier is None:
            self.classifier = ClassifierAdapter(
                settings=settings,
                rate_limiter=self.rate_limiter,
                content_scorer=self.content_scorer,
            )
        if self.aggregator is None:
            self.aggregator = ScoreAggregator(
                AggregationWeights.from_settings(settings),
                threshold=settings.fake_threshold,
            )

    async def analyze(self, raw: Any, url: str | None = None) -> AnalysisResult:
        analysis_input = AnalysisInput.classify(raw)
        logger.info("Analyzing %s input", analysis_input.kind.value)
        try:
            content = await self._extract(analysis_input, url)
        except AnalysisFailure as exc:
            logger.warning("Analysis stopped before scoring: %s (%s)", exc, exc.code)
            return self._failed(analysis_input, exc, source_url=self._source_url(analysis_input, url))

        if content.is_satire:
            logger.info("Satire source %s; skipping scoring", content.url)
            return AnalysisResult(
                is_fake=True,
                confidence_score=100,
                categories=["News", "Satire"],
                reasoning="known satire website",
                input_kind=analysis_input.kind,
                source_url=content.url,
                text_preview=self._preview(content.text),
                satire=True,
            )

        return await self._score(analysis_input, content)

    # Extraction ----------------------------------------------------
    async def _extract(self, analysis_input: AnalysisInput, url: str | None) -> ExtractedContent:
        if analysis_input.kind is InputKind.INVALID:
            raise InvalidInput("Input must be a non-empty string")

        if analysis_input.kind is InputKind.URL:
            content = await self.scraper.fetch(analysis_input.raw)
        else:
            content = ExtractedContent(
                text=normalize(analysis_input.raw, self.settings.max_text_length)
            )

        if url and url != analysis_input.raw:
            secondary = AnalysisInput.classify(url)
            if secondary.kind is InputKind.URL:
                try:
                    content = await self.scraper.fetch(secondary.raw)
                except AnalysisFailure as exc:
                    if len(content.text) < self.settings.min_article_length:
                        raise
                    logger.warning("Secondary URL %s failed, keeping primary content: %s", secondary.raw, exc)
                    if content.url is None:
                        content = content.model_copy(update={"url": secondary.raw})

        if len(content.text) < self.settings.min_article_length:
            raise InsufficientContent(len(content.text))
        return content

    @staticmethod
    def _source_url(analysis_input: AnalysisInput, url: str | None) -> str | None:
        if url and AnalysisInput.classify(url).kind is InputKind.URL:
            return url.strip()
        if analysis_input.kind is InputKind.URL:
            return analysis_input.raw
        return None

    # Scoring -------------------------------------------------------
    async def _score(self, analysis_input: AnalysisInput, content: ExtractedContent) -> AnalysisResult:
        text = content.text
        timeout = self.settings.signal_timeout
        content_report, source_report, language_report, verdict = await asyncio.gather(
            self._guard("content", asyncio.to_thread(self.content_scorer.score, text), timeout, self._neutral),
            self._guard("source", asyncio.to_thread(self.source_scorer.score, content.url), timeout, self._neutral),
            self._guard("language", asyncio.to_thread(self.language_scorer.score, text), timeout, self._neutral),
            self._guard(
                "classifier",
                self.classifier.classify(text),
                timeout,
                lambda reason: self.classifier.fallback(text, attempts=0, reason=reason),
            ),
        )
        is_fake, confidence_score = self.aggregator.aggregate(
            content_report, source_report, language_report, verdict
        )
        logger.info(
            "Verdict %s (score=%d, classifier=%s)",
            "fake" if is_fake else "real",
            confidence_score,
            verdict.source,
        )
        return AnalysisResult(
            is_fake=is_fake,
            confidence_score=confidence_score,
            categories=["News", "Fake News" if is_fake else "Real News"],
            reasoning=self._reasoning(content_report, source_report, language_report),
            breakdown=SignalBreakdown(
                content=content_report,
                source=source_report,
                language=language_report,
                classifier=verdict,
            ),
            input_kind=analysis_input.kind,
            source_url=content.url,
            text_preview=self._preview(text),
        )

    @staticmethod
    async def _guard(
        name: str,
        awaitable: Awaitable[T],
        timeout: float,
        on_failure: Callable[[str], T],
    ) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Signal %s timed out after %.1fs", name, timeout)
            return on_failure(f"{name} signal timed out")
        except Exception as exc:  # noqa: BLE001
            logger.exception("Signal %s failed", name)
            return on_failure(f"{name} signal failed: {exc}")

    @staticmethod
    def _neutral(reason: str) -> ScoreReport:
        return ScoreReport.neutral(reason)

    # Result helpers ------------------------------------------------
    @staticmethod
    def _reasoning(*reports: ScoreReport) -> str:
        reasons = [reason for report in reports for reason in report.reasons]
        return ", ".join(reasons) if reasons else "Analysis complete"

    @staticmethod
    def _preview(text: str) -> str:
        if len(text) > PREVIEW_LENGTH:
            return text[:PREVIEW_LENGTH] + "..."
        return text

    @staticmethod
    def _failed(
        analysis_input: AnalysisInput, exc: AnalysisFailure, *, source_url: str | None
    ) -> AnalysisResult:
        return AnalysisResult(
            is_fake=True,
            confidence_score=FAILED_SCORE,
            categories=["News"],
            reasoning=str(exc),
            input_kind=analysis_input.kind,
            source_url=source_url,
            error=AnalysisError(code=exc.code, message=str(exc)),
        )
