from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from urllib.parse import urlparse

from .config import get_settings
from .models import ScoreReport


def hostname_of(url: str) -> str | None:
    """Lower-cased hostname of ``url``, or None when it cannot be parsed."""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or not hostname:
        return None
    return hostname.lower()


def matches_domain(hostname: str, entries: Iterable[str]) -> bool:
    """Dot-prefixed entries match as suffixes, anything else as a substring."""
    for entry in entries:
        entry = entry.lower()
        if entry.startswith("."):
            if hostname.endswith(entry):
                return True
        elif entry in hostname:
            return True
    return False


def _matched_phrases(text: str, phrases: Sequence[str]) -> list[str]:
    lowered = text.lower()
    return [phrase for phrase in phrases if phrase.lower() in lowered]


class ContentLexicalScorer:
    FAKE_PENALTY = 20
    CREDIBLE_BONUS = 10
    STATISTIC_BONUS = 10
    QUOTE_BONUS = 10
    PERCENT_PATTERN = re.compile(r"\d+(?:\.\d+)?%")
    QUOTE_PATTERN = re.compile(r"\"[^\"]+\"")

    def __init__(
        self,
        *,
        fake_indicators: Sequence[str] | None = None,
        credible_markers: Sequence[str] | None = None,
    ) -> None:
        settings = get_settings()
        self.fake_indicators = tuple(
            fake_indicators if fake_indicators is not None else settings.fake_indicators
        )
        self.credible_markers = tuple(
            credible_markers if credible_markers is not None else settings.credible_markers
        )

    def score(self, text: str) -> ScoreReport:
        if not text:
            return ScoreReport(score=0, reasons=["no content provided"])
        score = 100
        reasons: list[str] = []

        indicators = _matched_phrases(text, self.fake_indicators)
        if indicators:
            score -= len(indicators) * self.FAKE_PENALTY
            reasons.append(f"contains suspicious terms: {', '.join(indicators)}")

        markers = _matched_phrases(text, self.credible_markers)
        if markers:
            score += len(markers) * self.CREDIBLE_BONUS
            reasons.append("contains credible source citations")

        if self.PERCENT_PATTERN.search(text):
            score += self.STATISTIC_BONUS
            reasons.append("contains statistical information")
        if self.QUOTE_PATTERN.search(text):
            score += self.QUOTE_BONUS
            reasons.append("contains direct quotes")

        return ScoreReport(score=score, reasons=reasons)


class SourceCredibilityScorer:
    INVALID_URL_SCORE = 0

    def __init__(
        self,
        *,
        satire_domains: Sequence[str] | None = None,
        credible_domains: Sequence[str] | None = None,
    ) -> None:
        settings = get_settings()
        self.satire_domains = tuple(
            satire_domains if satire_domains is not None else settings.satire_domains
        )
        self.credible_domains = tuple(
            credible_domains if credible_domains is not None else settings.credible_domains
        )

    def is_satire(self, url: str | None) -> bool:
        hostname = hostname_of(url) if url else None
        return bool(hostname) and matches_domain(hostname, self.satire_domains)

    def score(self, url: str | None) -> ScoreReport:
        if not url:
            return ScoreReport(score=50, reasons=["no URL provided"])
        hostname = hostname_of(url)
        if hostname is None:
            return ScoreReport(score=self.INVALID_URL_SCORE, reasons=["invalid URL format"])
        if matches_domain(hostname, self.satire_domains):
            return ScoreReport(score=0, reasons=["known satire website"])
        if matches_domain(hostname, self.credible_domains):
            return ScoreReport(score=100, reasons=["credible domain source"])
        return ScoreReport(score=50, reasons=["unknown domain credibility"])


class LanguageRiskScorer:
    CATEGORY_PENALTY = 15
    REPEATED_PUNCTUATION = re.compile(r"[!?]{2,}")
    ALL_CAPS_PATTERN = re.compile(r"\b[A-Z]{4,}\b")

    def __init__(
        self,
        *,
        clickbait_phrases: Sequence[str] | None = None,
        emotional_terms: Sequence[str] | None = None,
        sensational_tokens: Sequence[str] | None = None,
    ) -> None:
        settings = get_settings()
        self.clickbait_phrases = tuple(
            clickbait_phrases if clickbait_phrases is not None else settings.clickbait_phrases
        )
        self.emotional_terms = tuple(
            emotional_terms if emotional_terms is not None else settings.emotional_terms
        )
        tokens = sensational_tokens if sensational_tokens is not None else settings.sensational_tokens
        self._sensational = (
            re.compile(r"\b(?:" + "|".join(re.escape(token) for token in tokens) + r")\b")
            if tokens
            else None
        )
        self._emotional = (
            re.compile(
                r"\b(?:" + "|".join(re.escape(term) for term in self.emotional_terms) + r")\b",
                re.IGNORECASE,
            )
            if self.emotional_terms
            else None
        )

    def score(self, text: str) -> ScoreReport:
        if not text:
            return ScoreReport(score=100, reasons=[])
        triggered: list[str] = []
        if self.REPEATED_PUNCTUATION.search(text):
            triggered.append("excessive punctuation")
        if self.ALL_CAPS_PATTERN.search(text):
            triggered.append("all-caps words")
        if self._sensational and self._sensational.search(text):
            triggered.append("sensational keywords")
        if self._emotional and self._emotional.search(text):
            triggered.append("emotionally loaded language")
        if _matched_phrases(text, self.clickbait_phrases):
            triggered.append("clickbait language")

        score = max(0, 100 - len(triggered) * self.CATEGORY_PENALTY)
        return ScoreReport(score=score, reasons=[f"contains {item}" for item in triggered])
