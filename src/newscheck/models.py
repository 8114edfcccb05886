from __future__ import annotations

import math
from enum import Enum
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

NEUTRAL_SCORE = 50


def clamp_score(value: Any) -> int:
    """Coerce ``value`` into an integer score in [0, 100]; invalid values become 50."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return NEUTRAL_SCORE
    if not math.isfinite(value):
        return NEUTRAL_SCORE
    return int(min(100, max(0, round(value))))


def clamp_confidence(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return float(min(1.0, max(0.0, value)))


class InputKind(str, Enum):
    TEXT = "text"
    URL = "url"
    INVALID = "invalid"


class AnalysisInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str
    kind: InputKind

    @classmethod
    def classify(cls, raw: Any) -> "AnalysisInput":
        if not isinstance(raw, str) or not raw.strip():
            return cls(raw=raw if isinstance(raw, str) else "", kind=InputKind.INVALID)
        candidate = raw.strip()
        if any(ch.isspace() for ch in candidate):
            return cls(raw=raw, kind=InputKind.TEXT)
        try:
            parsed = urlparse(candidate)
        except ValueError:
            return cls(raw=raw, kind=InputKind.TEXT)
        if parsed.scheme and parsed.netloc:
            return cls(raw=candidate, kind=InputKind.URL)
        return cls(raw=raw, kind=InputKind.TEXT)


class ExtractedContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    url: str | None = None
    is_satire: bool = False


class ScoreReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_score(value)

    @classmethod
    def neutral(cls, reason: str) -> "ScoreReport":
        return cls(score=NEUTRAL_SCORE, reasons=[reason])


class ClassifierVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: Literal["Fake", "Real"]
    confidence: float = Field(..., ge=0.0, le=1.0)
    source: Literal["provider", "fallback"] = "provider"
    attempts: int = 0
    detail: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"

    @property
    def real_probability(self) -> float:
        return self.confidence if self.label == "Real" else 1.0 - self.confidence


class SignalBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: ScoreReport | None = None
    source: ScoreReport | None = None
    language: ScoreReport | None = None
    classifier: ClassifierVerdict | None = None


class AnalysisError(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_fake: bool
    confidence_score: int = Field(..., ge=0, le=100)
    categories: list[str] = Field(default_factory=list)
    reasoning: str = ""
    breakdown: SignalBreakdown = Field(default_factory=SignalBreakdown)
    input_kind: InputKind = InputKind.TEXT
    source_url: str | None = None
    text_preview: str | None = None
    satire: bool = False
    error: AnalysisError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None
