from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from .config import Settings
from .errors import AggregationInputInvalid
from .models import NEUTRAL_SCORE, ClassifierVerdict, ScoreReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationWeights:
    content: float = 0.4
    source: float = 0.2
    language: float = 0.15
    classifier: float = 0.25
    version: str = "v1"

    @classmethod
    def from_settings(cls, settings: Settings) -> "AggregationWeights":
        return cls(
            content=settings.weight_content,
            source=settings.weight_source,
            language=settings.weight_language,
            classifier=settings.weight_classifier,
            version=settings.weights_version,
        )

    def as_dict(self) -> dict[str, float]:
        raw = {
            "content": self.content,
            "source": self.source,
            "language": self.language,
            "classifier": self.classifier,
        }
        for name, value in raw.items():
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"AggregationWeights.{name} must be a finite non-negative number")
        total = sum(raw.values())
        if total <= 0:
            raise ValueError("AggregationWeights sum must be positive")
        return {name: value / total for name, value in raw.items()}


class ScoreAggregator:
    """Weighted combination of every signal into one 0-100 credibility score."""

    def __init__(
        self,
        weights: AggregationWeights | None = None,
        *,
        threshold: int = 75,
    ) -> None:
        self.weights = weights or AggregationWeights()
        self._weight_map = self.weights.as_dict()
        self.threshold = threshold

    def aggregate(
        self,
        content: ScoreReport | float | None,
        source: ScoreReport | float | None,
        language: ScoreReport | float | None,
        verdict: ClassifierVerdict | None,
    ) -> tuple[bool, int]:
        components = {
            "content": self._signal("content", content),
            "source": self._signal("source", source),
            "language": self._signal("language", language),
            "classifier": self._classifier_signal(verdict),
        }
        total = sum(components[name] * weight for name, weight in self._weight_map.items())
        confidence_score = int(min(100, max(0, math.floor(total + 0.5))))
        return confidence_score < self.threshold, confidence_score

    def _signal(self, name: str, value: Any) -> float:
        if isinstance(value, ScoreReport):
            value = value.score
        try:
            return self._validate(name, value)
        except AggregationInputInvalid as exc:
            logger.warning("%s; using neutral %d", exc, NEUTRAL_SCORE)
            return float(NEUTRAL_SCORE)

    @staticmethod
    def _validate(name: str, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise AggregationInputInvalid(f"invalid {name} signal {value!r}")
        return float(min(100.0, max(0.0, value)))

    def _classifier_signal(self, verdict: ClassifierVerdict | None) -> float:
        if verdict is None:
            logger.warning("missing classifier signal; using neutral %d", NEUTRAL_SCORE)
            return float(NEUTRAL_SCORE)
        return verdict.real_probability * 100.0
