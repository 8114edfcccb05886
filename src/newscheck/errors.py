"""Failure taxonomy shared by the scraper, classifier and engine."""

from __future__ import annotations


class AnalysisFailure(RuntimeError):
    """Base class; ``code`` is the machine-readable tag surfaced to callers."""

    code = "analysis_failed"


class InvalidInput(AnalysisFailure):
    code = "invalid_input"


class InvalidProtocol(AnalysisFailure):
    code = "invalid_protocol"


class FetchFailed(AnalysisFailure):
    code = "fetch_failed"


class InsufficientContent(AnalysisFailure):
    code = "insufficient_content"

    def __init__(self, length: int) -> None:
        super().__init__(f"Insufficient content found ({length} characters)")
        self.length = length


class RateLimitExceeded(AnalysisFailure):
    code = "rate_limit_exceeded"


class ClassifierUnavailable(AnalysisFailure):
    """Raised inside the classifier adapter; recovered by its fallback."""

    code = "classifier_unavailable"

    def __init__(self, message: str, *, transient: bool = True) -> None:
        super().__init__(message)
        self.transient = transient


class AggregationInputInvalid(AnalysisFailure):
    """Recovered by the aggregator, which substitutes a neutral value."""

    code = "aggregation_input_invalid"
