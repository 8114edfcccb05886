"""
Adapter for the third-party fake-news text classifier.

Supports Cohere's few-shot classify endpoint (the default) and the Hugging Face
inference API. Transient provider failures are retried a bounded number of
times with linear backoff; once retries are exhausted, or the provider is not
configured at all, a rule-based verdict derived from the lexical content score
is returned instead. ``classify`` never raises.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from .analyzers import ContentLexicalScorer
from .config import Settings, get_settings
from .errors import ClassifierUnavailable, RateLimitExceeded
from .models import ClassifierVerdict, clamp_confidence
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

HF_INFERENCE_URL = "https://api-inference.huggingface.co/models"
DEFAULT_HF_MODEL = "winterForestStump/Roberta-fake-news-detector"

# Cohere needs at least two examples per label.
EXEMPLARS: tuple[dict[str, str], ...] = (
    {"text": "Scientists discover new planet in solar system", "label": "REAL"},
    {"text": "Aliens spotted in Area 51, government confirms", "label": "FAKE"},
    {"text": "Study shows coffee may reduce heart disease risk", "label": "REAL"},
    {"text": "Mind control chips found in COVID vaccines", "label": "FAKE"},
)

_FAKE_LABELS = {"FAKE", "FALSE", "LABEL_0"}
_REAL_LABELS = {"REAL", "TRUE", "LABEL_1"}
_RETRYABLE_STATUS = {408, 429}

Sleep = Callable[[float], Awaitable[Any]]


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ClassifierUnavailable) and exc.transient


class ClassifierAdapter:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        rate_limiter: RateLimiter,
        content_scorer: ContentLexicalScorer | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._rate_limiter = rate_limiter
        self._content_scorer = content_scorer or ContentLexicalScorer(
            fake_indicators=self._settings.fake_indicators,
            credible_markers=self._settings.credible_markers,
        )
        self._client = client
        self._sleep = sleep
        self._provider = self._settings.classifier_provider.lower()
        self._events: deque[dict[str, Any]] = deque(maxlen=200)

    # Public API -----------------------------------------------------
    async def classify(self, text: str) -> ClassifierVerdict:
        if not self._settings.classifier_api_key:
            return self.fallback(text, attempts=0, reason="classifier not configured")

        payload_text = (text or "")[: self._settings.classifier_max_chars]
        backoff = self._settings.classifier_backoff_seconds
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.classifier_retry_attempts),
            wait=wait_incrementing(start=backoff, increment=backoff),
            retry=retry_if_exception(_is_transient),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        attempt_number = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    label, confidence = await self._attempt(payload_text, attempt_number)
        except RateLimitExceeded as exc:
            return self.fallback(text, attempts=attempt_number - 1, reason=str(exc))
        except ClassifierUnavailable as exc:
            reason = f"retries exhausted: {exc}" if exc.transient else str(exc)
            return self.fallback(text, attempts=attempt_number, reason=reason)

        self._log_event("verdict", {"attempt": attempt_number, "label": label, "confidence": confidence})
        return ClassifierVerdict(
            label=label,
            confidence=clamp_confidence(confidence, self._settings.default_confidence),
            source="provider",
            attempts=attempt_number,
        )

    def fallback(self, text: str, *, attempts: int, reason: str) -> ClassifierVerdict:
        report = self._content_scorer.score(text or "")
        label = "Fake" if report.score < 50 else "Real"
        logger.warning("Classifier unavailable (%s); using rule-based verdict %s", reason, label)
        self._log_event("fallback", {"reason": reason, "label": label, "content_score": report.score})
        return ClassifierVerdict(
            label=label,
            confidence=self._settings.default_confidence,
            source="fallback",
            attempts=attempts,
            detail=reason,
        )

    @property
    def events(self) -> list[dict[str, Any]]:
        return list(self._events)

    # Internal helpers ----------------------------------------------
    async def _attempt(self, text: str, attempt_number: int) -> tuple[str, float]:
        # Quota is charged per outbound call, retries included.
        self._rate_limiter.allow()
        try:
            return await self._request(text)
        except ClassifierUnavailable as exc:
            self._log_event("attempt-failed", {"attempt": attempt_number, "error": str(exc)})
            raise

    def _endpoint(self) -> str:
        if self._provider == "huggingface":
            model = self._settings.classifier_model or DEFAULT_HF_MODEL
            return f"{HF_INFERENCE_URL}/{model}"
        return self._settings.classifier_url

    def _payload(self, text: str) -> dict[str, Any]:
        if self._provider == "huggingface":
            return {"inputs": text}
        payload: dict[str, Any] = {"inputs": [text], "examples": list(EXEMPLARS)}
        if self._settings.classifier_model:
            payload["model"] = self._settings.classifier_model
        return payload

    async def _request(self, text: str) -> tuple[str, float]:
        headers = {
            "Authorization": f"Bearer {self._settings.classifier_api_key}",
            "Content-Type": "application/json",
        }
        try:
            if self._client is not None:
                response = await self._post(self._client, text, headers)
            else:
                async with httpx.AsyncClient(timeout=self._settings.classifier_timeout) as client:
                    response = await self._post(client, text, headers)
        except httpx.TimeoutException as exc:
            raise ClassifierUnavailable(f"timeout: {exc}") from exc
        except httpx.TransportError as exc:
            raise ClassifierUnavailable(f"transport error: {exc}") from exc

        status = response.status_code
        if status in _RETRYABLE_STATUS or status >= 500:
            raise ClassifierUnavailable(f"HTTP {status}")
        if status >= 400:
            raise ClassifierUnavailable(f"HTTP {status}", transient=False)
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise ClassifierUnavailable("malformed response body", transient=False) from exc
        return self._parse(data)

    async def _post(
        self, client: httpx.AsyncClient, text: str, headers: dict[str, str]
    ) -> httpx.Response:
        return await client.post(
            self._endpoint(),
            json=self._payload(text),
            headers=headers,
            timeout=self._settings.classifier_timeout,
        )

    def _parse(self, data: Any) -> tuple[str, float]:
        try:
            if self._provider == "huggingface":
                candidates = data[0] if data and isinstance(data[0], list) else data
                best = max(candidates, key=lambda item: float(item["score"]))
                raw_label, confidence = str(best["label"]), float(best["score"])
            else:
                classification = data["classifications"][0]
                raw_label = str(classification["prediction"])
                confidence = float(classification["confidence"])
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ClassifierUnavailable("unexpected response shape", transient=False) from exc

        normalized = raw_label.upper()
        if normalized in _FAKE_LABELS:
            return "Fake", confidence
        if normalized in _REAL_LABELS:
            return "Real", confidence
        raise ClassifierUnavailable(f"unknown label {raw_label!r}", transient=False)

    def _log_event(self, event: str, payload: dict[str, Any]) -> None:
        entry = {**payload, "event": event, "provider": self._provider}
        self._events.append(entry)
        logger.debug("Classifier event: %s", json.dumps(entry, ensure_ascii=False))
