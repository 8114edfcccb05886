"""Fixed-window rate limiter shared by every outbound network call."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from .errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Admit at most ``quota`` calls per ``window_seconds``.

    The counter and window start are updated under a lock, so one instance can
    be shared by concurrent requests (threads or tasks). Exhaustion fails
    immediately; callers never wait for the window to roll over.
    """

    def __init__(
        self,
        quota: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if quota < 0:
            raise ValueError("quota must be non-negative")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.quota = quota
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        self._window_start = clock()

    def allow(self) -> None:
        with self._lock:
            now = self._clock()
            if now - self._window_start >= self.window_seconds:
                self._count = 0
                self._window_start = now
            if self._count >= self.quota:
                logger.warning(
                    "Rate limit exceeded: %d calls in %.1fs window", self._count, self.window_seconds
                )
                raise RateLimitExceeded("Rate limit exceeded")
            self._count += 1

    def reset(self) -> None:
        with self._lock:
            self._count = 0
            self._window_start = self._clock()

    @property
    def remaining(self) -> int:
        with self._lock:
            if self._clock() - self._window_start >= self.window_seconds:
                return self.quota
            return max(0, self.quota - self._count)
