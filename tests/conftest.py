import sys
from pathlib import Path

import httpx
import pytest

# Ensure project src is on path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for p in (ROOT, SRC):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from newscheck.config import Settings  # noqa: E402
from newscheck.rate_limiter import RateLimiter  # noqa: E402

ARTICLE_PARAGRAPHS = [
    "According to researchers at the university, the new water treatment plant will serve the region.",
    "The study shows that 45% of households currently rely on older infrastructure built decades ago.",
    '"We expect the upgrade to finish next year," the project director said during a press briefing.',
]


def article_html(paragraphs=ARTICLE_PARAGRAPHS) -> str:
    body = "".join(f"<p>{text}</p>" for text in paragraphs)
    return f"<html><head><title>t</title></head><body><nav>Menu</nav><article>{body}</article></body></html>"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        classifier_provider="cohere",
        classifier_api_key="test-key",
        classifier_backoff_seconds=0.5,
        classifier_retry_attempts=3,
        min_article_length=100,
        rate_limit_quota=100,
        rate_limit_window=60.0,
        fake_threshold=75,
    )


@pytest.fixture
def limiter(settings) -> RateLimiter:
    return RateLimiter(settings.rate_limit_quota, settings.rate_limit_window)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
