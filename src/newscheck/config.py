from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration sourced from environment variables."""

    # Text handling
    max_text_length: int = Field(100_000, gt=0)
    min_article_length: int = Field(100, ge=0)

    # Scraping
    max_content_bytes: int = Field(20 * 1024 * 1024, gt=0)
    request_timeout: float = Field(30.0, gt=0)
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )

    # External classifier
    classifier_provider: str = "cohere"
    classifier_api_key: str | None = None
    classifier_url: str = "https://api.cohere.com/v1/classify"
    classifier_model: str | None = None
    classifier_retry_attempts: int = Field(3, ge=1)
    classifier_backoff_seconds: float = Field(1.0, ge=0)
    classifier_timeout: float = Field(15.0, gt=0)
    classifier_max_chars: int = Field(2000, gt=0)
    default_confidence: float = Field(0.7, ge=0.0, le=1.0)

    # Rate limiting
    rate_limit_window: float = Field(60.0, gt=0)
    rate_limit_quota: int = Field(100, ge=0)

    # Aggregation
    fake_threshold: int = Field(75, ge=0, le=100)
    weight_content: float = 0.4
    weight_source: float = 0.2
    weight_language: float = 0.15
    weight_classifier: float = 0.25
    weights_version: str = "v1"
    signal_timeout: float = Field(60.0, gt=0)

    # Domain lists
    satire_domains: list[str] = Field(
        default_factory=lambda: ["theonion.com", "clickhole.com", "babylonbee.com"]
    )
    credible_domains: list[str] = Field(
        default_factory=lambda: [".edu", ".gov", "reuters.com", "ap.org", "bbc.com", "nature.com"]
    )

    # Phrase lists
    fake_indicators: list[str] = Field(
        default_factory=lambda: [
            "bigfoot",
            "alien invasion",
            "conspiracy",
            "classified",
            "government cover",
            "secret mission",
            "miracle cure",
            "shocking truth",
        ]
    )
    credible_markers: list[str] = Field(
        default_factory=lambda: [
            "according to",
            "cited by",
            "published in",
            "researchers at",
            "study shows",
            "evidence suggests",
            "data indicates",
        ]
    )
    clickbait_phrases: list[str] = Field(
        default_factory=lambda: [
            "you won't believe",
            "what happens next",
            "shocking truth",
            "mind-blowing",
            "unbelievable",
            "they don't want you to know",
        ]
    )
    emotional_terms: list[str] = Field(
        default_factory=lambda: [
            "outrageous",
            "terrifying",
            "horrifying",
            "disgusting",
            "furious",
            "devastating",
            "insane",
            "heartbreaking",
        ]
    )
    sensational_tokens: list[str] = Field(default_factory=lambda: ["BREAKING", "SHOCKING"])

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "case_sensitive": False,
    }


@lru_cache(1)
def get_settings() -> Settings:
    return Settings()
