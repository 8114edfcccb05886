"""Fetch a web page and pull out the paragraphs that most likely form the article."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from urllib.parse import urlparse

import httpx
import trafilatura
from bs4 import BeautifulSoup

from .analyzers import SourceCredibilityScorer
from .config import Settings, get_settings
from .errors import FetchFailed, InsufficientContent, InvalidProtocol
from .models import ExtractedContent
from .normalizer import normalize
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ARTICLE_SELECTORS: tuple[str, ...] = (
    "article p",
    ".article-body p",
    "main p",
    'div[itemprop="articleBody"] p',
)


class ContentScraper:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        rate_limiter: RateLimiter,
        client: httpx.AsyncClient | None = None,
        selectors: Sequence[str] = ARTICLE_SELECTORS,
        source_scorer: SourceCredibilityScorer | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._rate_limiter = rate_limiter
        self._client = client
        self._source_scorer = source_scorer or SourceCredibilityScorer(
            satire_domains=self._settings.satire_domains,
            credible_domains=self._settings.credible_domains,
        )
        self._selectors = tuple(selectors)

    async def fetch(self, url: str) -> ExtractedContent:
        try:
            scheme = urlparse(url).scheme.lower()
        except ValueError as exc:
            raise FetchFailed(f"Failed to scrape URL: {exc}") from exc
        if scheme not in ("http", "https"):
            raise InvalidProtocol("Invalid protocol - only HTTP/HTTPS allowed")

        self._rate_limiter.allow()
        timeout = self._settings.request_timeout
        try:
            # Overall deadline; the client timeout only bounds each read.
            html = await asyncio.wait_for(self._download(url), timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Gave up on %s after %.1fs", url, timeout)
            raise FetchFailed("Failed to scrape URL: request timed out") from exc
        raw_text = await asyncio.to_thread(self.extract_paragraphs, html)
        text = normalize(raw_text, self._settings.max_text_length)
        if len(text) < self._settings.min_article_length:
            raise InsufficientContent(len(text))

        is_satire = self._source_scorer.is_satire(url)
        logger.info("Extracted %d characters from %s (satire=%s)", len(text), url, is_satire)
        return ExtractedContent(text=text, url=url, is_satire=is_satire)

    def extract_paragraphs(self, html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")
        minimum = self._settings.min_article_length
        # A combined selector yields each element once, in document order.
        content = self._join(soup.select(", ".join(self._selectors)))
        if len(content) < minimum:
            logger.debug("Article selectors found %d characters; scanning all paragraphs", len(content))
            content = self._join(soup.select("body p") or soup.find_all("p"))
        if len(content) < minimum:
            extracted = trafilatura.extract(html)
            if extracted and len(extracted) > len(content):
                content = str(extracted)
        return content

    @staticmethod
    def _join(elements) -> str:
        parts = [element.get_text(" ", strip=True) for element in elements]
        return "\n".join(part for part in parts if part)

    async def _download(self, url: str) -> str:
        headers = {
            "User-Agent": self._settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
        if self._client is not None:
            return await self._stream(self._client, url, headers)
        async with httpx.AsyncClient(
            timeout=self._settings.request_timeout, follow_redirects=True
        ) as client:
            return await self._stream(client, url, headers)

    async def _stream(self, client: httpx.AsyncClient, url: str, headers: dict[str, str]) -> str:
        limit = self._settings.max_content_bytes
        try:
            async with client.stream(
                "GET", url, headers=headers, timeout=self._settings.request_timeout
            ) as response:
                response.raise_for_status()
                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > limit:
                    raise FetchFailed(f"Failed to scrape URL: response exceeds {limit} bytes")
                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > limit:
                        raise FetchFailed(f"Failed to scrape URL: response exceeds {limit} bytes")
                encoding = response.encoding or "utf-8"
        except httpx.TimeoutException as exc:
            logger.warning("Timed out fetching %s", url)
            raise FetchFailed(f"Failed to scrape URL: request timed out ({exc})") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("HTTP %s fetching %s", exc.response.status_code, url)
            raise FetchFailed(
                f"Failed to scrape URL: HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Network error fetching %s: %s", url, exc)
            raise FetchFailed(f"Failed to scrape URL: {exc}") from exc
        try:
            return bytes(body).decode(encoding, errors="replace")
        except LookupError:
            return bytes(body).decode("utf-8", errors="replace")
