"""Text cleanup applied to every piece of content before scoring."""

from __future__ import annotations

import re
from typing import Any

from .config import get_settings

_DISALLOWED = re.compile(r"[^\w\s.,!?%'\":;()\-]")
# Whole lines only: the trailing newline goes with the line, the last line may end the text.
_BOILERPLATE = re.compile(
    r"^[^\S\n]*(?:Share|Published|Advertising|Tags)\b[^\n]*(?:\n|\Z)",
    re.IGNORECASE | re.MULTILINE,
)
_HEADLINE = re.compile(r"^(?:\s*Headline:\s*)+", re.IGNORECASE)


def normalize(text: Any, max_length: int | None = None) -> str:
    """Return cleaned single-line text; never raises and is idempotent."""
    if not isinstance(text, str) or not text:
        return ""
    limit = max_length if max_length is not None else get_settings().max_text_length
    cleaned = _DISALLOWED.sub("", text[:limit])
    cleaned = _HEADLINE.sub("", cleaned)
    # Single-line text has no separate boilerplate lines, and normalized output is single-line.
    if "\n" in cleaned:
        cleaned = _BOILERPLATE.sub("", cleaned)
    cleaned = " ".join(cleaned.split())
    return _HEADLINE.sub("", cleaned).strip()
