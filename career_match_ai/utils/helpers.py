"""Helper utilities for the Career Match AI service."""

import re
from typing import Iterable, Optional

LINKEDIN_URL_PATTERN = re.compile(r"^https?://(www\.)?linkedin\.com/.+", re.IGNORECASE)


def is_linkedin_url(url: str) -> bool:
    """True for http(s) URLs on linkedin.com with a non-empty path."""
    if not url or not url.strip():
        return False
    return bool(LINKEDIN_URL_PATTERN.match(url.strip()))


def truncate_text(text: Optional[str], max_chars: int, suffix: str = "...") -> str:
    """Trim text to max_chars, appending suffix when something was cut."""
    text = (text or "").strip()
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + suffix


def join_nonempty(parts: Iterable[Optional[str]], sep: str = "\n") -> str:
    """Join the stripped, non-empty parts."""
    return sep.join(p.strip() for p in parts if p and str(p).strip())
