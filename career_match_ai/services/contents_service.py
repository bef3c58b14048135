"""Exa /contents crawler: fetch a profile page rendered as plain text."""

from typing import Any, Callable, List, Optional

import httpx

from career_match_ai.config import CRAWL_MAX_CHARACTERS
from career_match_ai.errors import CrawlFailure
from career_match_ai.services.http_client import check_response
from career_match_ai.utils.helpers import join_nonempty
from career_match_ai.utils.logger import get_logger

logger = get_logger(__name__)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _from_context(data: dict) -> str:
    """Aggregated context string, when the service builds one."""
    return _text(data.get("context"))


def _from_first_result(data: dict) -> str:
    results = data.get("results") or []
    if results and isinstance(results[0], dict):
        return _text(results[0].get("text"))
    return ""


def _from_all_results(data: dict) -> str:
    """Title, text and summary of every result, newline-joined."""
    parts: List[str] = []
    for result in data.get("results") or []:
        if isinstance(result, dict):
            parts.extend(_text(result.get(key)) for key in ("title", "text", "summary"))
    return join_nonempty(parts)


# Order matters: the response shape varies with content type
TEXT_STRATEGIES: List[Callable[[dict], str]] = [
    _from_context,
    _from_first_result,
    _from_all_results,
]


def extract_profile_text(data: Any) -> str:
    """
    Best-effort plain text from a /contents response.
    Raises CrawlFailure naming the top-level keys when every strategy comes back empty.
    """
    if not isinstance(data, dict):
        raise CrawlFailure(f"Failed to crawl profile: unexpected response type {type(data).__name__}")
    for strategy in TEXT_STRATEGIES:
        text = strategy(data)
        if text:
            logger.debug("Profile text taken via %s", strategy.__name__)
            return text
    keys = ", ".join(sorted(data.keys())) or "none"
    raise CrawlFailure(f"Failed to crawl profile: no text in response (keys: {keys})")


async def crawl_profile(
    client: httpx.AsyncClient,
    url: str,
    api_key: str,
    base_url: str = "https://api.exa.ai",
    max_characters: int = CRAWL_MAX_CHARACTERS,
) -> str:
    """Issue one /contents request for url and return its text. URL is assumed validated."""
    response = await client.post(
        f"{base_url.rstrip('/')}/contents",
        headers={"Content-Type": "application/json", "x-api-key": api_key},
        json={
            "ids": [url],
            "text": {"includeHtmlTags": False, "maxCharacters": max_characters},
        },
    )
    data = check_response(response, "Exa contents")
    statuses: Optional[list] = data.get("statuses") if isinstance(data, dict) else None
    if statuses:
        logger.debug("Exa contents statuses: %s", statuses)
    text = extract_profile_text(data)
    logger.info("Crawled %s: %s characters", url, len(text))
    logger.debug("Profile preview: %s", text[:500])
    return text
