"""Synchronous people search: one query, one response."""

from typing import Any, Dict, List

import httpx

from career_match_ai.services.http_client import check_response
from career_match_ai.utils.logger import get_logger

logger = get_logger(__name__)


async def search_people(
    client: httpx.AsyncClient,
    api_key: str,
    search_url: str,
    query: str,
    limit: int = 5,
) -> List[Dict[str, Any]]:
    """
    Run a single people search and return the raw result entries.
    An empty result set (``total: 0``) is a normal outcome, not an error.
    """
    response = await client.get(
        search_url,
        params={"query": query, "limit": limit},
        headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
    )
    data = check_response(response, "People search")
    results = data.get("results") if isinstance(data, dict) else None
    results = [r for r in (results or []) if isinstance(r, dict)]
    total = data.get("total") if isinstance(data, dict) else None
    logger.info("People search '%s' returned %s results (total=%s)", query[:50], len(results), total)
    return results
