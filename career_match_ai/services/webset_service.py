"""Exa Websets: asynchronous people-search jobs (create, poll, list items)."""

from typing import Any, Dict, List, Optional

import httpx

from career_match_ai.errors import UpstreamError
from career_match_ai.schemas.search_job import AsyncSearchJob
from career_match_ai.services.http_client import check_response
from career_match_ai.utils.logger import get_logger

logger = get_logger(__name__)

WEBSETS_PATH = "/websets/v0/websets"

ROLE_ENRICHMENT = {
    "description": "Extract the person's current role and company",
    "format": "text",
}


def _websets_url(base_url: str, *parts: str) -> str:
    return "/".join([base_url.rstrip("/") + WEBSETS_PATH, *parts])


def _parse_job(response: httpx.Response, data: Any, service: str, job_id: Optional[str] = None) -> AsyncSearchJob:
    """AsyncSearchJob from a decoded body, or UpstreamError when it is not a job object with an id."""
    if not isinstance(data, dict):
        raise UpstreamError(service, response.status_code, f"expected a JSON object, got {type(data).__name__}")
    job = AsyncSearchJob.from_payload(data, job_id=job_id)
    if not job.id:
        raise UpstreamError(service, response.status_code, "response has no webset id")
    return job


async def create_webset(
    client: httpx.AsyncClient,
    api_key: str,
    base_url: str,
    query: str,
    criteria: List[str],
    count: int,
) -> AsyncSearchJob:
    """Submit a person search job; returns its initial state."""
    body: Dict[str, Any] = {
        "search": {
            "query": query,
            "count": count,
            "entity": {"type": "person"},
            "criteria": [{"description": c} for c in criteria],
            "recall": False,
        },
        "enrichments": [ROLE_ENRICHMENT],
    }
    response = await client.post(
        _websets_url(base_url),
        headers={"Content-Type": "application/json", "x-api-key": api_key},
        json=body,
    )
    data = check_response(response, "Exa webset creation")
    job = _parse_job(response, data, "Exa webset creation")
    logger.info("Created webset %s (status=%s)", job.id, job.status)
    return job


async def get_webset(
    client: httpx.AsyncClient,
    api_key: str,
    base_url: str,
    webset_id: str,
) -> AsyncSearchJob:
    """Read the current status and progress of a webset."""
    response = await client.get(_websets_url(base_url, webset_id), headers={"x-api-key": api_key})
    data = check_response(response, "Exa webset status")
    return _parse_job(response, data, "Exa webset status", job_id=webset_id)


async def list_webset_items(
    client: httpx.AsyncClient,
    api_key: str,
    base_url: str,
    webset_id: str,
) -> List[Dict[str, Any]]:
    """Raw items found so far by a webset."""
    response = await client.get(_websets_url(base_url, webset_id, "items"), headers={"x-api-key": api_key})
    data = check_response(response, "Exa webset items")
    items = data.get("items") if isinstance(data, dict) else None
    items = [i for i in (items or []) if isinstance(i, dict)]
    logger.info("Retrieved %s items from webset %s", len(items), webset_id)
    return items
