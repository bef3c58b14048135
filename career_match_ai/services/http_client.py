"""Shared httpx plumbing for upstream services."""

from typing import Any

import httpx

from career_match_ai.errors import UpstreamError

# Transport-level ceiling; per-stage deadlines are enforced by utils.timeout_guard
HTTP_TIMEOUT_SECONDS: float = 60.0

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "CareerMatchAI/1.0",
}


def new_client(**kwargs: Any) -> httpx.AsyncClient:
    """AsyncClient for one request's upstream calls. Caller closes it (``async with``)."""
    kwargs.setdefault("timeout", HTTP_TIMEOUT_SECONDS)
    kwargs.setdefault("headers", DEFAULT_HEADERS)
    return httpx.AsyncClient(**kwargs)


def check_response(response: httpx.Response, service: str) -> Any:
    """Return the decoded JSON body, or raise UpstreamError for a non-2xx status."""
    if not response.is_success:
        raise UpstreamError(service, response.status_code, response.text)
    try:
        return response.json()
    except ValueError:
        raise UpstreamError(service, response.status_code, "response body is not JSON: " + response.text[:200]) from None
