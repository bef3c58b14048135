from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from career_match_ai.config import Settings
from career_match_ai.services.inference_service import InferenceService

EXA_BASE = "https://api.exa.test"
SEARCH_URL = "https://search.test/api/search"


class FakeInference(InferenceService):
    """Canned inference result, optionally after a delay."""

    def __init__(self, result: Any = None, delay: float = 0.0) -> None:
        self.result = result
        self.delay = delay
        self.calls: List[Tuple[str, list]] = []
        self.cancelled = False

    async def generate(self, model: str, messages: list) -> Any:
        self.calls.append((model, messages))
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        return self.result


class Router:
    """httpx.MockTransport handler routing on (method, path); records every request."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, response: Any, status: int = 200) -> None:
        self.routes[(method, path)] = (response, status)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "no route"})
        response, status = route
        if callable(response):
            response = response(request)
            if asyncio.iscoroutine(response):
                response = await response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(status, json=response)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class FakeClock:
    """Injected clock/sleep pair: sleeping advances time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


def request_json(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content)


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        exa_api_key="exa-test",
        exa_base_url=EXA_BASE,
        openai_api_key="sk-test",
        model_name="test-model",
        people_search_api_key="ps-test",
        people_search_url=SEARCH_URL,
        search_backend="webset",
    )


@pytest.fixture
def make_points() -> Callable[..., list]:
    from career_match_ai.schemas.point_of_interest import PointOfInterest

    def _make(n: int = 3) -> list:
        kinds = ["education", "experience", "skill", "achievement", "background"]
        return [PointOfInterest(description=f"Point {i + 1}", type=kinds[i % len(kinds)]) for i in range(n)]

    return _make
