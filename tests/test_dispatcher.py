from __future__ import annotations

import asyncio
import json
from typing import Any, Dict

import pytest

from career_match_ai.config import Settings
from career_match_ai.dispatcher import Dispatcher, parse_request
from career_match_ai.errors import ConfigurationError, RequestValidationError
from career_match_ai.schemas.worker_request import AnalyzeRequest, MatchRequest
from conftest import FakeInference

STANFORD = [{"description": "Studied at Stanford", "type": "education"}]
THREE_POINTS = [
    {"description": "Studied at Stanford", "type": "education"},
    {"description": "Ex-Google engineer", "type": "experience"},
    {"description": "Python and ML", "type": "skill"},
]


class CountingFactory:
    def __init__(self, router) -> None:
        self.router = router
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.router.client()


def _dispatcher(settings: Settings, router, fake_clock=None, inference=None) -> tuple[Dispatcher, CountingFactory]:
    factory = CountingFactory(router)
    dispatcher = Dispatcher(
        settings,
        inference=inference or FakeInference({"response": json.dumps(STANFORD)}),
        client_factory=factory,
        sleep=fake_clock.sleep if fake_clock else None,
        clock=fake_clock.clock if fake_clock else None,
    )
    return dispatcher, factory


def _dispatch(dispatcher: Dispatcher, body: Any) -> tuple[int, Dict[str, Any]]:
    if isinstance(body, dict):
        body = json.dumps(body).encode()
    return asyncio.run(dispatcher.dispatch(body))


# ----- request parsing -----


def test_mode_defaults_to_analyze() -> None:
    request = parse_request(b'{"linkedinUrl": "https://linkedin.com/in/jane"}')
    assert isinstance(request, AnalyzeRequest)
    assert request.linkedin_url == "https://linkedin.com/in/jane"


def test_match_request_parses_points() -> None:
    request = parse_request({"mode": "match", "careerGoal": " CTO ", "selectedPoints": THREE_POINTS})
    assert isinstance(request, MatchRequest)
    assert request.career_goal == "CTO"
    assert [p.type for p in request.selected_points] == ["education", "experience", "skill"]


@pytest.mark.parametrize(
    "body, fragment",
    [
        (b"not json", "valid JSON"),
        (b"", "valid JSON"),
        (b"[1, 2]", "JSON object"),
        (b'{"mode": "explode"}', "Unknown mode"),
        (b'{"mode": "analyze"}', "linkedinUrl"),
        (b'{"linkedinUrl": "   "}', "linkedinUrl"),
        (b'{"mode": "match", "careerGoal": "", "selectedPoints": []}', "careerGoal"),
        (b'{"mode": "full", "linkedinUrl": "https://linkedin.com/in/x"}', "careerGoal"),
    ],
)
def test_parse_request_rejects_invalid_bodies(body: bytes, fragment: str) -> None:
    with pytest.raises(RequestValidationError) as exc:
        parse_request(body)
    assert fragment in exc.value.message
    assert exc.value.status_code == 400


@pytest.mark.parametrize("count", [0, 2, 4])
def test_match_requires_exactly_three_points_before_any_network_call(settings, router, count: int) -> None:
    dispatcher, factory = _dispatcher(settings, router)
    body = {"mode": "match", "careerGoal": "CEO at a tech company", "selectedPoints": THREE_POINTS[:2] * 2}
    body["selectedPoints"] = body["selectedPoints"][:count]

    status, payload = _dispatch(dispatcher, body)

    assert status == 400
    assert "selectedPoints" in payload["error"]
    assert factory.calls == 0
    assert router.requests == []


def test_match_rejects_point_with_blank_description(settings, router) -> None:
    dispatcher, factory = _dispatcher(settings, router)
    points = THREE_POINTS[:2] + [{"description": " ", "type": "skill"}]

    status, payload = _dispatch(dispatcher, {"mode": "match", "careerGoal": "CTO", "selectedPoints": points})

    assert status == 400
    assert router.requests == []


# ----- construction -----


def test_missing_keys_fail_at_construction(router) -> None:
    with pytest.raises(ConfigurationError, match="EXA_API_KEY"):
        Dispatcher(Settings(openai_api_key="sk"), client_factory=router.client)


def test_sync_backend_requires_search_key(router) -> None:
    with pytest.raises(ConfigurationError, match="PEOPLE_SEARCH_API_KEY"):
        Dispatcher(
            Settings(exa_api_key="exa", search_backend="search"),
            inference=FakeInference(),
            client_factory=router.client,
        )


# ----- analyze -----


def test_analyze_scenario(settings, router) -> None:
    router.add(
        "POST",
        "/contents",
        {"context": "Jane Doe, Stanford '20, ex-Google...", "results": [{"text": "Other text"}]},
    )
    inference = FakeInference({"response": json.dumps(STANFORD)})
    dispatcher, factory = _dispatcher(settings, router, inference=inference)

    status, payload = _dispatch(dispatcher, {"linkedinUrl": "https://linkedin.com/in/jane"})

    assert status == 200
    assert payload == {"criteria": {"pointsOfInterest": STANFORD}}
    assert factory.calls == 1
    model, messages = inference.calls[0]
    assert model == "test-model"
    assert "Jane Doe, Stanford '20, ex-Google..." in messages[1]["content"]
    assert "Other text" not in messages[1]["content"]


def test_analyze_crawl_failure_is_500(settings, router) -> None:
    router.add("POST", "/contents", {"results": [], "requestId": "r1"})
    inference = FakeInference({"response": json.dumps(STANFORD)})
    dispatcher, _ = _dispatcher(settings, router, inference=inference)

    status, payload = _dispatch(dispatcher, {"linkedinUrl": "https://linkedin.com/in/jane"})

    assert status == 500
    assert "requestId" in payload["error"]
    assert inference.calls == []


def test_analyze_unparsable_model_output_fails_loudly(settings, router) -> None:
    router.add("POST", "/contents", {"context": "Profile"})
    dispatcher, _ = _dispatcher(settings, router, inference=FakeInference({"response": "Sorry, I can't."}))

    status, payload = _dispatch(dispatcher, {"linkedinUrl": "https://linkedin.com/in/jane"})

    assert status == 500
    assert "points of interest" in payload["error"]


def test_inference_timeout_identifies_inference_stage(router) -> None:
    settings = Settings(exa_api_key="exa", exa_base_url="https://api.exa.test", inference_timeout_seconds=0.01)
    router.add("POST", "/contents", {"context": "Profile"})
    inference = FakeInference({"response": "[]"}, delay=5)
    dispatcher, _ = _dispatcher(settings, router, inference=inference)

    status, payload = _dispatch(dispatcher, {"linkedinUrl": "https://linkedin.com/in/jane"})

    assert status == 500
    assert payload["error"].startswith("Inference stage timed out")


def test_upstream_error_message_includes_status_and_body(settings, router) -> None:
    router.add("POST", "/contents", {"error": "quota exceeded"}, status=429)
    dispatcher, _ = _dispatcher(settings, router)

    status, payload = _dispatch(dispatcher, {"linkedinUrl": "https://linkedin.com/in/jane"})

    assert status == 500
    assert "429" in payload["error"]
    assert "quota exceeded" in payload["error"]


def test_unexpected_exception_rendered_as_500(settings, router) -> None:
    def boom(request):
        raise RuntimeError("socket exploded")

    router.add("POST", "/contents", boom)
    dispatcher, _ = _dispatcher(settings, router)

    status, payload = _dispatch(dispatcher, {"linkedinUrl": "https://linkedin.com/in/jane"})

    assert status == 500
    assert payload == {"error": "socket exploded"}


# ----- match -----


def test_match_scenario_sync_search_with_no_results(router) -> None:
    settings = Settings(
        exa_api_key="exa",
        people_search_api_key="ps",
        people_search_url="https://search.test/api/search",
        search_backend="search",
    )
    router.add("GET", "/api/search", {"total": 0, "results": []})
    dispatcher, _ = _dispatcher(settings, router)

    status, payload = _dispatch(
        dispatcher,
        {"mode": "match", "careerGoal": "CEO at a tech company", "selectedPoints": THREE_POINTS},
    )

    assert status == 200
    assert payload == {"matchedProfiles": []}


def test_match_webset_backend(settings, router, fake_clock) -> None:
    router.add("POST", "/websets/v0/websets", {"id": "ws_9", "status": "idle"})
    router.add(
        "GET",
        "/websets/v0/websets/ws_9/items",
        {"items": [{"url": "https://linkedin.com/in/a", "title": "A", "enrichments": [{"value": "VP at Z"}]}]},
    )
    dispatcher, _ = _dispatcher(settings, router, fake_clock=fake_clock)

    status, payload = _dispatch(
        dispatcher,
        {"mode": "match", "careerGoal": "CTO", "selectedPoints": THREE_POINTS},
    )

    assert status == 200
    assert payload == {
        "matchedProfiles": [{"url": "https://linkedin.com/in/a", "title": "A", "snippet": "VP at Z"}]
    }
    assert fake_clock.sleeps == []


def test_match_timeout_without_results(settings, router, fake_clock) -> None:
    router.add("POST", "/websets/v0/websets", {"id": "ws_9", "status": "running"})
    router.add("GET", "/websets/v0/websets/ws_9", {"id": "ws_9", "status": "running"})
    dispatcher, _ = _dispatcher(settings, router, fake_clock=fake_clock)

    status, payload = _dispatch(
        dispatcher,
        {"mode": "match", "careerGoal": "CTO", "selectedPoints": THREE_POINTS},
    )

    assert status == 500
    assert "timed out without finding any results" in payload["error"]
    assert fake_clock.now <= settings.max_poll_attempts * settings.poll_interval_seconds


# ----- full -----


def test_full_mode_runs_all_stages_in_order(settings, router, fake_clock) -> None:
    router.add("POST", "/contents", {"results": [{"text": "Jane Doe profile"}]})
    router.add("POST", "/websets/v0/websets", {"id": "ws_1", "status": "idle"})
    router.add("GET", "/websets/v0/websets/ws_1/items", {"items": [{"url": "https://linkedin.com/in/b"}]})
    dispatcher, factory = _dispatcher(settings, router, fake_clock=fake_clock)

    status, payload = _dispatch(
        dispatcher,
        {"mode": "full", "linkedinUrl": "https://linkedin.com/in/jane", "careerGoal": "CTO"},
    )

    assert status == 200
    assert payload["criteria"] == {"pointsOfInterest": STANFORD}
    assert payload["matchedProfiles"][0]["url"] == "https://linkedin.com/in/b"
    assert [r.url.path for r in router.requests] == [
        "/contents",
        "/websets/v0/websets",
        "/websets/v0/websets/ws_1/items",
    ]
    assert factory.calls == 1
