"""Request Dispatcher: validate a WorkerRequest, run the stages for its mode, map failures."""

import json
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import httpx
from pydantic import ValidationError

from career_match_ai.agents.extractor_agent import run_extractor_agent
from career_match_ai.agents.match_agent import Clock, Sleep, find_matches_sync, find_matches_webset
from career_match_ai.config import MATCH_RESULT_LIMIT, Settings
from career_match_ai.errors import PipelineError, RequestValidationError
from career_match_ai.schemas.matched_profile import MatchedProfile
from career_match_ai.schemas.point_of_interest import CareerCriteria, PointOfInterest
from career_match_ai.schemas.worker_request import (
    REQUEST_MODELS,
    AnalyzeRequest,
    FullRequest,
    MatchRequest,
    WorkerRequest,
)
from career_match_ai.services.contents_service import crawl_profile
from career_match_ai.services.http_client import new_client
from career_match_ai.services.inference_service import InferenceService, OpenAIInferenceService
from career_match_ai.utils.logger import get_logger
from career_match_ai.utils.timeout_guard import guard

logger = get_logger(__name__)

# (HTTP status, JSON payload)
DispatchResult = Tuple[int, Dict[str, Any]]


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "Invalid request: " + "; ".join(parts)


def parse_request(body: Union[bytes, str, Dict[str, Any]]) -> WorkerRequest:
    """
    Parse and validate an inbound body. Mode defaults to 'analyze'.
    Raises RequestValidationError; never touches the network.
    """
    if isinstance(body, (bytes, str)):
        try:
            data = json.loads(body or b"")
        except ValueError:
            raise RequestValidationError("Request body must be valid JSON") from None
    else:
        data = body
    if not isinstance(data, dict):
        raise RequestValidationError("Request body must be a JSON object")

    mode = data.get("mode") or "analyze"
    model = REQUEST_MODELS.get(mode) if isinstance(mode, str) else None
    if model is None:
        raise RequestValidationError(
            f"Unknown mode '{mode}'; expected one of: {', '.join(REQUEST_MODELS)}"
        )
    try:
        return model.model_validate({**data, "mode": mode})
    except ValidationError as e:
        raise RequestValidationError(_format_validation_error(e)) from None


class Dispatcher:
    """Entry point for one request. Holds only immutable configuration between requests."""

    def __init__(
        self,
        settings: Settings,
        inference: Optional[InferenceService] = None,
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        sleep: Optional[Sleep] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        required = ["exa_api_key"]
        if inference is None:
            required.append("openai_api_key")
        if settings.search_backend == "search":
            required.append("people_search_api_key")
        settings.require(*required)

        self.settings = settings
        self._inference = inference or OpenAIInferenceService(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url or None,
        )
        self._client_factory = client_factory or new_client
        self._poller_options: Dict[str, Any] = {
            "poll_interval": settings.poll_interval_seconds,
            "max_attempts": settings.max_poll_attempts,
            "early_exit_attempts": settings.early_exit_attempts,
            "early_exit_min_found": settings.early_exit_min_found,
            "sleep": sleep,
            "clock": clock,
        }

    async def dispatch(self, body: Union[bytes, str, Dict[str, Any]]) -> DispatchResult:
        """Validate, run, and render the result or failure as (status, payload)."""
        try:
            request = parse_request(body)
        except RequestValidationError as e:
            logger.warning("Rejected request: %s", e.message)
            return e.status_code, {"error": e.message}

        logger.info("Processing %s request", request.mode)
        try:
            return 200, await self.handle(request)
        except PipelineError as e:
            logger.error("%s request failed (%s): %s", request.mode, type(e).__name__, e.message)
            return e.status_code, {"error": e.message}
        except Exception as e:
            logger.exception("Unexpected error processing %s request", request.mode)
            return 500, {"error": str(e) or "Internal server error"}

    async def handle(self, request: WorkerRequest) -> Dict[str, Any]:
        """Run the stages for request.mode strictly in sequence on one per-request client."""
        async with self._client_factory() as client:
            if isinstance(request, AnalyzeRequest):
                criteria = await self.analyze(client, request.linkedin_url)
                return {"criteria": criteria.model_dump(by_alias=True)}
            if isinstance(request, MatchRequest):
                profiles = await self.match(client, request.career_goal, request.selected_points)
                return {"matchedProfiles": [p.model_dump() for p in profiles]}
            if isinstance(request, FullRequest):
                criteria = await self.analyze(client, request.linkedin_url)
                profiles = await self.match(client, request.career_goal, criteria.points_of_interest)
                return {
                    "criteria": criteria.model_dump(by_alias=True),
                    "matchedProfiles": [p.model_dump() for p in profiles],
                }
        raise RequestValidationError(f"Unsupported request mode: {request.mode}")

    async def analyze(self, client: httpx.AsyncClient, linkedin_url: str) -> CareerCriteria:
        """Crawl the profile, then extract its criteria."""
        s = self.settings
        logger.info("Crawling profile %s", linkedin_url)
        text = await guard(
            crawl_profile(client, linkedin_url, s.exa_api_key, base_url=s.exa_base_url),
            s.crawl_timeout_seconds,
            f"Crawl stage timed out after {s.crawl_timeout_seconds:g}s",
        )
        logger.info("Extracting career criteria from %s characters", len(text))
        return await run_extractor_agent(
            text,
            self._inference,
            model=s.model_name,
            timeout_seconds=s.inference_timeout_seconds,
        )

    async def match(
        self,
        client: httpx.AsyncClient,
        career_goal: str,
        points: Sequence[PointOfInterest],
        limit: int = MATCH_RESULT_LIMIT,
    ) -> List[MatchedProfile]:
        """Find comparable profiles with whichever search backend is configured."""
        s = self.settings
        logger.info("Matching goal '%s' with %s points via %s", career_goal[:80], len(points), s.search_backend)
        if s.search_backend == "search":
            profiles = await find_matches_sync(
                client,
                s.people_search_api_key,
                s.people_search_url,
                career_goal,
                points,
                limit=limit,
                timeout_seconds=s.search_timeout_seconds,
            )
        else:
            profiles = await find_matches_webset(
                client,
                s.exa_api_key,
                s.exa_base_url,
                career_goal,
                points,
                limit=limit,
                search_timeout_seconds=s.search_timeout_seconds,
                poll_timeout_seconds=s.poll_timeout_seconds,
                poller_options=self._poller_options,
            )
        logger.info("Match finished: %s profiles", len(profiles))
        return profiles
