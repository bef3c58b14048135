"""Match Agent: turn a goal and chosen points into comparable professionals."""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx

from career_match_ai.config import (
    MATCH_RESULT_LIMIT,
    POLL_TIMEOUT_SECONDS,
    SEARCH_RESULT_LIMIT_MAX,
    SEARCH_TIMEOUT_SECONDS,
    WEBSET_EARLY_EXIT_ATTEMPTS,
    WEBSET_EARLY_EXIT_MIN_FOUND,
    WEBSET_MAX_CRITERIA,
    WEBSET_MAX_POLL_ATTEMPTS,
    WEBSET_POLL_INTERVAL_SECONDS,
)
from career_match_ai.errors import MatchTimeout, StageTimeout
from career_match_ai.schemas.matched_profile import DEFAULT_SNIPPET, DEFAULT_TITLE, MatchedProfile
from career_match_ai.schemas.point_of_interest import PointOfInterest
from career_match_ai.schemas.search_job import AsyncSearchJob, PollState
from career_match_ai.services.people_search import search_people
from career_match_ai.services.webset_service import create_webset, get_webset, list_webset_items
from career_match_ai.utils.helpers import truncate_text
from career_match_ai.utils.logger import get_logger
from career_match_ai.utils.timeout_guard import guard

logger = get_logger(__name__)

SNIPPET_DESCRIPTION_CHARS = 200
SNIPPET_SEPARATOR = " · "

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


def build_search_query(career_goal: str, points: Sequence[PointOfInterest]) -> str:
    """One natural-language query: the goal, then the point descriptions."""
    goal = (career_goal or "").strip().rstrip(".")
    descriptions = [p.description.strip().rstrip(".") for p in points if p.description.strip()]
    if not descriptions:
        return f"People who are {goal}"
    return f"People who are {goal}, with a background like: " + "; ".join(descriptions)


def build_webset_criteria(career_goal: str, points: Sequence[PointOfInterest]) -> List[str]:
    """Career goal first, then point descriptions, up to WEBSET_MAX_CRITERIA in total."""
    criteria = [career_goal.strip()]
    criteria.extend(p.description for p in points[: WEBSET_MAX_CRITERIA - 1])
    return criteria


# ----- Raw result -> MatchedProfile -----


def _first_str(*values: Any) -> str:
    for v in values:
        if isinstance(v, str) and v.strip():
            return v.strip()
    return ""


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _current_experience(raw: Dict[str, Any]) -> Dict[str, Any]:
    experience = raw.get("experience")
    if isinstance(experience, list) and experience:
        return _mapping(experience[0])
    return {}


def build_snippet(role: str, company: str, location: str, description: str) -> str:
    """Role+company, then location, then truncated description; placeholder if all are empty."""
    parts: List[str] = []
    if role and company:
        parts.append(f"{role} at {company}")
    elif role or company:
        parts.append(role or company)
    if location:
        parts.append(location)
    if description:
        parts.append(truncate_text(description, SNIPPET_DESCRIPTION_CHARS))
    return SNIPPET_SEPARATOR.join(parts) if parts else DEFAULT_SNIPPET


def map_profile(raw: Dict[str, Any]) -> Optional[MatchedProfile]:
    """
    Map a search result or webset item to MatchedProfile.
    Handles flat results, ``{profile: {...}, experience: [...]}`` results and webset items
    (``properties.person`` plus enrichment values). Returns None when no URL is present.
    """
    profile = _mapping(raw.get("profile"))
    properties = _mapping(raw.get("properties"))
    person = _mapping(properties.get("person"))
    experience = _current_experience(raw)
    enrichments = raw.get("enrichments") if isinstance(raw.get("enrichments"), list) else []
    enrichment_value = ""
    for enrichment in enrichments:
        value = _mapping(enrichment).get("value")
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value if v)
        enrichment_value = _first_str(value)
        if enrichment_value:
            break

    url = _first_str(
        raw.get("url"),
        profile.get("linkedin_url"),
        profile.get("url"),
        properties.get("url"),
    )
    if not url:
        return None
    title = _first_str(raw.get("name"), profile.get("name"), person.get("name"), raw.get("title")) or DEFAULT_TITLE
    role = _first_str(
        enrichment_value,
        raw.get("role"),
        raw.get("headline"),
        profile.get("title"),
        profile.get("headline"),
        person.get("position"),
        experience.get("title"),
    )
    company = "" if enrichment_value else _first_str(
        raw.get("company"),
        profile.get("company"),
        _mapping(person.get("company")).get("name"),
        experience.get("company_name"),
    )
    location = _first_str(raw.get("location"), profile.get("location"), person.get("location"))
    description = _first_str(
        raw.get("description"),
        raw.get("summary"),
        profile.get("description"),
        profile.get("summary"),
        properties.get("description"),
    )
    return MatchedProfile(url=url, title=title, snippet=build_snippet(role, company, location, description))


def map_profiles(raw_items: Sequence[Dict[str, Any]], limit: int) -> List[MatchedProfile]:
    profiles: List[MatchedProfile] = []
    for item in raw_items:
        profile = map_profile(item)
        if profile is None:
            logger.debug("Skipping result without URL: %s", list(item.keys()))
            continue
        profiles.append(profile)
        if len(profiles) >= limit:
            break
    return profiles


# ----- Webset polling state machine -----


class WebsetPoller:
    """
    Drives a webset job from Created/Running to a terminal PollState.

    Created -> Running -> Idle | EarlyExit | TimeoutWithResults | TimeoutNoResults.
    The first status check runs right away, then one every poll_interval. Stops at
    max_attempts checks, or once max_attempts * poll_interval of wall time has elapsed
    on the injected clock. Each check gets min(poll_timeout, remaining budget) as its
    deadline; a check cut off by the budget ends polling instead of failing it.
    """

    def __init__(
        self,
        fetch_status: Callable[[str, float], Awaitable[AsyncSearchJob]],
        *,
        poll_interval: float = WEBSET_POLL_INTERVAL_SECONDS,
        max_attempts: int = WEBSET_MAX_POLL_ATTEMPTS,
        early_exit_attempts: int = WEBSET_EARLY_EXIT_ATTEMPTS,
        early_exit_min_found: int = WEBSET_EARLY_EXIT_MIN_FOUND,
        poll_timeout: float = POLL_TIMEOUT_SECONDS,
        sleep: Optional[Sleep] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._fetch_status = fetch_status
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.early_exit_attempts = early_exit_attempts
        self.early_exit_min_found = early_exit_min_found
        self.poll_timeout = poll_timeout
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic
        self.state = PollState.CREATED
        self.attempts = 0
        self.job: Optional[AsyncSearchJob] = None

    @property
    def budget_seconds(self) -> float:
        return self.max_attempts * self.poll_interval

    @staticmethod
    def _exhausted(job: AsyncSearchJob) -> PollState:
        return PollState.TIMEOUT_WITH_RESULTS if job.found > 0 else PollState.TIMEOUT_NO_RESULTS

    def _transition(self, job: AsyncSearchJob, elapsed: float) -> PollState:
        if job.is_idle:
            return PollState.IDLE
        if self.attempts >= self.early_exit_attempts and job.found >= self.early_exit_min_found:
            return PollState.EARLY_EXIT
        if self.attempts >= self.max_attempts or elapsed >= self.budget_seconds:
            return self._exhausted(job)
        return PollState.RUNNING

    @property
    def finished(self) -> bool:
        return self.state not in (PollState.CREATED, PollState.RUNNING)

    async def run(self, job: AsyncSearchJob) -> PollState:
        """Poll until a terminal state. The initial job counts as attempt zero."""
        self.job = job
        started = self._clock()
        self.state = PollState.IDLE if job.is_idle else PollState.RUNNING
        while not self.finished:
            if self.attempts:
                remaining = self.budget_seconds - (self._clock() - started)
                await self._sleep(max(0.0, min(self.poll_interval, remaining)))
            remaining = self.budget_seconds - (self._clock() - started)
            if remaining <= 0:
                self.state = self._exhausted(self.job)
                break
            deadline = min(self.poll_timeout, remaining)
            try:
                self.job = await self._fetch_status(job.id, deadline)
            except StageTimeout:
                if deadline < remaining:
                    raise
                logger.warning("Webset %s status check cut off by the %gs polling budget", job.id, self.budget_seconds)
                self.state = self._exhausted(self.job)
                break
            self.attempts += 1
            progress = self.job.progress
            if progress:
                logger.info(
                    "Webset status check %s: %s - Found: %s, Analyzed: %s, Completion: %s%%",
                    self.attempts,
                    self.job.status,
                    progress.found,
                    progress.analyzed,
                    progress.completion,
                )
            else:
                logger.info("Webset status check %s: %s", self.attempts, self.job.status)
            self.state = self._transition(self.job, self._clock() - started)
        logger.info("Webset %s polling stopped: state=%s attempts=%s", job.id, self.state.value, self.attempts)
        return self.state


# ----- Entry points -----


async def find_matches_sync(
    client: httpx.AsyncClient,
    api_key: str,
    search_url: str,
    career_goal: str,
    points: Sequence[PointOfInterest],
    limit: int = MATCH_RESULT_LIMIT,
    timeout_seconds: float = SEARCH_TIMEOUT_SECONDS,
) -> List[MatchedProfile]:
    """One synchronous search; results mapped and capped to limit (at most SEARCH_RESULT_LIMIT_MAX)."""
    limit = max(1, min(limit, SEARCH_RESULT_LIMIT_MAX))
    query = build_search_query(career_goal, points)
    results = await guard(
        search_people(client, api_key, search_url, query, limit=limit),
        timeout_seconds,
        f"People search timed out after {timeout_seconds:g}s",
    )
    return map_profiles(results, limit)


async def find_matches_webset(
    client: httpx.AsyncClient,
    api_key: str,
    base_url: str,
    career_goal: str,
    points: Sequence[PointOfInterest],
    limit: int = MATCH_RESULT_LIMIT,
    search_timeout_seconds: float = SEARCH_TIMEOUT_SECONDS,
    poll_timeout_seconds: float = POLL_TIMEOUT_SECONDS,
    poller_options: Optional[Dict[str, Any]] = None,
) -> List[MatchedProfile]:
    """
    Create a webset job, poll it with WebsetPoller, then fetch and map its items.
    Raises MatchTimeout when polling is exhausted with nothing found.
    """
    query = build_search_query(career_goal, points)
    criteria = build_webset_criteria(career_goal, points)
    logger.info("Webset search query: %s", query)
    job = await guard(
        create_webset(client, api_key, base_url, query, criteria, count=limit),
        search_timeout_seconds,
        f"Webset creation timed out after {search_timeout_seconds:g}s",
    )

    async def fetch_status(webset_id: str, deadline: float) -> AsyncSearchJob:
        return await guard(
            get_webset(client, api_key, base_url, webset_id),
            deadline,
            f"Webset status check timed out after {deadline:g}s",
        )

    options = {"poll_timeout": poll_timeout_seconds, **(poller_options or {})}
    poller = WebsetPoller(fetch_status, **options)
    state = await poller.run(job)
    if state is PollState.TIMEOUT_NO_RESULTS:
        raise MatchTimeout(
            "Webset processing timed out without finding any results. Try a broader search query."
        )

    items = await guard(
        list_webset_items(client, api_key, base_url, job.id),
        search_timeout_seconds,
        f"Webset items fetch timed out after {search_timeout_seconds:g}s",
    )
    return map_profiles(items, limit)
