"""Extractor Agent: prompt the model for points of interest and rebuild them from free-form output."""

import json
import re
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from career_match_ai.config import (
    INFERENCE_TIMEOUT_SECONDS,
    MAX_POINTS_OF_INTEREST,
    MODEL_NAME,
    PROFILE_PROMPT_CHARS,
)
from career_match_ai.errors import ExtractionFailure
from career_match_ai.schemas.point_of_interest import POINT_TYPES, CareerCriteria, PointOfInterest
from career_match_ai.services.inference_service import InferenceService, Message, response_text
from career_match_ai.utils.logger import get_logger
from career_match_ai.utils.timeout_guard import guard

logger = get_logger(__name__)

EXTRACTION_SYSTEM_PROMPT = (
    "You analyze LinkedIn profiles and extract key points of interest. "
    "Return only valid JSON arrays, no explanations."
)

EXTRACTION_USER_PROMPT = """Analyze this LinkedIn profile and identify 3-10 key "points of interest" that define this person's unique background and qualifications.

Each point of interest should be:
- Specific and measurable (e.g., "Studied Computer Science at Stanford" not just "went to college")
- Career-relevant (education, work experience, skills, achievements)
- Generalizable (can be matched with similar people)

Order them from most to least impactful.

LinkedIn Profile:
{profile}

Return ONLY a JSON array of points of interest in this exact format:
[
  {{"description": "Studied at Carnegie Mellon University", "type": "education"}},
  {{"description": "Has internship experience at tech companies", "type": "experience"}},
  {{"description": "Proficient in Python and Machine Learning", "type": "skill"}}
]

Types: {types}"""

# Keys an object-wrapped answer may use for the array
WRAPPER_KEYS = ("pointsOfInterest", "results")

FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)```")


def build_messages(profile_text: str) -> List[Message]:
    """System + user messages; profile text is truncated to the prompt budget."""
    prompt = EXTRACTION_USER_PROMPT.format(
        profile=(profile_text or "")[:PROFILE_PROMPT_CHARS],
        types=", ".join(POINT_TYPES),
    )
    return [
        {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def _as_candidates(value: Any) -> Optional[list]:
    """A list is taken as-is; an object is unwrapped through WRAPPER_KEYS."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        for key in WRAPPER_KEYS:
            if isinstance(value.get(key), list):
                return value[key]
    return None


def _parse_whole(text: str) -> Optional[list]:
    try:
        return _as_candidates(json.loads(text.strip()))
    except ValueError:
        return None


def _parse_first_array(text: str) -> Optional[list]:
    """First bracketed array in the raw text that decodes as JSON, tried from each opening bracket."""
    decoder = json.JSONDecoder()
    start = text.find("[")
    while start >= 0:
        try:
            value, _ = decoder.raw_decode(text, start)
        except ValueError:
            value = None
        if isinstance(value, list):
            return value
        start = text.find("[", start + 1)
    return None


def _parse_fenced_block(text: str) -> Optional[list]:
    for match in FENCED_BLOCK.finditer(text):
        body = match.group(1).strip()
        if "[" not in body:
            continue
        candidates = _parse_whole(body) or _parse_first_array(body)
        if candidates is not None:
            return candidates
    return None


PARSE_STRATEGIES: List[Callable[[str], Optional[list]]] = [
    _parse_whole,
    _parse_first_array,
    _parse_fenced_block,
]


def parse_points_payload(text: str) -> list:
    """
    Run the parse strategies in order and return the first candidate list found.
    Raises ExtractionFailure when none of them yields an array.
    """
    for strategy in PARSE_STRATEGIES:
        candidates = strategy(text or "")
        if candidates is not None:
            logger.debug("Model output parsed via %s (%s entries)", strategy.__name__, len(candidates))
            return candidates
    raise ExtractionFailure("Failed to extract points of interest: no JSON array found in model output")


def validate_points(candidates: list) -> List[PointOfInterest]:
    """Keep entries with non-empty string description and type, in response order, capped."""
    points: List[PointOfInterest] = []
    for entry in candidates:
        if not isinstance(entry, dict):
            continue
        description, kind = entry.get("description"), entry.get("type")
        if not isinstance(description, str) or not isinstance(kind, str):
            continue
        try:
            points.append(PointOfInterest(description=description, type=kind))
        except ValidationError:
            continue
    if len(points) < len(candidates):
        logger.warning("Dropped %s invalid point(s) of interest", len(candidates) - len(points))
    return points[:MAX_POINTS_OF_INTEREST]


def criteria_from_text(text: str) -> CareerCriteria:
    """Parse and validate model output. Never returns an empty criteria."""
    points = validate_points(parse_points_payload(text))
    if not points:
        raise ExtractionFailure("Failed to extract points of interest: no valid points in model output")
    return CareerCriteria(points_of_interest=points)


async def run_extractor_agent(
    profile_text: str,
    inference: InferenceService,
    model: str = MODEL_NAME,
    timeout_seconds: float = INFERENCE_TIMEOUT_SECONDS,
) -> CareerCriteria:
    """
    Run the Extractor Agent: one inference call over the profile text, then the parse chain.
    Returns CareerCriteria with 1-10 points.
    """
    messages = build_messages(profile_text)
    result = await guard(
        inference.generate(model, messages),
        timeout_seconds,
        f"Inference stage timed out after {timeout_seconds:g}s",
    )
    text = response_text(result)
    logger.debug("Raw model output: %s", text[:500])
    criteria = criteria_from_text(text)
    logger.info(
        "Extractor Agent finished: model=%s points=%s",
        model,
        len(criteria.points_of_interest),
    )
    return criteria
