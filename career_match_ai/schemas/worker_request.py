"""Inbound request shapes. Mode selects which pipeline stages run."""

from typing import List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .point_of_interest import PointOfInterest

REQUIRED_SELECTED_POINTS = 3


def _require_text(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("must be a non-empty string")
    return value


class AnalyzeRequest(BaseModel):
    """Crawl a profile and extract its points of interest."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Literal["analyze"] = "analyze"
    linkedin_url: str = Field(..., alias="linkedinUrl")

    @field_validator("linkedin_url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return _require_text(value)


class MatchRequest(BaseModel):
    """Find comparable professionals for a goal and exactly three chosen points."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Literal["match"] = "match"
    career_goal: str = Field(..., alias="careerGoal")
    selected_points: List[PointOfInterest] = Field(
        ...,
        alias="selectedPoints",
        min_length=REQUIRED_SELECTED_POINTS,
        max_length=REQUIRED_SELECTED_POINTS,
    )

    @field_validator("career_goal")
    @classmethod
    def check_goal(cls, value: str) -> str:
        return _require_text(value)


class FullRequest(BaseModel):
    """Crawl, extract and match in one call."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Literal["full"] = "full"
    linkedin_url: str = Field(..., alias="linkedinUrl")
    career_goal: str = Field(..., alias="careerGoal")

    @field_validator("linkedin_url", "career_goal")
    @classmethod
    def check_text(cls, value: str) -> str:
        return _require_text(value)


WorkerRequest = Union[AnalyzeRequest, MatchRequest, FullRequest]

REQUEST_MODELS = {
    "analyze": AnalyzeRequest,
    "match": MatchRequest,
    "full": FullRequest,
}
