"""Points of interest extracted from a profile, and the criteria built from them."""

from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Types requested from the model; not enforced on the way back
POINT_TYPES: Tuple[str, ...] = ("education", "experience", "skill", "achievement", "background")


class PointOfInterest(BaseModel):
    """One career-relevant fact about a profile."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(..., description="Specific, matchable statement (e.g. 'Studied at Stanford')")
    type: str = Field(..., description="education, experience, skill, achievement or background")

    @field_validator("description", "type")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be a non-empty string")
        return value


class CareerCriteria(BaseModel):
    """Ordered points of interest, most impactful first, as returned by the model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    points_of_interest: List[PointOfInterest] = Field(
        ..., alias="pointsOfInterest", max_length=10, description="At most 10 points, model order"
    )
