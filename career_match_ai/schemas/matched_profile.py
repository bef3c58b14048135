"""Matched profile returned to the caller, uniform across search backends."""

from pydantic import BaseModel, Field

DEFAULT_TITLE = "LinkedIn Profile"
DEFAULT_SNIPPET = "Professional profile"


class MatchedProfile(BaseModel):
    """A comparable professional found by the people search."""

    url: str = Field(..., description="Profile URL")
    title: str = Field(default=DEFAULT_TITLE, description="Person name or page title")
    snippet: str = Field(default=DEFAULT_SNIPPET, description="Role, location and summary")
