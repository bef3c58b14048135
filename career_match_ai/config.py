"""Configuration loaded from environment variables."""

import os
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from career_match_ai.errors import ConfigurationError

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env

# API keys – never hardcode
EXA_API_KEY: str = os.getenv("EXA_API_KEY", "")
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
PEOPLE_SEARCH_API_KEY: str = os.getenv("PEOPLE_SEARCH_API_KEY", "")
MODEL_NAME: str = os.getenv("MODEL_NAME", "gpt-4o-mini")

# Upstream endpoints
EXA_BASE_URL: str = os.getenv("EXA_BASE_URL", "https://api.exa.ai")
OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "")
PEOPLE_SEARCH_URL: str = os.getenv("PEOPLE_SEARCH_URL", "https://search.clado.ai/api/search")

# "webset" polls an asynchronous Exa webset job; "search" does one synchronous query
SEARCH_BACKEND: str = os.getenv("SEARCH_BACKEND", "webset").strip().lower()
SEARCH_BACKENDS: Tuple[str, ...] = ("webset", "search")

# Per-call deadlines (seconds); each external call gets its own
CRAWL_TIMEOUT_SECONDS: float = 30.0
INFERENCE_TIMEOUT_SECONDS: float = 45.0
SEARCH_TIMEOUT_SECONDS: float = 30.0
POLL_TIMEOUT_SECONDS: float = 15.0

# Crawl / extraction limits
CRAWL_MAX_CHARACTERS: int = 10000
PROFILE_PROMPT_CHARS: int = 4000
MAX_POINTS_OF_INTEREST: int = 10

# Matching limits
MATCH_RESULT_LIMIT: int = 5
SEARCH_RESULT_LIMIT_MAX: int = 10
WEBSET_MAX_CRITERIA: int = 5  # goal + 4 points

# Webset polling: 20 attempts * 3 seconds = 60 seconds max wait
WEBSET_POLL_INTERVAL_SECONDS: float = 3.0
WEBSET_MAX_POLL_ATTEMPTS: int = 20
WEBSET_EARLY_EXIT_ATTEMPTS: int = 15
WEBSET_EARLY_EXIT_MIN_FOUND: int = 3

# Shared response headers; built once, never mutated
CORS_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }
)


class Settings(BaseModel):
    """Typed, immutable view of the environment handed to the Dispatcher."""

    model_config = ConfigDict(frozen=True)

    exa_api_key: str = ""
    exa_base_url: str = "https://api.exa.ai"
    openai_api_key: str = ""
    openai_base_url: str = ""
    model_name: str = "gpt-4o-mini"
    people_search_api_key: str = ""
    people_search_url: str = "https://search.clado.ai/api/search"
    search_backend: str = "webset"

    crawl_timeout_seconds: float = CRAWL_TIMEOUT_SECONDS
    inference_timeout_seconds: float = INFERENCE_TIMEOUT_SECONDS
    search_timeout_seconds: float = SEARCH_TIMEOUT_SECONDS
    poll_timeout_seconds: float = POLL_TIMEOUT_SECONDS

    poll_interval_seconds: float = WEBSET_POLL_INTERVAL_SECONDS
    max_poll_attempts: int = WEBSET_MAX_POLL_ATTEMPTS
    early_exit_attempts: int = WEBSET_EARLY_EXIT_ATTEMPTS
    early_exit_min_found: int = WEBSET_EARLY_EXIT_MIN_FOUND

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the module-level constants loaded above."""
        return cls(
            exa_api_key=EXA_API_KEY,
            exa_base_url=EXA_BASE_URL,
            openai_api_key=OPENAI_API_KEY,
            openai_base_url=OPENAI_BASE_URL,
            model_name=MODEL_NAME,
            people_search_api_key=PEOPLE_SEARCH_API_KEY,
            people_search_url=PEOPLE_SEARCH_URL,
            search_backend=SEARCH_BACKEND,
        )

    def require(self, *names: str) -> None:
        """Raise ConfigurationError naming every listed field that is empty."""
        missing = [n for n in names if not str(getattr(self, n, "") or "").strip()]
        if missing:
            raise ConfigurationError(
                "Missing required configuration: " + ", ".join(n.upper() for n in missing)
            )
        if self.search_backend not in SEARCH_BACKENDS:
            raise ConfigurationError(
                f"SEARCH_BACKEND must be one of {', '.join(SEARCH_BACKENDS)}; got '{self.search_backend}'"
            )
