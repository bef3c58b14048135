"""Utility exports."""

from .helpers import is_linkedin_url, join_nonempty, truncate_text
from .logger import get_logger
from .timeout_guard import guard

__all__ = [
    "get_logger",
    "guard",
    "is_linkedin_url",
    "join_nonempty",
    "truncate_text",
]
