"""Agent exports."""

from .extractor_agent import parse_points_payload, run_extractor_agent
from .match_agent import WebsetPoller, find_matches_sync, find_matches_webset, map_profile

__all__ = [
    "run_extractor_agent",
    "parse_points_payload",
    "find_matches_sync",
    "find_matches_webset",
    "map_profile",
    "WebsetPoller",
]
