"""Service exports."""

from .contents_service import crawl_profile, extract_profile_text
from .http_client import check_response, new_client
from .inference_service import InferenceService, OpenAIInferenceService, response_text
from .people_search import search_people
from .webset_service import create_webset, get_webset, list_webset_items

__all__ = [
    "crawl_profile",
    "extract_profile_text",
    "check_response",
    "new_client",
    "InferenceService",
    "OpenAIInferenceService",
    "response_text",
    "search_people",
    "create_webset",
    "get_webset",
    "list_webset_items",
]
