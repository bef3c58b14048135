"""Schema exports."""

from .matched_profile import MatchedProfile
from .point_of_interest import POINT_TYPES, CareerCriteria, PointOfInterest
from .search_job import AsyncSearchJob, JobStatus, PollState, SearchProgress
from .worker_request import AnalyzeRequest, FullRequest, MatchRequest, WorkerRequest

__all__ = [
    "POINT_TYPES",
    "PointOfInterest",
    "CareerCriteria",
    "MatchedProfile",
    "AnalyzeRequest",
    "MatchRequest",
    "FullRequest",
    "WorkerRequest",
    "AsyncSearchJob",
    "JobStatus",
    "PollState",
    "SearchProgress",
]
