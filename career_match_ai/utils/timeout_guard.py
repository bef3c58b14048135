"""Deadline wrapper applied individually to every external call."""

import asyncio
from typing import Awaitable, TypeVar

from career_match_ai.errors import StageTimeout
from career_match_ai.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def guard(operation: Awaitable[T], deadline_seconds: float, message: str) -> T:
    """
    Race ``operation`` against a timer.
    On expiry the operation is cancelled (httpx aborts the in-flight request) and
    StageTimeout(message) is raised. Otherwise its result or exception passes through unchanged.
    """
    try:
        return await asyncio.wait_for(operation, timeout=deadline_seconds)
    except asyncio.TimeoutError:
        logger.warning("Deadline of %.1fs exceeded: %s", deadline_seconds, message)
        raise StageTimeout(message) from None
