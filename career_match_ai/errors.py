"""Failure taxonomy for the request pipeline. Every error is terminal for its request."""

from typing import Optional


class PipelineError(Exception):
    """Base class for failures rendered as ``{"error": message}`` by the Dispatcher."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RequestValidationError(PipelineError):
    """Malformed or missing request fields. Raised before any network call."""

    status_code = 400


class ConfigurationError(PipelineError):
    """A required setting is missing or invalid."""


class CrawlFailure(PipelineError):
    """The crawling service returned no usable text."""


class ExtractionFailure(PipelineError):
    """Model output was unparsable or no valid points survived filtering."""


class MatchTimeout(PipelineError):
    """Webset polling was exhausted without finding any result."""


class StageTimeout(PipelineError):
    """A single external call exceeded its deadline."""


class UpstreamError(PipelineError):
    """
    Non-2xx response from an external service.

    Attributes:
        service: Short service label (e.g. 'Exa contents')
        status: HTTP status code returned upstream
        body: Response body text, truncated
    """

    def __init__(self, service: str, status: int, body: Optional[str] = None):
        self.service = service
        self.status = status
        self.body = (body or "")[:1000]
        super().__init__(f"{service} error: {status} - {self.body}")
