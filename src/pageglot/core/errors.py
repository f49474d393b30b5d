# src/pageglot/core/errors.py
from typing import Any, Dict, List, Optional


class PipelineError(Exception):
    """
    Base class for every failure that aborts a translation request.

    Each subclass knows the HTTP status it maps to and how to render itself
    as a JSON body for the API layer.
    """
    http_status = 500
    title = "Failed to translate webpage"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.title, "details": self.details}


class ValidationError(PipelineError):
    """Request rejected before any network access."""
    http_status = 400
    title = "Invalid input"


class NetworkError(PipelineError):
    """Timeout or connection failure while fetching the page."""


class AccessDenied(PipelineError):
    """Upstream refused automated access (HTTP 403)."""
    http_status = 403
    title = "Access Denied"

    def __init__(self, url: str, test_urls: List[str]):
        super().__init__(
            f"Upstream refused access to {url}",
            "This website doesn't allow automated access. Try one of these test URLs instead:",
        )
        self.url = url
        self.test_urls = list(test_urls)

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["testUrls"] = self.test_urls
        return body


class UpstreamError(PipelineError):
    """Non-2xx or otherwise unusable upstream response."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.status is not None:
            body["status"] = self.status
        return body


class InternalError(PipelineError):
    """Parse, transform or persistence failure inside the pipeline."""
