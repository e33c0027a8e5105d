"""
Error taxonomy for the analyze pipeline.

Every error is terminal for the request. Each one knows the HTTP status it
maps to, and its message is returned to the caller verbatim:

    {"error": "<message>"}
"""

from typing import Any, Dict, Optional


class DealCheckError(Exception):
    """Base class for all pipeline errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(DealCheckError):
    """Missing or invalid request input. Raised before any network call."""

    status_code = 400


class FetchError(DealCheckError):
    """Listing page unreachable or returned a non-2xx status."""

    def __init__(self, message: str = "Failed to fetch listing"):
        super().__init__(message)


class ExtractionError(DealCheckError):
    """Page was fetched but neither a title nor a price could be found."""

    def __init__(
        self,
        message: str = "Could not extract listing data. The listing may be unavailable.",
    ):
        super().__init__(message)


class ModelConfigError(DealCheckError):
    """Model provider credentials are missing."""


class ModelError(DealCheckError):
    """Base class for model call failures."""


class ModelCallError(ModelError):
    """Completion endpoint returned a non-2xx status or could not be reached."""


class NoAnalysisError(ModelError):
    """Completion endpoint answered but the reply had no text."""

    def __init__(self, message: str = "No analysis generated"):
        super().__init__(message)
