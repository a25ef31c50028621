"""
Exception hierarchy for xaiflow.

Client methods raise these; the workflow orchestrators catch remote failures
at their boundary and turn them into state.
"""

from typing import Any, Optional


class XaiflowError(Exception):
    """Base class for every error raised by xaiflow."""


class ModelServiceError(XaiflowError):
    """Raised when the model service returns an error or is unreachable."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
        service_message: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.body = body
        # The "message" field of the error body, if the service sent one
        self.service_message = service_message
        super().__init__(message)


class AuthenticationError(ModelServiceError):
    """401 from the service. Re-login is handled outside the workflow."""


class WorkflowValidationError(XaiflowError, ValueError):
    """A local validation rule rejected the request; no network call was made."""


class FeatureSelectionError(WorkflowValidationError):
    """Illegal feature toggle (no target yet, target itself, or unknown column)."""
