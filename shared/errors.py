"""
Shared error handling for the Permify access layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AccessLayerException(Exception):
    """Base exception for access layer services."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class AccessDeniedError(AccessLayerException):
    """Raised when a request is refused by the permission gate.

    ``state`` names the gate outcome that produced the denial so callers can
    tell a missing tenant from a negative Permify decision without parsing
    the message.
    """

    status_code = 403

    def __init__(self, message: str = "Access denied", state: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.state = state
        details = dict(details or {})
        if state is not None:
            details.setdefault("state", getattr(state, "value", state))
        super().__init__("ACCESS_DENIED", message, details)


class ValidationError(AccessLayerException):
    """Validation-related errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ExternalServiceError(AccessLayerException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)
