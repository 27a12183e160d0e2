"""
Error taxonomy for the quota gate.

Every error that may reach a client carries the HTTP status it maps to and a
user-facing message. Internal details (upstream payloads, stack traces) are
logged by the raising code and never placed in the message.
"""

from typing import Any, Dict, Optional


class QuotaGateError(Exception):
    """Base class for errors rendered as a JSON error body."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        body = {"error": self.message}
        body.update(self.payload)
        return body


class ValidationError(QuotaGateError):
    """Malformed code, prompt or messages."""
    status_code = 400


class AuthorizationError(QuotaGateError):
    """Unknown origin, missing premium entitlement or unauthorized tier claim."""
    status_code = 403


class QuotaExceededError(QuotaGateError):
    """Burst or weekly cap hit."""
    status_code = 429

    def __init__(self, message: str, limit: Optional[int], retry_after: Optional[int] = None):
        super().__init__(message, payload={"remaining": 0, "limit": limit})
        self.limit = limit
        self.retry_after = retry_after


class ConfigurationError(QuotaGateError):
    """A required credential, secret or allow-list is missing."""
    status_code = 500


class UpstreamError(QuotaGateError):
    """The text-generation service failed."""
    status_code = 502


class ServiceUnavailableError(QuotaGateError):
    """A dependency required to complete the request is unreachable."""
    status_code = 503


class StoreUnavailableError(Exception):
    """Raised by the remote transport; converted to UNAVAILABLE at the store boundary."""
