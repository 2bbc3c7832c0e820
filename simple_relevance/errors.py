"""Exceptions raised by the SimpleRelevance client.

Only local failures are raised here. Transport errors come straight from
requests, and non-2xx responses are handed back to the caller untouched.
"""

from typing import Any, Dict, Optional


class SimpleRelevanceError(Exception):
    """Base exception for client-side errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PayloadValidationError(SimpleRelevanceError, ValueError):
    """Raised when a payload is missing a required field or has a bad value.

    Always raised before any request is sent.
    """

    def __init__(self, field: str, reason: Optional[str] = None):
        message = f"{field} is required" if reason is None else f"{field}: {reason}"
        super().__init__(message=message, details={"field": field})
        self.field = field
        self.reason = reason


class UnknownOperationError(SimpleRelevanceError, ValueError):
    """Raised when call_api is given a name that is not a client operation."""

    def __init__(self, name: Any):
        super().__init__(
            message=f"Unknown operation '{name}'",
            details={"operation": str(name)},
        )


class ConfigurationError(SimpleRelevanceError):
    """Raised when client configuration cannot be built."""
