"""Exception classes for the telemetry engine.

All custom exceptions inherit from ApplicationError to maintain a consistent
exception hierarchy across the codebase.

Exception classes support two patterns:
1. No-argument raise: raise NotFoundError()
2. Contextual attributes: err = NotFoundError(entity="client", entity_id="abc"); raise err
"""

from typing import Any, Optional


class ApplicationError(Exception):
    """Base exception for all application errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Application error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class TransportError(ApplicationError):
    """Network or HTTP failure while talking to the telemetry server."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: Optional[int] = None,
        status_text: str = "",
        **kwargs: Any,
    ) -> None:
        if not message:
            if status_code is not None:
                message = f"API error: {status_code} {status_text}".rstrip()
            else:
                message = "Network communication error"
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.status_text = status_text

    @classmethod
    def from_response(cls, status_code: int, status_text: Optional[str], url: str = "") -> "TransportError":
        """Create error for a non-2xx HTTP response."""
        return cls(status_code=status_code, status_text=status_text or "", url=url)


class NotFoundError(ApplicationError):
    """Entity is absent from the latest snapshot."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Entity is absent from the latest snapshot"
        super().__init__(message, **kwargs)


class ValidationError(ApplicationError):
    """Data validation failed."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Data validation failed"
        super().__init__(message, **kwargs)


class ConfigurationError(ApplicationError):
    """Configuration is invalid or missing."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Configuration is invalid or missing"
        super().__init__(message, **kwargs)


class SessionStateError(ApplicationError):
    """Config file session operation is not valid in the current state."""

    @classmethod
    def invalid_transition(cls, operation: str, state: str) -> "SessionStateError":
        """Create error for an operation attempted in the wrong state."""
        return cls(f"Cannot {operation} config file session in state {state}", operation=operation, state=state)


__all__ = [
    "ApplicationError",
    "TransportError",
    "NotFoundError",
    "ValidationError",
    "ConfigurationError",
    "SessionStateError",
]
