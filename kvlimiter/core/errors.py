"""Application-level exception types.

Domain errors shared by the limiter core, the store backends and the HTTP
layer. Every error carries a stable ``code`` so handlers and tests can match
on it without parsing messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    field: str
    backend: str
    http_status: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class ConfigurationAppError(AppError):
    """Raised when the service's own settings are invalid or incomplete."""


class StoreAppError(AppError):
    """Raised by KV store backends when a read or write cannot complete."""


class InvalidConfigurationError(ValidationAppError):
    """Raised when limiter options violate a constraint."""

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(
            code="invalid_configuration",
            message=message,
            details={"field": field},
        )


class InvalidKeyError(ValidationAppError):
    """Raised when a limiter key is not a non-empty string."""

    def __init__(self, message: str = "key must be a non-empty string") -> None:
        super().__init__(code="invalid_key", message=message)
