"""Error handling framework for the ShipRelay proxy.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions mapped to HTTP status codes

Error categories:
- E-2xxx: Validation errors
- E-3xxx: ShipRelay API errors
- E-4xxx: System/internal errors
- E-5xxx: Authentication errors
"""

from src.errors.domain import (
    DomainError,
    NotFoundError,
    UpstreamAPIError,
    UpstreamAuthError,
    UpstreamProtocolError,
    UpstreamUnavailableError,
    ValidationError,
)
from src.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    ErrorCode,
    format_message,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "format_message",
    "get_error",
    "get_errors_by_category",
    # Domain exceptions
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "UpstreamAuthError",
    "UpstreamAPIError",
    "UpstreamProtocolError",
    "UpstreamUnavailableError",
]
