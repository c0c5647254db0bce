"""Error code registry with E-XXXX format codes.

This module defines the error code system for the ShipRelay proxy,
organizing errors into categories:
- E-2xxx: Validation errors (bad caller input)
- E-3xxx: ShipRelay API errors
- E-4xxx: System/internal errors
- E-5xxx: Authentication errors

Each error includes a code, title, message template, and remediation steps.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    VALIDATION = "validation"  # E-2xxx: Validation errors
    SHIPRELAY_API = "shiprelay_api"  # E-3xxx: ShipRelay API errors
    SYSTEM = "system"  # E-4xxx: System/internal errors
    AUTH = "auth"  # E-5xxx: Authentication errors


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for display.
        message_template: Message with {placeholders} for context.
        remediation: Action user should take to resolve.
    """

    code: str  # E-XXXX format
    category: ErrorCategory
    title: str  # Short title for display
    message_template: str  # Message with {placeholders}
    remediation: str  # Action user should take


# Error registry - all defined error codes
ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Validation errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.VALIDATION,
        title="Invalid Order Reference",
        message_template="Missing or invalid order_ref parameter",
        remediation="order_ref must be a non-empty string.",
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        category=ErrorCategory.VALIDATION,
        title="Invalid Product ID",
        message_template="Invalid product id '{product_id}'",
        remediation="Product ids are numeric.",
    ),
    # ShipRelay API errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.SHIPRELAY_API,
        title="ShipRelay API Error",
        message_template="ShipRelay API error",
        remediation="Check the ShipRelay console for the shipment state and retry.",
    ),
    "E-3002": ErrorCode(
        code="E-3002",
        category=ErrorCategory.SHIPRELAY_API,
        title="No Shipments Found",
        message_template="No shipments found for order reference '{order_ref}'",
        remediation="Verify the order reference number.",
    ),
    "E-3003": ErrorCode(
        code="E-3003",
        category=ErrorCategory.SHIPRELAY_API,
        title="Product Not Found",
        message_template="Product '{product_id}' not found",
        remediation="Verify the product exists in ShipRelay.",
    ),
    "E-3004": ErrorCode(
        code="E-3004",
        category=ErrorCategory.SHIPRELAY_API,
        title="Invalid Upstream Response",
        message_template="Invalid response from ShipRelay",
        remediation="ShipRelay returned a non-JSON body; inspect 'raw' for details.",
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Upstream Unavailable",
        message_template="{action}",
        remediation="ShipRelay could not be reached. Retry shortly.",
    ),
    # Authentication errors (E-5xxx)
    "E-5001": ErrorCode(
        code="E-5001",
        category=ErrorCategory.AUTH,
        title="ShipRelay Login Failed",
        message_template="Failed to login to ShipRelay: {status}",
        remediation="Check SHIPRELAY_EMAIL and SHIPRELAY_PASSWORD.",
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Look up error code definition.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode definition if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all error codes in a category.

    Args:
        category: Error category to filter by.

    Returns:
        List of ErrorCode definitions in the category.
    """
    return [e for e in ERROR_REGISTRY.values() if e.category == category]


def format_message(code: str, **context: object) -> str:
    """Render the message template for a code.

    Missing placeholders leave the template untouched.

    Args:
        code: Error code in E-XXXX format.
        **context: Values substituted into the template.

    Returns:
        Formatted message, or a generic message for unknown codes.
    """
    error_def = get_error(code)
    if not error_def:
        return f"Unknown error: {code}"
    try:
        return error_def.message_template.format(**context)
    except KeyError:
        return error_def.message_template
