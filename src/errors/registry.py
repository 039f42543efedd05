"""Error code registry with E-XXXX format codes.

This module defines the error code system for Cloudship, organizing errors
into categories:
- E-1xxx: Shop and session errors
- E-2xxx: Validation errors
- E-3xxx: Shopify API errors
- E-4xxx: System/internal errors

Each error includes a code, title, message template, and remediation steps.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    SHOP = "shop"  # E-1xxx: Shop and session errors
    VALIDATION = "validation"  # E-2xxx: Validation errors
    SHOPIFY_API = "shopify_api"  # E-3xxx: Shopify API errors
    SYSTEM = "system"  # E-4xxx: System/internal errors


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for display.
        message_template: Message with {placeholders} for context.
        remediation: Action the merchant should take to resolve.
        http_status: Status code used when the error reaches an admin route.
        is_retryable: Whether the operation can be retried without user action.
    """

    code: str
    category: ErrorCategory
    title: str
    message_template: str
    remediation: str
    http_status: int = 400
    is_retryable: bool = False


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Shop and session errors (E-1xxx)
    "E-1001": ErrorCode(
        code="E-1001",
        category=ErrorCategory.SHOP,
        title="Shop Not Active",
        message_template="Shop '{shop_domain}' is not installed or has been uninstalled.",
        remediation="Reinstall the app from the Shopify admin.",
        http_status=403,
    ),
    "E-1002": ErrorCode(
        code="E-1002",
        category=ErrorCategory.SHOP,
        title="Session Unavailable",
        message_template="No authenticated Shopify session for shop '{shop_domain}'.",
        remediation="Open the app from the Shopify admin to re-authenticate.",
        http_status=401,
    ),
    "E-1003": ErrorCode(
        code="E-1003",
        category=ErrorCategory.SHOP,
        title="Resource Not Found",
        message_template="{resource_type} '{identifier}' not found.",
        remediation="Refresh the page and try again.",
        http_status=404,
    ),
    # Validation errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.VALIDATION,
        title="Invalid Request",
        message_template="{details}",
        remediation="Correct the request and retry.",
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        category=ErrorCategory.VALIDATION,
        title="Invalid Delivery Window",
        message_template="eta_max ({eta_max}) must be greater than or equal to eta_min ({eta_min}).",
        remediation="Set the maximum delivery days to at least the minimum.",
    ),
    # Shopify API errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.SHOPIFY_API,
        title="Inventory Lookup Failed",
        message_template="Inventory lookup failed for shop '{shop_domain}': {details}",
        remediation="Wait a few minutes and retry. Check Shopify status if the issue persists.",
        http_status=502,
        is_retryable=True,
    ),
    "E-3002": ErrorCode(
        code="E-3002",
        category=ErrorCategory.SHOPIFY_API,
        title="Location Lookup Failed",
        message_template="Could not list locations for shop '{shop_domain}': {details}",
        remediation="Verify the app has the read_locations scope, then retry.",
        http_status=502,
        is_retryable=True,
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Rate Limit Exceeded",
        message_template="Too many requests for shop '{shop_domain}'.",
        remediation="Wait a minute and retry.",
        http_status=429,
        is_retryable=True,
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all errors in a category."""
    return [e for e in ERROR_REGISTRY.values() if e.category == category]
