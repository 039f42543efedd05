"""Error handling framework for Cloudship.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions carrying those codes

Error categories:
- E-1xxx: Shop and session errors
- E-2xxx: Validation errors
- E-3xxx: Shopify API errors
- E-4xxx: System/internal errors
"""

from src.errors.domain import (
    DomainError,
    InvalidDeliveryWindowError,
    InventoryLookupError,
    LocationLookupError,
    NotFoundError,
    RateLimitExceededError,
    SessionUnavailableError,
    ShopNotActiveError,
    ValidationError,
)
from src.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    ErrorCode,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "get_error",
    "get_errors_by_category",
    # Domain exceptions
    "DomainError",
    "ShopNotActiveError",
    "SessionUnavailableError",
    "NotFoundError",
    "ValidationError",
    "InvalidDeliveryWindowError",
    "InventoryLookupError",
    "LocationLookupError",
    "RateLimitExceededError",
]
