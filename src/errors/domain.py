"""Typed domain exceptions for API error mapping.

Every exception carries an E-XXXX code from the registry so that routes can
render a consistent body and status without matching on message strings.

Usage:
    # In service layer
    raise ShopNotActiveError(shop_domain)

    # In the carrier-service route
    try:
        rates = await compute_shipping_rates(...)
    except DomainError:
        return {"rates": []}
"""

from src.errors.registry import get_error


class DomainError(Exception):
    """Base exception for all domain errors."""

    code = "E-2001"

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    @property
    def http_status(self) -> int:
        """HTTP status for admin routes, taken from the registry."""
        error_def = get_error(self.code)
        return error_def.http_status if error_def else 400

    @property
    def remediation(self) -> str:
        error_def = get_error(self.code)
        return error_def.remediation if error_def else "Contact support."


class ShopNotActiveError(DomainError):
    """Shop is unknown or uninstalled. Maps to HTTP 403."""

    code = "E-1001"

    def __init__(self, shop_domain: str) -> None:
        super().__init__(
            f"Shop '{shop_domain}' is not installed or has been uninstalled.",
            shop_domain=shop_domain,
        )
        self.shop_domain = shop_domain


class SessionUnavailableError(DomainError):
    """No authenticated Shopify session for the shop. Maps to HTTP 401."""

    code = "E-1002"

    def __init__(self, shop_domain: str) -> None:
        super().__init__(
            f"No authenticated Shopify session for shop '{shop_domain}'.",
            shop_domain=shop_domain,
        )
        self.shop_domain = shop_domain


class NotFoundError(DomainError):
    """Resource was not found. Maps to HTTP 404."""

    code = "E-1003"

    def __init__(self, resource_type: str, identifier: str) -> None:
        super().__init__(
            f"{resource_type} '{identifier}' not found",
            resource_type=resource_type,
            identifier=identifier,
        )
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(DomainError):
    """Validation failure. Maps to HTTP 400."""

    code = "E-2001"


class InvalidDeliveryWindowError(ValidationError):
    """eta_max is below eta_min."""

    code = "E-2002"

    def __init__(self, eta_min: int, eta_max: int) -> None:
        super().__init__(
            f"eta_max ({eta_max}) must be greater than or equal to eta_min ({eta_min}).",
            eta_min=eta_min,
            eta_max=eta_max,
        )


class InventoryLookupError(DomainError):
    """Inventory lookup against Shopify failed as a whole. Maps to HTTP 502."""

    code = "E-3001"

    def __init__(self, shop_domain: str, details: str) -> None:
        super().__init__(
            f"Inventory lookup failed for shop '{shop_domain}': {details}",
            shop_domain=shop_domain,
            details=details,
        )
        self.shop_domain = shop_domain


class LocationLookupError(DomainError):
    """Listing Shopify locations failed. Maps to HTTP 502."""

    code = "E-3002"

    def __init__(self, shop_domain: str, details: str) -> None:
        super().__init__(
            f"Could not list locations for shop '{shop_domain}': {details}",
            shop_domain=shop_domain,
            details=details,
        )
        self.shop_domain = shop_domain


class RateLimitExceededError(DomainError):
    """Per-shop admin request budget exhausted. Maps to HTTP 429."""

    code = "E-4001"

    def __init__(self, shop_domain: str, retry_after: int) -> None:
        super().__init__(
            f"Too many requests for shop '{shop_domain}'.",
            shop_domain=shop_domain,
            retry_after=retry_after,
        )
        self.retry_after = retry_after
