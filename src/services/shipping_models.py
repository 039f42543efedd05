"""Shared types for warehouse assignment and rate synthesis.

Neutral module with no DB or HTTP imports. The assignment and synthesis
functions only see these types, so they can be exercised without a
database or a Shopify store.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol, runtime_checkable

# Priority used for inventory locations the merchant never configured.
UNCONFIGURED_PRIORITY = 999

# Shipping terms applied to a group whose location has no setting.
DEFAULT_SHIPPING_COST = Decimal("0")
DEFAULT_ETA_MIN = 1
DEFAULT_ETA_MAX = 2


@dataclass(frozen=True)
class CartItem:
    """One shippable line of the checkout cart."""

    variant_id: str
    quantity: int = 1
    product_id: str | None = None


@dataclass(frozen=True)
class InventoryLevel:
    """Stock of one variant at one Shopify location."""

    location_id: str
    location_name: str
    available: int | None  # None when Shopify omitted the quantity


@dataclass(frozen=True)
class LocationConfig:
    """Read-only snapshot of a LocationSetting row."""

    shopify_location_id: str
    location_name: str
    shipping_cost: Decimal = DEFAULT_SHIPPING_COST
    eta_min: int = DEFAULT_ETA_MIN
    eta_max: int = DEFAULT_ETA_MAX
    priority: int = 0
    is_active: bool = True


@dataclass
class WarehouseGroup:
    """Cart items shipped together from a single location."""

    location_id: str
    location_name: str
    items: list[CartItem] = field(default_factory=list)
    shipping_cost: Decimal = DEFAULT_SHIPPING_COST
    eta_min: int = DEFAULT_ETA_MIN
    eta_max: int = DEFAULT_ETA_MAX

    @property
    def item_count(self) -> int:
        """Total units in the group (sum of quantities)."""
        return sum(item.quantity for item in self.items)


@dataclass(frozen=True)
class ShippingRate:
    """Rate record in the carrier-calculated shipping wire format.

    total_price is integer cents encoded as a string.
    """

    service_name: str
    service_code: str
    total_price: str
    description: str
    currency: str

    def to_wire(self) -> dict[str, str]:
        """Serialize with the exact field names Shopify expects."""
        return {
            "service_name": self.service_name,
            "service_code": self.service_code,
            "total_price": self.total_price,
            "description": self.description,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class RateFlags:
    """Per-shop switches that shape rate synthesis."""

    is_active: bool
    is_plus: bool = False
    show_breakdown: bool = True
    enable_split_shipping: bool = False


@dataclass(frozen=True)
class FallbackEvent:
    """An item assigned by fallback instead of by inventory match."""

    shop_domain: str
    variant_id: str
    location_id: str | None
    reason: str


@runtime_checkable
class WarehouseDataSource(Protocol):
    """Capabilities the shipping-rate core reads from the outside world."""

    def is_shop_active(self, shop_domain: str) -> bool:
        """Return False for unknown or uninstalled shops."""
        ...

    def has_session(self, shop_domain: str) -> bool:
        """Return True when an Admin API session can be resolved."""
        ...

    async def fetch_inventory(
        self, shop_domain: str, variant_ids: list[str]
    ) -> dict[str, list[InventoryLevel]]:
        """Map variant ID to its inventory levels.

        {} only when Shopify returned no variants at all; unknown variants
        map to []. Raises InventoryLookupError.
        """
        ...

    def fetch_active_location_settings(self, shop_domain: str) -> list[LocationConfig]:
        """Active location settings, ascending by priority."""
        ...

    def get_rate_flags(self, shop_domain: str) -> RateFlags | None:
        """Rate display flags, or None for an unknown shop."""
        ...
