"""Service layer for Cloudship.

Provides warehouse assignment, rate synthesis and the shop/location
services they read from.
"""

from src.services.rate_synthesis import calculate_shipping_rates, format_delivery_time
from src.services.shipping_models import (
    CartItem,
    InventoryLevel,
    LocationConfig,
    ShippingRate,
    WarehouseDataSource,
    WarehouseGroup,
)
from src.services.shipping_rate_service import compute_shipping_rates
from src.services.warehouse_assignment import assign_items, group_items_by_warehouse

__all__ = [
    "CartItem",
    "InventoryLevel",
    "LocationConfig",
    "ShippingRate",
    "WarehouseDataSource",
    "WarehouseGroup",
    "assign_items",
    "group_items_by_warehouse",
    "calculate_shipping_rates",
    "format_delivery_time",
    "compute_shipping_rates",
]
