"""Compose warehouse assignment and rate synthesis for one checkout.

The carrier-service protocol has no error channel, so any lookup-level
failure degrades to an empty rate list instead of an exception. Per-item
problems are already absorbed by warehouse assignment fallbacks.
"""

import asyncio
import logging
from collections.abc import Sequence

from src.errors import DomainError, InventoryLookupError
from src.services.rate_synthesis import calculate_shipping_rates
from src.services.shipping_models import CartItem, ShippingRate, WarehouseDataSource
from src.services.warehouse_assignment import FallbackCallback, group_items_by_warehouse

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


def normalize_currency(currency: object) -> str:
    """Accept a 3-letter code, otherwise USD."""
    if isinstance(currency, str) and len(currency) == 3:
        return currency
    return DEFAULT_CURRENCY


async def compute_shipping_rates(
    shop_domain: str,
    items: Sequence[CartItem],
    currency: str,
    source: WarehouseDataSource,
    deadline_seconds: float | None = None,
    on_fallback: FallbackCallback | None = None,
) -> list[ShippingRate]:
    """Rates for a cart, or [] whenever they cannot be computed safely.

    Args:
        shop_domain: Normalized myshopify domain.
        items: Shippable cart items.
        currency: Currency echoed on each rate.
        source: Shop state, inventory and location settings provider.
        deadline_seconds: Abort the whole computation after this long.
        on_fallback: Forwarded to warehouse assignment.

    Returns:
        Rates in wire order; [] for inactive shops, missing sessions,
        lookup failures, timeouts, or carts that map to no warehouse.
    """
    if not items:
        return []

    if not source.is_shop_active(shop_domain):
        logger.info("Shop %s is not active (app uninstalled), returning empty rates", shop_domain)
        return []

    try:
        grouping = group_items_by_warehouse(shop_domain, items, source, on_fallback)
        if deadline_seconds is not None:
            try:
                groups = await asyncio.wait_for(grouping, timeout=deadline_seconds)
            except TimeoutError as e:
                raise InventoryLookupError(
                    shop_domain, f"deadline of {deadline_seconds}s exceeded"
                ) from e
        else:
            groups = await grouping
    except DomainError as e:
        logger.error("Rate computation for %s failed [%s]: %s", shop_domain, e.code, e)
        return []

    if not groups:
        logger.warning("No warehouse groups found for shop %s", shop_domain)
        return []

    # Re-read flags; the shop may have been uninstalled mid-request
    flags = source.get_rate_flags(shop_domain)
    if flags is None or not flags.is_active:
        logger.info("Shop %s became inactive during processing, returning empty rates", shop_domain)
        return []

    return calculate_shipping_rates(
        groups,
        is_plus=flags.is_plus,
        show_breakdown=flags.show_breakdown,
        enable_split_shipping=flags.enable_split_shipping,
        currency=currency,
    )
