"""Warehouse assignment: partition cart items across a shop's locations.

Each item goes to the highest-priority location that has it in stock.
Items with no stocked location (or whose inventory data cannot be matched)
fall back to the shop's preferred configured location, so that one bad
line never blocks the whole checkout.

Every fallback is logged with structured ``extra`` fields and reported to
an optional ``on_fallback`` callback.
"""

import logging
from collections.abc import Callable, Iterable, Sequence

from src.errors import SessionUnavailableError, ShopNotActiveError
from src.services.shipping_models import (
    DEFAULT_ETA_MAX,
    DEFAULT_ETA_MIN,
    DEFAULT_SHIPPING_COST,
    UNCONFIGURED_PRIORITY,
    CartItem,
    FallbackEvent,
    InventoryLevel,
    LocationConfig,
    WarehouseDataSource,
    WarehouseGroup,
)

logger = logging.getLogger(__name__)

FallbackCallback = Callable[[FallbackEvent], None]

FALLBACK_NO_INVENTORY = "no_inventory"
FALLBACK_ITEM_ERROR = "item_error"


async def group_items_by_warehouse(
    shop_domain: str,
    items: Sequence[CartItem],
    source: WarehouseDataSource,
    on_fallback: FallbackCallback | None = None,
) -> list[WarehouseGroup]:
    """Fetch inventory and location settings, then assign every item.

    Args:
        shop_domain: Normalized myshopify domain.
        items: Cart items; an empty sequence returns [] without any lookups.
        source: Provider of shop state, inventory and location settings.
        on_fallback: Called once per item assigned by fallback.

    Returns:
        Warehouse groups sorted by location priority.

    Raises:
        ShopNotActiveError: Shop is unknown or uninstalled.
        SessionUnavailableError: No Admin API session for the shop.
        InventoryLookupError: The bulk inventory lookup failed.
    """
    if not items:
        return []

    if not source.is_shop_active(shop_domain):
        raise ShopNotActiveError(shop_domain)
    if not source.has_session(shop_domain):
        raise SessionUnavailableError(shop_domain)

    variant_ids = list(dict.fromkeys(item.variant_id for item in items))
    inventory = await source.fetch_inventory(shop_domain, variant_ids)
    # Empty only when Shopify returned no variant nodes at all; unknown
    # variants map to [] and fall back below.
    if not inventory:
        logger.warning(
            "No inventory returned for %d variant(s) of shop %s",
            len(variant_ids),
            shop_domain,
        )
        return []

    settings = source.fetch_active_location_settings(shop_domain)
    return assign_items(shop_domain, items, inventory, settings, on_fallback)


def assign_items(
    shop_domain: str,
    items: Iterable[CartItem],
    inventory: dict[str, list[InventoryLevel]],
    settings: Sequence[LocationConfig],
    on_fallback: FallbackCallback | None = None,
) -> list[WarehouseGroup]:
    """Assign items to locations from already-fetched data.

    Pure over its inputs apart from logging and the fallback callback.
    Each item lands in exactly one group, or in none when it has no stocked
    location and the shop has no configured location at all.
    """
    by_location: dict[str, LocationConfig] = {}
    for setting in settings:
        by_location.setdefault(setting.shopify_location_id, setting)

    def priority_of(location_id: str) -> int:
        setting = by_location.get(location_id)
        return setting.priority if setting is not None else UNCONFIGURED_PRIORITY

    default_location = min(settings, key=lambda s: s.priority) if settings else None
    groups: dict[str, WarehouseGroup] = {}

    def place(item: CartItem, location_id: str, location_name: str) -> None:
        group = groups.get(location_id)
        if group is None:
            group = _new_group(location_id, location_name, by_location.get(location_id))
            groups[location_id] = group
        group.items.append(item)

    for item in items:
        try:
            level = _select_level(inventory.get(item.variant_id) or [], priority_of)
            reason = FALLBACK_NO_INVENTORY
        except Exception as e:
            logger.error(
                "Error matching inventory for variant %s (shop %s): %s",
                item.variant_id,
                shop_domain,
                e,
            )
            level = None
            reason = FALLBACK_ITEM_ERROR

        if level is not None:
            place(item, level.location_id, level.location_name)
            continue

        event = FallbackEvent(
            shop_domain=shop_domain,
            variant_id=item.variant_id,
            location_id=default_location.shopify_location_id if default_location else None,
            reason=reason,
        )
        _report_fallback(event, on_fallback)
        if default_location is not None:
            place(item, default_location.shopify_location_id, default_location.location_name)

    # sorted() is stable: equal priorities keep first-seen order
    return sorted(groups.values(), key=lambda g: priority_of(g.location_id))


def _select_level(
    levels: list[InventoryLevel], priority_of: Callable[[str], int]
) -> InventoryLevel | None:
    """Return the preferred location holding stock, or None."""
    in_stock = [
        level for level in levels
        if level.available is not None and level.available > 0
    ]
    if not in_stock:
        return None
    in_stock.sort(key=lambda level: priority_of(level.location_id))
    return in_stock[0]


def _new_group(
    location_id: str, location_name: str, setting: LocationConfig | None
) -> WarehouseGroup:
    if setting is None:
        return WarehouseGroup(
            location_id=location_id,
            location_name=location_name,
            shipping_cost=DEFAULT_SHIPPING_COST,
            eta_min=DEFAULT_ETA_MIN,
            eta_max=DEFAULT_ETA_MAX,
        )
    return WarehouseGroup(
        location_id=location_id,
        location_name=location_name,
        shipping_cost=setting.shipping_cost,
        eta_min=setting.eta_min,
        eta_max=setting.eta_max,
    )


def _report_fallback(event: FallbackEvent, on_fallback: FallbackCallback | None) -> None:
    if event.location_id is None:
        logger.warning(
            "Variant %s of shop %s has no stocked or configured location; left unassigned",
            event.variant_id,
            event.shop_domain,
            extra={
                "shop_domain": event.shop_domain,
                "variant_id": event.variant_id,
                "fallback_location_id": None,
                "fallback_reason": event.reason,
            },
        )
    else:
        logger.warning(
            "Variant %s of shop %s assigned to fallback location %s (%s)",
            event.variant_id,
            event.shop_domain,
            event.location_id,
            event.reason,
            extra={
                "shop_domain": event.shop_domain,
                "variant_id": event.variant_id,
                "fallback_location_id": event.location_id,
                "fallback_reason": event.reason,
            },
        )
    if on_fallback is not None:
        on_fallback(event)
