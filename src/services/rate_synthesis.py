"""Rate synthesis: turn warehouse groups into checkout shipping rates.

Pure functions. Money is handled as Decimal and rounded half-up to whole
cents; prices leave this module as integer-cent strings.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from src.services.shipping_models import ShippingRate, WarehouseGroup

COMBINED_SERVICE_CODE = "cloudship_combined"
STANDARD_SERVICE_NAME = "Standard Shipping"
MULTI_WAREHOUSE_SERVICE_NAME = "Multi-Warehouse Shipping"
FAST_DELIVERY = "Fast delivery"

_CENT = Decimal("0.01")


def format_delivery_time(eta_min: int, eta_max: int) -> str:
    """Human-readable delivery window.

    >>> format_delivery_time(1, 1)
    'Arrives tomorrow'
    >>> format_delivery_time(3, 5)
    'Delivery in 3-5 days'
    """
    if eta_min <= 0:
        return FAST_DELIVERY
    if eta_min == 1 and eta_max == 1:
        return "Arrives tomorrow"
    if eta_min == 1:
        return f"Arrives in 1-{eta_max} days"
    return f"Delivery in {eta_min}-{eta_max} days"


def to_cents(amount: Decimal | int | float | str) -> str:
    """Round a currency amount to integer cents, encoded as a string."""
    cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return str(int(cents))


def format_money(amount: Decimal | int | float | str) -> str:
    """Format an amount with two decimals, e.g. ``7.25``."""
    return str(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def calculate_shipping_rates(
    warehouse_groups: Sequence[WarehouseGroup],
    is_plus: bool,
    show_breakdown: bool = True,
    enable_split_shipping: bool = False,
    currency: str = "USD",
) -> list[ShippingRate]:
    """Build the rates offered at checkout.

    Args:
        warehouse_groups: Groups from warehouse assignment, in priority order.
        is_plus: Shop plan supports split shipping.
        show_breakdown: List each warehouse in the combined rate description.
        enable_split_shipping: Merchant opted in to one rate per warehouse.
        currency: ISO 4217 code echoed on every rate.

    Returns:
        Rates in wire order. Empty when there are no groups.
    """
    if not warehouse_groups:
        return []

    if is_plus and enable_split_shipping:
        # Always split, even for a single group; the index keeps codes unique
        return [
            ShippingRate(
                service_name=_split_service_name(group),
                service_code=f"cloudship_{group.location_id}_opt{index}",
                total_price=to_cents(group.shipping_cost),
                description=format_delivery_time(group.eta_min, group.eta_max),
                currency=currency,
            )
            for index, group in enumerate(warehouse_groups)
        ]

    if len(warehouse_groups) == 1:
        group = warehouse_groups[0]
        return [
            ShippingRate(
                service_name=STANDARD_SERVICE_NAME,
                service_code=COMBINED_SERVICE_CODE,
                total_price=to_cents(group.shipping_cost),
                description=format_delivery_time(group.eta_min, group.eta_max),
                currency=currency,
            )
        ]

    total_cost = sum((Decimal(str(g.shipping_cost)) for g in warehouse_groups), Decimal("0"))

    if not show_breakdown:
        return [
            ShippingRate(
                service_name=STANDARD_SERVICE_NAME,
                service_code=COMBINED_SERVICE_CODE,
                total_price=to_cents(total_cost),
                description=FAST_DELIVERY,
                currency=currency,
            )
        ]

    headline = format_delivery_time(
        min(g.eta_min for g in warehouse_groups),
        max(g.eta_max for g in warehouse_groups),
    )
    breakdown = "\n".join(
        f"• {g.location_name} ({g.eta_min}-{g.eta_max} days): ${format_money(g.shipping_cost)}"
        for g in warehouse_groups
    )
    return [
        ShippingRate(
            service_name=MULTI_WAREHOUSE_SERVICE_NAME,
            service_code=COMBINED_SERVICE_CODE,
            total_price=to_cents(total_cost),
            description=f"{headline}\n{breakdown}",
            currency=currency,
        )
    ]


def _split_service_name(group: WarehouseGroup) -> str:
    count = group.item_count
    return f"{group.location_name} - {count} item{'s' if count > 1 else ''}"
