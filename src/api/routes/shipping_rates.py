"""Carrier-calculated shipping callback.

Shopify calls POST /api/shipping-rates at checkout. The protocol has no
error channel: every outcome, including bad signatures, malformed bodies
and internal failures, is answered with HTTP 200 and ``{"rates": [...]}``
(possibly empty) so that checkout never breaks.
"""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from src.api.dependencies import get_config
from src.api.schemas import (
    CarrierRateItem,
    CarrierRatePayload,
    ShippingRateOut,
    ShippingRatesResponse,
)
from src.config import CloudshipConfig
from src.db.connection import get_db
from src.services.shipping_models import CartItem
from src.services.shipping_rate_service import compute_shipping_rates, normalize_currency
from src.services.shop_service import normalize_shop_domain
from src.services.shopify_signatures import verify_app_proxy_request
from src.services.warehouse_data_source import ShopifyWarehouseDataSource

logger = logging.getLogger(__name__)

router = APIRouter(tags=["shipping-rates"])


def to_cart_items(items: list[CarrierRateItem]) -> list[CartItem]:
    """Keep shippable lines with a variant; quantity is at least 1."""
    return [
        CartItem(
            variant_id=str(item.variant_id),
            quantity=max(item.quantity or 1, 1),
            product_id=str(item.product_id) if item.product_id else None,
        )
        for item in items
        if item.variant_id and item.requires_shipping
    ]


@router.post("/shipping-rates", response_model=ShippingRatesResponse)
async def shipping_rates(
    request: Request,
    db: Session = Depends(get_db),
    config: CloudshipConfig = Depends(get_config),
) -> ShippingRatesResponse:
    """Compute rates for the cart in the callback body."""
    try:
        return await _handle(request, db, config)
    except Exception:
        logger.exception("Unexpected error in shipping rates endpoint")
        return ShippingRatesResponse()


async def _handle(
    request: Request, db: Session, config: CloudshipConfig
) -> ShippingRatesResponse:
    query = {key: request.query_params.getlist(key) for key in request.query_params.keys()}
    if not verify_app_proxy_request(query, config.shopify.api_secret):
        logger.warning("Unauthorized shipping rate request")
        return ShippingRatesResponse()

    shop_domain = normalize_shop_domain(request.query_params.get("shop", ""))
    if not shop_domain:
        logger.warning("Missing shop parameter in shipping rate request")
        return ShippingRatesResponse()

    try:
        payload = CarrierRatePayload.model_validate(await request.json())
    except (ValueError, PydanticValidationError) as e:
        logger.warning("Invalid request body for shop %s: %s", shop_domain, e)
        return ShippingRatesResponse()

    items = to_cart_items(payload.rate.items)
    if not items:
        return ShippingRatesResponse()

    source = ShopifyWarehouseDataSource(
        db,
        api_version=config.shopify.api_version,
        timeout=config.shopify.request_timeout_seconds,
    )
    rates = await compute_shipping_rates(
        shop_domain,
        items,
        normalize_currency(payload.rate.currency),
        source,
        deadline_seconds=config.shopify.rate_deadline_seconds,
    )
    return ShippingRatesResponse(
        rates=[ShippingRateOut(**rate.to_wire()) for rate in rates]
    )
