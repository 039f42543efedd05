"""Shopify webhook receivers.

app/uninstalled deactivates the shop before anything else so that rate
requests stop immediately, then deletes its location settings.
shop/update keeps the split-shipping plan flag in step with the shop's
Shopify plan.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from src.api.dependencies import get_config
from src.config import CloudshipConfig
from src.db.connection import get_db
from src.services.shop_service import ShopService, normalize_shop_domain
from src.services.shopify_signatures import verify_webhook

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


async def _verified_webhook(request: Request, config: CloudshipConfig) -> tuple[str, bytes]:
    """Return (normalized shop domain, raw body) for a correctly signed webhook.

    Raises:
        HTTPException: 400 without a shop header, 401 on a bad signature.
    """
    shop_header = request.headers.get("X-Shopify-Shop-Domain", "")
    if not shop_header:
        raise HTTPException(status_code=400, detail="Shop header is required")

    body = await request.body()
    if not verify_webhook(
        body, request.headers.get("X-Shopify-Hmac-Sha256"), config.shopify.api_secret
    ):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    return normalize_shop_domain(shop_header), body


@router.post("/app/uninstalled")
async def app_uninstalled(
    request: Request,
    db: Session = Depends(get_db),
    config: CloudshipConfig = Depends(get_config),
) -> dict:
    """Handle the app/uninstalled webhook."""
    shop_domain, _ = await _verified_webhook(request, config)
    service = ShopService(db)

    # Deactivate and commit first so concurrent rate requests stop at once
    shop = service.deactivate(shop_domain)
    db.commit()
    if shop is None:
        logger.warning("Uninstall webhook for unknown shop %s", shop_domain)
        return {"success": True}

    try:
        service.purge_location_settings(shop)
        db.commit()
    except Exception as e:
        # Shop is already inactive; leftover settings are inert
        db.rollback()
        logger.error("Error deleting settings for %s: %s", shop_domain, e)

    logger.info("App uninstalled for %s", shop_domain)
    return {"success": True}


@router.post("/shop/update")
async def shop_update(
    request: Request,
    db: Session = Depends(get_db),
    config: CloudshipConfig = Depends(get_config),
) -> dict:
    """Handle the shop/update webhook: refresh the split-shipping plan flag."""
    shop_domain, body = await _verified_webhook(request, config)

    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid webhook body")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid webhook body")

    shop = ShopService(db).set_plan(shop_domain, payload.get("plan_name"))
    db.commit()
    if shop is None:
        logger.warning("Shop update webhook for unknown shop %s", shop_domain)

    return {"success": True}
