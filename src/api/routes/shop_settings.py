"""API routes for the shop's rate display settings.

Provides GET/PUT for show_breakdown and enable_split_shipping; is_plus is
reported but only changes with the merchant's plan.
All endpoints use /api/v1/shop prefix.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import AdminContext, require_admin_shop
from src.api.schemas import ShopSettingsPatch, ShopSettingsResponse
from src.services.shop_service import ShopService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shop", tags=["shop"])


@router.get("/settings", response_model=ShopSettingsResponse)
def get_shop_settings(
    ctx: AdminContext = Depends(require_admin_shop),
) -> ShopSettingsResponse:
    """Get the shop's rate display settings."""
    return ShopSettingsResponse.model_validate(ctx.shop)


@router.put("/settings", response_model=ShopSettingsResponse)
def update_shop_settings(
    data: ShopSettingsPatch,
    ctx: AdminContext = Depends(require_admin_shop),
) -> ShopSettingsResponse:
    """Update rate display settings (patch semantics)."""
    updates = {k: v for k, v in data.model_dump().items() if v is not None}
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        shop = ShopService(ctx.db).update_settings(ctx.shop.shop_domain, updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    ctx.db.commit()
    logger.info("Updated rate settings for %s: %s", shop.shop_domain, sorted(updates))
    return ShopSettingsResponse.model_validate(shop)
