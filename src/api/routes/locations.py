"""API routes for warehouse locations and their shipping settings.

GET /locations lists the shop's Shopify locations and lazily mirrors them
into location settings. The /locations/settings endpoints manage the
per-location shipping cost, delivery window and priority.
All endpoints use /api/v1/locations prefix.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import AdminContext, get_config, require_admin_shop
from src.api.schemas import (
    LocationListResponse,
    LocationSettingCreate,
    LocationSettingListResponse,
    LocationSettingPatch,
    LocationSettingResponse,
)
from src.config import CloudshipConfig
from src.services.location_service import LocationService
from src.services.shopify_admin_client import ShopifyAdminClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])

READ_LOCATIONS_SCOPE = "read_locations"


@router.get("", response_model=LocationListResponse)
async def list_locations(
    ctx: AdminContext = Depends(require_admin_shop),
    config: CloudshipConfig = Depends(get_config),
) -> LocationListResponse:
    """List Shopify locations and sync them into settings."""
    if not ctx.session.has_scope(READ_LOCATIONS_SCOPE):
        logger.warning(
            "Session for %s is missing '%s'; re-auth required",
            ctx.shop.shop_domain,
            READ_LOCATIONS_SCOPE,
        )
        raise HTTPException(
            status_code=401, detail=f"Missing permission: {READ_LOCATIONS_SCOPE}"
        )

    client = ShopifyAdminClient(
        ctx.session.shop_domain,
        ctx.session.access_token,
        api_version=config.shopify.api_version,
        timeout=config.shopify.request_timeout_seconds,
    )
    locations = await client.fetch_locations()

    try:
        LocationService(ctx.db).sync_locations(ctx.shop, locations)
        ctx.db.commit()
    except Exception as e:
        ctx.db.rollback()
        logger.error("Lazy location sync failed for %s (non-critical): %s", ctx.shop.shop_domain, e)

    return LocationListResponse.model_validate({"locations": locations})


@router.get("/settings", response_model=LocationSettingListResponse)
def list_location_settings(
    ctx: AdminContext = Depends(require_admin_shop),
) -> LocationSettingListResponse:
    """All location settings for the shop, by priority."""
    settings = LocationService(ctx.db).list_settings(ctx.shop)
    return LocationSettingListResponse(
        settings=[LocationSettingResponse.model_validate(s) for s in settings]
    )


@router.post("/settings", response_model=LocationSettingResponse)
def upsert_location_setting(
    data: LocationSettingCreate,
    ctx: AdminContext = Depends(require_admin_shop),
) -> LocationSettingResponse:
    """Create or overwrite the setting for a Shopify location."""
    setting = LocationService(ctx.db).upsert_setting(ctx.shop, **data.model_dump())
    ctx.db.commit()
    return LocationSettingResponse.model_validate(setting)


@router.put("/settings/{setting_id}", response_model=LocationSettingResponse)
def update_location_setting(
    setting_id: str,
    data: LocationSettingPatch,
    ctx: AdminContext = Depends(require_admin_shop),
) -> LocationSettingResponse:
    """Update a location setting (patch semantics)."""
    updates = {k: v for k, v in data.model_dump().items() if v is not None}
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        setting = LocationService(ctx.db).update_setting(ctx.shop, setting_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    ctx.db.commit()
    return LocationSettingResponse.model_validate(setting)


@router.delete("/settings/{setting_id}")
def delete_location_setting(
    setting_id: str,
    ctx: AdminContext = Depends(require_admin_shop),
) -> dict:
    """Delete a location setting."""
    LocationService(ctx.db).delete_setting(ctx.shop, setting_id)
    ctx.db.commit()
    return {"success": True}
