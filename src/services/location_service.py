"""CRUD service for per-shop warehouse location settings.

Also performs the lazy sync that mirrors the shop's Shopify locations into
LocationSetting rows, and produces the immutable LocationConfig snapshots
consumed by warehouse assignment.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.orm import Session

from src.db.models import LocationSetting, Shop, utc_now_iso
from src.errors import InvalidDeliveryWindowError, NotFoundError, ValidationError
from src.services.shipping_models import LocationConfig

logger = logging.getLogger(__name__)

# Fields that can be updated via PUT
_MUTABLE_FIELDS = {"shipping_cost", "eta_min", "eta_max", "priority", "is_active"}


def _to_cost(value: Any) -> Decimal:
    try:
        cost = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid shipping_cost: {value!r}") from e
    if not cost.is_finite() or cost < 0:
        raise ValidationError(f"shipping_cost must be >= 0, got {value!r}")
    return cost.quantize(Decimal("0.01"))


def _check_window(eta_min: int, eta_max: int) -> None:
    if eta_min < 0:
        raise ValidationError(f"eta_min must be >= 0, got {eta_min}")
    if eta_max < eta_min:
        raise InvalidDeliveryWindowError(eta_min, eta_max)


def to_location_config(setting: LocationSetting) -> LocationConfig:
    """Snapshot an ORM row for the pure assignment core."""
    return LocationConfig(
        shopify_location_id=setting.shopify_location_id,
        location_name=setting.location_name,
        shipping_cost=Decimal(str(setting.shipping_cost)),
        eta_min=setting.eta_min,
        eta_max=setting.eta_max,
        priority=setting.priority,
        is_active=setting.is_active,
    )


class LocationService:
    """LocationSetting reads and writes scoped to one shop."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def list_settings(self, shop: Shop) -> list[LocationSetting]:
        """All settings for the shop, ascending by priority."""
        return (
            self._db.query(LocationSetting)
            .filter(LocationSetting.shop_id == shop.id)
            .order_by(LocationSetting.priority.asc(), LocationSetting.created_at.asc())
            .all()
        )

    def active_location_configs(self, shop: Shop) -> list[LocationConfig]:
        """Active settings as snapshots, ascending by priority."""
        rows = (
            self._db.query(LocationSetting)
            .filter(
                LocationSetting.shop_id == shop.id,
                LocationSetting.is_active.is_(True),
            )
            .order_by(LocationSetting.priority.asc(), LocationSetting.created_at.asc())
            .all()
        )
        return [to_location_config(row) for row in rows]

    def get_setting(self, shop: Shop, setting_id: str) -> LocationSetting:
        setting = (
            self._db.query(LocationSetting)
            .filter(
                LocationSetting.id == setting_id,
                LocationSetting.shop_id == shop.id,
            )
            .first()
        )
        if setting is None:
            raise NotFoundError("Location setting", setting_id)
        return setting

    def upsert_setting(
        self,
        shop: Shop,
        shopify_location_id: str,
        location_name: str,
        shipping_cost: Any = 0,
        eta_min: int = 1,
        eta_max: int = 2,
        priority: int = 0,
    ) -> LocationSetting:
        """Create or overwrite the setting for a Shopify location.

        Upserting always re-activates the location.
        """
        if not shopify_location_id or not location_name:
            raise ValidationError("shopify_location_id and location_name are required")
        cost = _to_cost(shipping_cost)
        _check_window(eta_min, eta_max)

        setting = (
            self._db.query(LocationSetting)
            .filter(
                LocationSetting.shop_id == shop.id,
                LocationSetting.shopify_location_id == shopify_location_id,
            )
            .first()
        )
        if setting is None:
            setting = LocationSetting(shop_id=shop.id, shopify_location_id=shopify_location_id)
            self._db.add(setting)
            logger.info(
                "Created location setting %s for %s", shopify_location_id, shop.shop_domain
            )

        setting.location_name = location_name
        setting.shipping_cost = cost
        setting.eta_min = eta_min
        setting.eta_max = eta_max
        setting.priority = priority
        setting.is_active = True
        setting.updated_at = utc_now_iso()
        self._db.flush()
        return setting

    def update_setting(self, shop: Shop, setting_id: str, patch: dict[str, Any]) -> LocationSetting:
        """Apply patch-style updates to one setting.

        Raises:
            ValueError: If patch contains unknown field names.
            NotFoundError: Setting does not belong to the shop.
            ValidationError: Cost or delivery window is invalid.
        """
        unknown = set(patch.keys()) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown location setting fields: {sorted(unknown)}")

        setting = self.get_setting(shop, setting_id)
        if "shipping_cost" in patch:
            patch = {**patch, "shipping_cost": _to_cost(patch["shipping_cost"])}
        _check_window(
            patch.get("eta_min", setting.eta_min),
            patch.get("eta_max", setting.eta_max),
        )
        for key, value in patch.items():
            setattr(setting, key, value)
        setting.updated_at = utc_now_iso()
        self._db.flush()
        return setting

    def delete_setting(self, shop: Shop, setting_id: str) -> None:
        setting = self.get_setting(shop, setting_id)
        self._db.delete(setting)
        self._db.flush()

    def sync_locations(self, shop: Shop, locations: list[dict]) -> int:
        """Mirror Shopify locations into settings.

        New locations get priority 0, a 1-2 day window and free shipping.
        Existing rows only have their name and active flag refreshed, so
        merchant-configured cost and priority survive a sync.

        Returns:
            Number of rows created.
        """
        existing = {s.shopify_location_id: s for s in self.list_settings(shop)}
        created = 0
        for location in locations:
            location_id = str(location["id"])
            setting = existing.get(location_id)
            if setting is None:
                setting = LocationSetting(
                    shop_id=shop.id,
                    shopify_location_id=location_id,
                    location_name=location.get("name", ""),
                    is_active=bool(location.get("active", True)),
                    priority=0,
                    eta_min=1,
                    eta_max=2,
                    shipping_cost=Decimal("0"),
                )
                self._db.add(setting)
                existing[location_id] = setting
                created += 1
            else:
                setting.location_name = location.get("name", setting.location_name)
                setting.is_active = bool(location.get("active", True))
                setting.updated_at = utc_now_iso()
        self._db.flush()
        logger.info(
            "Synced %d location(s) for %s (%d new)", len(locations), shop.shop_domain, created
        )
        return created
