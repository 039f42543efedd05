"""Service for installed-shop records.

Resolves shop state for the shipping-rate core (active flag, Admin API
session, rate display flags) and applies patch-style settings updates and
the uninstall policy.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from src.db.models import LocationSetting, Shop, utc_now_iso
from src.errors import SessionUnavailableError, ShopNotActiveError
from src.services.shipping_models import RateFlags

logger = logging.getLogger(__name__)

MYSHOPIFY_SUFFIX = ".myshopify.com"

# Fields that can be updated via PUT /shop/settings
_MUTABLE_FIELDS = {"show_breakdown", "enable_split_shipping"}

# Shopify plan_name values whose checkout supports split shipping
# (Advanced Shopify and Shopify Plus)
SPLIT_SHIPPING_PLANS = frozenset({"advanced", "enterprise"})


def normalize_shop_domain(shop: str) -> str:
    """Lower-case, trim, and append .myshopify.com when missing."""
    normalized = shop.strip().lower()
    normalized = normalized.replace("https://", "").replace("http://", "").rstrip("/")
    if normalized and not normalized.endswith(MYSHOPIFY_SUFFIX):
        normalized = f"{normalized}{MYSHOPIFY_SUFFIX}"
    return normalized


@dataclass(frozen=True)
class ShopSession:
    """Offline Admin API session for one shop."""

    shop_domain: str
    access_token: str
    scope: str | None = None

    def has_scope(self, scope: str) -> bool:
        granted = {s.strip() for s in (self.scope or "").split(",")}
        return scope in granted


class ShopService:
    """Reads and updates Shop rows."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_shop(self, shop_domain: str) -> Shop | None:
        return self._db.query(Shop).filter(Shop.shop_domain == shop_domain).first()

    def is_shop_active(self, shop_domain: str) -> bool:
        shop = self.get_shop(shop_domain)
        return shop is not None and shop.is_active

    def require_active_shop(self, shop_domain: str) -> Shop:
        """Return the shop or raise ShopNotActiveError."""
        shop = self.get_shop(shop_domain)
        if shop is None or not shop.is_active:
            raise ShopNotActiveError(shop_domain)
        return shop

    def get_session(self, shop_domain: str) -> ShopSession | None:
        """Resolve the Admin API session for an active shop, if any."""
        shop = self.get_shop(shop_domain)
        if shop is None or not shop.is_active or not shop.access_token:
            return None
        return ShopSession(
            shop_domain=shop.shop_domain,
            access_token=shop.access_token,
            scope=shop.scope,
        )

    def require_session(self, shop_domain: str) -> ShopSession:
        """Return the session or raise SessionUnavailableError."""
        session = self.get_session(shop_domain)
        if session is None:
            raise SessionUnavailableError(shop_domain)
        return session

    def get_rate_flags(self, shop_domain: str) -> RateFlags | None:
        shop = self.get_shop(shop_domain)
        if shop is None:
            return None
        return RateFlags(
            is_active=shop.is_active,
            is_plus=bool(shop.is_plus),
            show_breakdown=shop.show_breakdown is not False,
            enable_split_shipping=bool(shop.enable_split_shipping),
        )

    def update_settings(self, shop_domain: str, patch: dict[str, Any]) -> Shop:
        """Apply patch-style updates to the shop's rate display settings.

        Raises:
            ValueError: If patch contains unknown field names.
            ShopNotActiveError: Shop is unknown or uninstalled.
        """
        unknown = set(patch.keys()) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown setting fields: {sorted(unknown)}")

        shop = self.require_active_shop(shop_domain)
        for key, value in patch.items():
            setattr(shop, key, value)
        shop.updated_at = utc_now_iso()
        self._db.flush()
        return shop

    def set_plan(self, shop_domain: str, plan_name: str | None) -> Shop | None:
        """Record whether the shop's plan supports split shipping.

        Returns None when the shop is unknown.
        """
        shop = self.get_shop(shop_domain)
        if shop is None:
            return None
        is_plus = isinstance(plan_name, str) and plan_name in SPLIT_SHIPPING_PLANS
        if shop.is_plus != is_plus:
            logger.info(
                "Shop %s moved to plan %s (split shipping %s)",
                shop_domain,
                plan_name,
                "available" if is_plus else "unavailable",
            )
        shop.is_plus = is_plus
        shop.updated_at = utc_now_iso()
        self._db.flush()
        return shop

    def deactivate(self, shop_domain: str) -> Shop | None:
        """Mark the shop uninstalled. Returns None when the shop is unknown."""
        shop = self.get_shop(shop_domain)
        if shop is None:
            return None
        shop.is_active = False
        shop.updated_at = utc_now_iso()
        self._db.flush()
        logger.info("Shop %s deactivated - app features disabled", shop_domain)
        return shop

    def purge_location_settings(self, shop: Shop) -> int:
        """Delete every location setting of the shop. Returns the count."""
        deleted = (
            self._db.query(LocationSetting)
            .filter(LocationSetting.shop_id == shop.id)
            .delete(synchronize_session=False)
        )
        self._db.flush()
        logger.info("Deleted %d location setting(s) for %s", deleted, shop.shop_domain)
        return deleted
