"""Production WarehouseDataSource: shop state from the DB, stock from Shopify."""

from collections.abc import Callable

from sqlalchemy.orm import Session

from src.errors import SessionUnavailableError
from src.services.location_service import LocationService
from src.services.shipping_models import InventoryLevel, LocationConfig, RateFlags
from src.services.shop_service import ShopService
from src.services.shopify_admin_client import ShopifyAdminClient

ClientFactory = Callable[[str, str], ShopifyAdminClient]


class ShopifyWarehouseDataSource:
    """Implements WarehouseDataSource on top of a request-scoped DB session."""

    def __init__(
        self,
        db: Session,
        api_version: str | None = None,
        timeout: float = 10.0,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._shops = ShopService(db)
        self._locations = LocationService(db)
        self._client_factory = client_factory or (
            lambda store_url, token: ShopifyAdminClient(
                store_url, token, api_version=api_version, timeout=timeout
            )
        )

    def is_shop_active(self, shop_domain: str) -> bool:
        return self._shops.is_shop_active(shop_domain)

    def has_session(self, shop_domain: str) -> bool:
        return self._shops.get_session(shop_domain) is not None

    async def fetch_inventory(
        self, shop_domain: str, variant_ids: list[str]
    ) -> dict[str, list[InventoryLevel]]:
        session = self._shops.get_session(shop_domain)
        if session is None:
            raise SessionUnavailableError(shop_domain)
        client = self._client_factory(session.shop_domain, session.access_token)
        return await client.fetch_inventory_levels(variant_ids)

    def fetch_active_location_settings(self, shop_domain: str) -> list[LocationConfig]:
        shop = self._shops.get_shop(shop_domain)
        if shop is None:
            return []
        return self._locations.active_location_configs(shop)

    def get_rate_flags(self, shop_domain: str) -> RateFlags | None:
        return self._shops.get_rate_flags(shop_domain)
