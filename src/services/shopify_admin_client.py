"""Shopify Admin API client for the reads the shipping-rate core needs.

Implements two calls against the Admin API:
- GraphQL bulk inventory lookup (available units per location per variant)
- REST locations list (used by the lazy location sync)
"""

import logging

import httpx

from src.errors import InventoryLookupError, LocationLookupError
from src.services.shipping_models import InventoryLevel

logger = logging.getLogger(__name__)

VARIANT_GID_PREFIX = "gid://shopify/ProductVariant/"
LOCATION_GID_PREFIX = "gid://shopify/Location/"

# Shopify caps connection pages at 250; shops with more locations only see
# the first page.
MAX_LOCATIONS_PER_VARIANT = 250

INVENTORY_LEVELS_QUERY = """
query getInventoryLevels($first: Int!, $ids: [ID!]!) {
  nodes(ids: $ids) {
    ... on ProductVariant {
      id
      inventoryItem {
        id
        inventoryLevels(first: $first) {
          edges {
            node {
              quantities(names: ["available"]) {
                name
                quantity
              }
              location {
                id
                name
              }
            }
          }
        }
      }
    }
  }
}
"""


def _strip_gid(value: str, prefix: str) -> str:
    return value[len(prefix):] if value.startswith(prefix) else value


class ShopifyAdminClient:
    """Shopify Admin API client bound to one shop's offline token.

    Example:
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_xxxx")
        levels = await client.fetch_inventory_levels(["4010", "4011"])
    """

    # Shopify Admin API version
    API_VERSION = "2024-01"

    def __init__(
        self,
        store_url: str,
        access_token: str,
        api_version: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        # Normalize store URL (strip https:// and trailing slashes)
        store_url = store_url.replace("https://", "").replace("http://", "")
        self._store_url = store_url.rstrip("/")
        self._access_token = access_token
        self._api_version = api_version or self.API_VERSION
        self._timeout = timeout

    @property
    def store_url(self) -> str:
        return self._store_url

    def _get_base_url(self) -> str:
        """Construct the Shopify Admin API base URL."""
        return f"https://{self._store_url}/admin/api/{self._api_version}"

    def _get_headers(self) -> dict[str, str]:
        """Construct HTTP headers with access token and content type."""
        return {
            "X-Shopify-Access-Token": self._access_token or "",
            "Content-Type": "application/json",
        }

    async def fetch_inventory_levels(
        self, variant_ids: list[str]
    ) -> dict[str, list[InventoryLevel]]:
        """Look up available stock for each variant across locations.

        Args:
            variant_ids: Numeric variant IDs (no gid prefix).

        Returns:
            Mapping of variant ID to its inventory levels. When Shopify
            returns any nodes, every requested ID is present; deleted or
            unknown variants (null nodes) map to []. An empty mapping means
            Shopify returned no nodes at all.

        Raises:
            InventoryLookupError: Network failure, non-200 status, a body
                that is not a JSON object, or a GraphQL error payload.
        """
        if not variant_ids:
            return {}

        payload = {
            "query": INVENTORY_LEVELS_QUERY,
            "variables": {
                "first": MAX_LOCATIONS_PER_VARIANT,
                "ids": [f"{VARIANT_GID_PREFIX}{vid}" for vid in variant_ids],
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._get_base_url()}/graphql.json",
                    headers=self._get_headers(),
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error("Inventory lookup request failed for %s: %s", self._store_url, e)
            raise InventoryLookupError(self._store_url, str(e)) from e

        if response.status_code != 200:
            raise InventoryLookupError(
                self._store_url, f"HTTP {response.status_code}"
            )

        data = self._json_object(response, InventoryLookupError)
        if data.get("errors"):
            raise InventoryLookupError(self._store_url, str(data["errors"]))

        body = data.get("data") or {}
        nodes = body.get("nodes") if isinstance(body, dict) else None
        if not nodes:
            return {}
        if not isinstance(nodes, list):
            raise InventoryLookupError(self._store_url, "Unexpected nodes payload")

        try:
            result = self._parse_inventory_nodes(nodes)
        except (AttributeError, TypeError) as e:
            raise InventoryLookupError(self._store_url, f"Malformed inventory payload: {e}") from e
        for variant_id in variant_ids:
            result.setdefault(variant_id, [])
        return result

    def _json_object(self, response: httpx.Response, error_cls: type) -> dict:
        """Decode a response body that must be a JSON object."""
        try:
            data = response.json()
        except ValueError as e:
            logger.error("Non-JSON response from %s: %s", self._store_url, e)
            raise error_cls(self._store_url, "Response body is not JSON") from e
        if not isinstance(data, dict):
            raise error_cls(
                self._store_url, f"Expected a JSON object, got {type(data).__name__}"
            )
        return data

    def _parse_inventory_nodes(self, nodes: list[dict | None]) -> dict[str, list[InventoryLevel]]:
        """Convert GraphQL variant nodes to InventoryLevel lists.

        Quantities are passed through untouched so that one malformed level
        only affects the item it belongs to.
        """
        result: dict[str, list[InventoryLevel]] = {}
        for node in nodes:
            if not isinstance(node, dict) or not node.get("id"):
                continue
            variant_id = _strip_gid(node["id"], VARIANT_GID_PREFIX)
            item = node.get("inventoryItem") or {}
            edges = (item.get("inventoryLevels") or {}).get("edges") or []
            levels: list[InventoryLevel] = []
            for edge in edges:
                level = (edge or {}).get("node") or {}
                location = level.get("location") or {}
                if not location.get("id"):
                    continue
                available = None
                for quantity in level.get("quantities") or []:
                    if quantity.get("name") == "available":
                        available = quantity.get("quantity")
                levels.append(
                    InventoryLevel(
                        location_id=_strip_gid(location["id"], LOCATION_GID_PREFIX),
                        location_name=location.get("name", ""),
                        available=available,
                    )
                )
            result[variant_id] = levels
        return result

    async def fetch_locations(self) -> list[dict]:
        """List the shop's locations via the REST API.

        Returns:
            Dicts with id (string), name, active and a flattened address.

        Raises:
            LocationLookupError: Network failure, non-200 status, or a
                body that is not a JSON object with a locations list.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    f"{self._get_base_url()}/locations.json",
                    headers=self._get_headers(),
                )
        except httpx.HTTPError as e:
            raise LocationLookupError(self._store_url, str(e)) from e

        if response.status_code != 200:
            raise LocationLookupError(self._store_url, f"HTTP {response.status_code}")

        locations = self._json_object(response, LocationLookupError).get("locations", [])
        if not isinstance(locations, list):
            raise LocationLookupError(self._store_url, "Unexpected locations payload")
        return [
            {
                "id": str(loc.get("id", "")),
                "name": loc.get("name", ""),
                "active": bool(loc.get("active", True)),
                "address": {
                    "address1": loc.get("address1"),
                    "city": loc.get("city"),
                    "province": loc.get("province"),
                    "country": loc.get("country"),
                    "zip": loc.get("zip"),
                },
            }
            for loc in locations
            if isinstance(loc, dict)
        ]
