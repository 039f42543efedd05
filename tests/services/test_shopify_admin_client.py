"""Tests for the Shopify Admin API client."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.errors import InventoryLookupError, LocationLookupError
from src.services.shipping_models import InventoryLevel
from src.services.shopify_admin_client import ShopifyAdminClient


def _response(status_code: int, payload: dict) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def _variant_node(variant_id: str, levels: list[tuple[str, str, int | None]]) -> dict:
    return {
        "id": f"gid://shopify/ProductVariant/{variant_id}",
        "inventoryItem": {
            "id": f"gid://shopify/InventoryItem/{variant_id}0",
            "inventoryLevels": {
                "edges": [
                    {
                        "node": {
                            "quantities": [{"name": "available", "quantity": qty}],
                            "location": {
                                "id": f"gid://shopify/Location/{loc_id}",
                                "name": name,
                            },
                        }
                    }
                    for loc_id, name, qty in levels
                ]
            },
        },
    }


class TestClientInit:
    """URL and header construction."""

    def test_strips_scheme_and_slash(self):
        """Store URL is normalized."""
        client = ShopifyAdminClient("https://mystore.myshopify.com/", "shpat_x")
        assert client.store_url == "mystore.myshopify.com"
        assert client._get_base_url() == "https://mystore.myshopify.com/admin/api/2024-01"

    def test_custom_api_version(self):
        """API version can be overridden."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x", api_version="2024-07")
        assert client._get_base_url().endswith("/admin/api/2024-07")

    def test_headers_carry_token(self):
        """Access token goes in X-Shopify-Access-Token."""
        headers = ShopifyAdminClient("s.myshopify.com", "shpat_x")._get_headers()
        assert headers["X-Shopify-Access-Token"] == "shpat_x"
        assert headers["Content-Type"] == "application/json"


class TestFetchInventoryLevels:
    """GraphQL bulk inventory lookup."""

    @pytest.mark.asyncio
    async def test_parses_levels(self):
        """Gids are stripped and quantities mapped per location."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")
        payload = {
            "data": {
                "nodes": [
                    _variant_node("11", [("1", "East", 4), ("2", "West", 0)]),
                    _variant_node("12", [("2", "West", 7)]),
                    None,
                ]
            }
        }

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, payload)
            result = await client.fetch_inventory_levels(["11", "12", "13"])

        assert result == {
            "11": [InventoryLevel("1", "East", 4), InventoryLevel("2", "West", 0)],
            "12": [InventoryLevel("2", "West", 7)],
            "13": [],
        }
        call = mock_post.call_args
        assert call.args[0] == "https://mystore.myshopify.com/admin/api/2024-01/graphql.json"
        variables = call.kwargs["json"]["variables"]
        assert variables["ids"] == [
            "gid://shopify/ProductVariant/11",
            "gid://shopify/ProductVariant/12",
            "gid://shopify/ProductVariant/13",
        ]
        assert variables["first"] == 250

    @pytest.mark.asyncio
    async def test_missing_quantity_is_none(self):
        """A level without an 'available' quantity reports None."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")
        node = _variant_node("11", [("1", "East", 1)])
        node["inventoryItem"]["inventoryLevels"]["edges"][0]["node"]["quantities"] = []

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, {"data": {"nodes": [node]}})
            result = await client.fetch_inventory_levels(["11"])

        assert result["11"] == [InventoryLevel("1", "East", None)]

    @pytest.mark.asyncio
    async def test_null_node_keeps_variant_with_no_levels(self):
        """A deleted variant (null node) still appears, with no levels."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, {"data": {"nodes": [None]}})
            result = await client.fetch_inventory_levels(["9"])

        assert result == {"9": []}

    @pytest.mark.asyncio
    async def test_no_nodes_returns_empty_mapping(self):
        """An empty nodes list means no inventory data at all."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, {"data": {"nodes": []}})
            assert await client.fetch_inventory_levels(["9"]) == {}

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        """An HTML error page with status 200 raises InventoryLookupError."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")
        response = _response(200, {})
        response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = response
            with pytest.raises(InventoryLookupError, match="not JSON"):
                await client.fetch_inventory_levels(["11"])

    @pytest.mark.asyncio
    async def test_json_list_body(self):
        """A JSON array body raises InventoryLookupError."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, [])
            with pytest.raises(InventoryLookupError, match="JSON object"):
                await client.fetch_inventory_levels(["11"])

    @pytest.mark.asyncio
    async def test_malformed_edges(self):
        """Edges that are not a list of objects raise InventoryLookupError."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")
        node = _variant_node("11", [])
        node["inventoryItem"]["inventoryLevels"]["edges"] = ["oops"]

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, {"data": {"nodes": [node]}})
            with pytest.raises(InventoryLookupError, match="Malformed"):
                await client.fetch_inventory_levels(["11"])

    @pytest.mark.asyncio
    async def test_no_variants_skips_request(self):
        """An empty ID list makes no request."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            assert await client.fetch_inventory_levels([]) == {}
        mock_post.assert_not_called()

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """Non-200 responses raise InventoryLookupError."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(401, {})
            with pytest.raises(InventoryLookupError) as exc_info:
                await client.fetch_inventory_levels(["11"])

        assert exc_info.value.code == "E-3001"

    @pytest.mark.asyncio
    async def test_graphql_errors(self):
        """A GraphQL error payload raises InventoryLookupError."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = _response(200, {"errors": [{"message": "Throttled"}]})
            with pytest.raises(InventoryLookupError, match="Throttled"):
                await client.fetch_inventory_levels(["11"])

    @pytest.mark.asyncio
    async def test_network_error(self):
        """Transport errors are wrapped."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ConnectError("Connection refused")
            with pytest.raises(InventoryLookupError):
                await client.fetch_inventory_levels(["11"])


class TestFetchLocations:
    """REST locations list."""

    @pytest.mark.asyncio
    async def test_returns_flattened_locations(self):
        """IDs become strings and the address is nested."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")
        payload = {
            "locations": [
                {
                    "id": 655441491,
                    "name": "East DC",
                    "active": True,
                    "address1": "1 Main St",
                    "city": "Newark",
                    "province": "New Jersey",
                    "country": "US",
                    "zip": "07101",
                }
            ]
        }

        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(200, payload)
            locations = await client.fetch_locations()

        assert locations == [
            {
                "id": "655441491",
                "name": "East DC",
                "active": True,
                "address": {
                    "address1": "1 Main St",
                    "city": "Newark",
                    "province": "New Jersey",
                    "country": "US",
                    "zip": "07101",
                },
            }
        ]
        assert mock_get.call_args.args[0].endswith("/locations.json")

    @pytest.mark.asyncio
    async def test_error_status(self):
        """Non-200 responses raise LocationLookupError."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(500, {})
            with pytest.raises(LocationLookupError):
                await client.fetch_locations()

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        """A 200 response that is not JSON raises LocationLookupError."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")
        response = _response(200, {})
        response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)

        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = response
            with pytest.raises(LocationLookupError):
                await client.fetch_locations()

    @pytest.mark.asyncio
    async def test_locations_not_a_list(self):
        """A locations field of the wrong type raises LocationLookupError."""
        client = ShopifyAdminClient("mystore.myshopify.com", "shpat_x")

        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = _response(200, {"locations": "none"})
            with pytest.raises(LocationLookupError):
                await client.fetch_locations()
