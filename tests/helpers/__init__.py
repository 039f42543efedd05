"""Test helpers shared by the service and API suites."""

from tests.helpers.fake_data_source import FakeDataSource
from tests.helpers.shopify_signing import sign_query, sign_webhook

TEST_SHOP_DOMAIN = "test-shop.myshopify.com"
TEST_API_SECRET = "test-secret"

__all__ = [
    "FakeDataSource",
    "TEST_API_SECRET",
    "TEST_SHOP_DOMAIN",
    "sign_query",
    "sign_webhook",
]
