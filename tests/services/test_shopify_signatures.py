"""Tests for Shopify HMAC verification."""

from src.services.shopify_signatures import (
    app_proxy_message,
    verify_app_proxy_request,
    verify_webhook,
)
from tests.helpers import sign_query, sign_webhook

SECRET = "hush"


class TestAppProxySignature:

    def test_message_sorted_without_hmac(self):
        """hmac and signature are excluded and keys sorted."""
        message = app_proxy_message(
            {"timestamp": "1", "shop": "a.myshopify.com", "hmac": "x", "signature": "y"}
        )
        assert message == "shop=a.myshopify.com&timestamp=1"

    def test_repeated_keys_use_first_value(self):
        """Multi-value params contribute their first value."""
        assert app_proxy_message({"a": ["1", "2"], "b": "3"}) == "a=1&b=3"

    def test_valid_signature(self):
        """A correctly signed query verifies."""
        query = sign_query({"shop": "a.myshopify.com", "timestamp": "1700000000"}, SECRET)
        assert verify_app_proxy_request(query, SECRET) is True

    def test_valid_signature_as_lists(self):
        """Query values may arrive as lists."""
        signed = sign_query({"shop": "a.myshopify.com"}, SECRET)
        query = {key: [value] for key, value in signed.items()}
        assert verify_app_proxy_request(query, SECRET) is True

    def test_tampered_query(self):
        """Changing a signed value breaks the signature."""
        query = sign_query({"shop": "a.myshopify.com"}, SECRET)
        query["shop"] = "b.myshopify.com"
        assert verify_app_proxy_request(query, SECRET) is False

    def test_missing_hmac(self):
        """Unsigned queries fail."""
        assert verify_app_proxy_request({"shop": "a.myshopify.com"}, SECRET) is False

    def test_missing_secret(self):
        """Without a configured secret nothing verifies."""
        query = sign_query({"shop": "a.myshopify.com"}, "")
        assert verify_app_proxy_request(query, "") is False


class TestWebhookSignature:

    def test_valid(self):
        """Base64 digest of the raw body verifies."""
        body = b'{"id": 1}'
        assert verify_webhook(body, sign_webhook(body, SECRET), SECRET) is True

    def test_body_changed(self):
        """Any byte change fails."""
        header = sign_webhook(b'{"id": 1}', SECRET)
        assert verify_webhook(b'{"id": 2}', header, SECRET) is False

    def test_missing_header(self):
        """A missing header fails."""
        assert verify_webhook(b"{}", None, SECRET) is False
