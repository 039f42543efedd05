"""HMAC verification for requests Shopify sends to the app.

- App proxy / carrier callbacks sign the query string (hex digest).
- Webhooks sign the raw request body (base64 digest).

Both use the app's API secret; a missing secret always fails.
"""

import base64
import hashlib
import hmac
from collections.abc import Iterable, Mapping

_EXCLUDED_PARAMS = frozenset({"hmac", "signature"})


def _first(value: str | Iterable[str]) -> str:
    if isinstance(value, str):
        return value
    for item in value:
        return item
    return ""


def app_proxy_message(query: Mapping[str, str | list[str]]) -> str:
    """Canonical message: sorted key=value pairs joined with '&'.

    ``hmac`` and ``signature`` are excluded; repeated keys use their first
    value.
    """
    return "&".join(
        f"{key}={_first(query[key])}"
        for key in sorted(query)
        if key not in _EXCLUDED_PARAMS
    )


def verify_app_proxy_request(query: Mapping[str, str | list[str]], secret: str) -> bool:
    """Check the ``hmac`` query parameter against the rest of the query."""
    if not secret:
        return False
    provided = query.get("hmac")
    if not provided:
        return False
    expected = hmac.new(
        secret.encode("utf-8"),
        app_proxy_message(query).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(expected, _first(provided))


def verify_webhook(body: bytes, hmac_header: str | None, secret: str) -> bool:
    """Check ``X-Shopify-Hmac-Sha256`` against the raw request body."""
    if not secret or not hmac_header:
        return False
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("ascii")
    return hmac.compare_digest(expected, hmac_header)
