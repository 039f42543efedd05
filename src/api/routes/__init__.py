"""FastAPI route modules.

Exports all route modules for inclusion in the main application.
"""

from src.api.routes import locations, shipping_rates, shop_settings, webhooks

__all__ = [
    "locations",
    "shipping_rates",
    "shop_settings",
    "webhooks",
]
