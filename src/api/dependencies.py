"""FastAPI dependencies shared by the admin routes.

Process-wide objects (config, rate limiter) are read from ``app.state``,
where the lifespan puts them.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from src.config import CloudshipConfig
from src.db.connection import get_db
from src.db.models import Shop
from src.errors import RateLimitExceededError, ValidationError
from src.services.rate_limiter import RateLimiter
from src.services.shop_service import ShopService, ShopSession, normalize_shop_domain

logger = logging.getLogger(__name__)


def get_config(request: Request) -> CloudshipConfig:
    return request.app.state.config


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_shop_domain(shop: str = Query(..., description="myshopify domain")) -> str:
    normalized = normalize_shop_domain(shop)
    if not normalized:
        raise ValidationError("Shop parameter is required")
    return normalized


@dataclass
class AdminContext:
    """An authenticated, active shop for an admin request."""

    shop: Shop
    session: ShopSession
    db: Session


def require_admin_shop(
    shop_domain: str = Depends(get_shop_domain),
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> AdminContext:
    """Rate-limit, then require an active shop with a resolvable session.

    Raises:
        RateLimitExceededError: 429.
        ShopNotActiveError: 403.
        SessionUnavailableError: 401.
    """
    decision = limiter.check(shop_domain)
    if not decision.allowed:
        logger.warning("Admin rate limit exceeded for %s", shop_domain)
        raise RateLimitExceededError(shop_domain, limiter.retry_after(decision))

    service = ShopService(db)
    shop = service.require_active_shop(shop_domain)
    session = service.require_session(shop_domain)
    return AdminContext(shop=shop, session=session, db=db)
