"""FastAPI application for the Cloudship API.

Provides the main application instance with routers, process-wide state
and exception handlers configured.
"""

import logging
import sys
import time as _time
from contextlib import asynccontextmanager
from importlib.metadata import version as _pkg_version

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Configure logging to stdout for uvicorn to capture
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
# Ensure our application loggers are captured
logging.getLogger("src").setLevel(logging.INFO)

from src.api.routes import locations, shipping_rates, shop_settings, webhooks
from src.config import load_config
from src.db.connection import close_db, init_db
from src.errors import DomainError, RateLimitExceededError
from src.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def _package_version() -> str:
    try:
        return _pkg_version("cloudship")
    except Exception:
        return "unknown"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build per-process state on startup and drop it on shutdown."""
    config = load_config()
    logging.getLogger("src").setLevel(config.logging.level.upper())
    if not config.shopify.api_secret:
        logger.warning(
            "Shopify API secret is not configured; signed requests will be rejected."
        )

    init_db()

    app.state.config = config
    app.state.rate_limiter = RateLimiter(
        max_requests=config.rate_limit.max_requests,
        window_seconds=config.rate_limit.window_seconds,
    )
    app.state.started_at = _time.time()

    yield

    app.state.rate_limiter.reset()
    close_db()


app = FastAPI(
    title="Cloudship API",
    description="Per-warehouse carrier-calculated shipping rates for Shopify",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Handle DomainError exceptions with consistent format.

    Args:
        request: The incoming request.
        exc: The DomainError exception.

    Returns:
        JSONResponse with error details and the registry status code.
    """
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "error_code": exc.code,
            "message": exc.message,
            "remediation": exc.remediation,
        },
        headers=headers,
    )


# Include routers
app.include_router(shipping_rates.router, prefix="/api")
app.include_router(webhooks.router, prefix="/api")
app.include_router(locations.router, prefix="/api/v1")
app.include_router(shop_settings.router, prefix="/api/v1")


@app.get("/health")
def health_check(request: Request) -> dict:
    """Health check endpoint with version and uptime."""
    started_at = getattr(request.app.state, "started_at", None)
    uptime = int(_time.time() - started_at) if started_at else 0
    return {
        "status": "healthy",
        "version": _package_version(),
        "uptime_seconds": uptime,
    }


@app.get("/")
def root() -> dict:
    """API root with links to docs."""
    return {
        "name": "Cloudship API",
        "version": "0.1.0",
        "docs": "/docs",
        "redoc": "/redoc",
    }
