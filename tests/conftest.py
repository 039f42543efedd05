"""Root-level pytest fixtures for all tests.

Provides shared fixtures:
- In-memory database session
- A seeded active shop
"""

import os
from collections.abc import Generator

# Keep the app engine off the working directory. Must run before
# src.db.connection is imported.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.db.models import Base, Shop
from tests.helpers import TEST_API_SECRET, TEST_SHOP_DOMAIN

os.environ["SHOPIFY_API_SECRET"] = TEST_API_SECRET


# ============================================================================
# Pytest Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "shopify: marks tests requiring Shopify credentials"
    )


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session with all tables created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def active_shop(db_session: Session) -> Shop:
    """An installed shop with an offline token and the read_locations scope."""
    shop = Shop(
        shop_domain=TEST_SHOP_DOMAIN,
        access_token="shpat_test_token",
        scope="read_products,read_inventory,read_locations",
        is_active=True,
    )
    db_session.add(shop)
    db_session.commit()
    return shop
