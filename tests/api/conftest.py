"""Pytest fixtures for API tests.

Provides test client, database session, and sample data fixtures
for testing FastAPI endpoints.
"""

from collections.abc import Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.main import app
from src.db.connection import get_db
from src.db.models import Base, LocationSetting, Shop
from tests.helpers import TEST_API_SECRET, TEST_SHOP_DOMAIN


@pytest.fixture
def test_db() -> Generator[Session, None, None]:
    """Create an in-memory SQLite database for testing.

    Creates all tables, yields a session, and cleans up after test.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db: Session) -> Generator[TestClient, None, None]:
    """Create a TestClient with overridden database dependency.

    Args:
        test_db: Test database session fixture.

    Yields:
        TestClient configured for testing.
    """

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        c.app.state.config.shopify.api_secret = TEST_API_SECRET
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def shop(test_db: Session) -> Shop:
    """An installed shop with an offline token.

    Returns:
        Shop instance that is active and has the read_locations scope.
    """
    shop = Shop(
        shop_domain=TEST_SHOP_DOMAIN,
        access_token="shpat_test_token",
        scope="read_products,read_inventory,read_locations",
        is_active=True,
    )
    test_db.add(shop)
    test_db.commit()
    return shop


@pytest.fixture
def two_locations(test_db: Session, shop: Shop) -> list[LocationSetting]:
    """East (priority 1, $5.00, 1-1 days) and West (priority 2, $7.25, 3-5 days)."""
    settings = [
        LocationSetting(
            shop_id=shop.id,
            shopify_location_id="1",
            location_name="East",
            shipping_cost=Decimal("5.00"),
            eta_min=1,
            eta_max=1,
            priority=1,
        ),
        LocationSetting(
            shop_id=shop.id,
            shopify_location_id="2",
            location_name="West",
            shipping_cost=Decimal("7.25"),
            eta_min=3,
            eta_max=5,
            priority=2,
        ),
    ]
    test_db.add_all(settings)
    test_db.commit()
    return settings
