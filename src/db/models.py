"""SQLAlchemy ORM models for the Cloudship state database.

This module defines the per-shop records the shipping-rate core reads:
the installed shop (session token, plan and rate display flags) and its
warehouse location settings. Uses SQLAlchemy 2.0 style with Mapped and
mapped_column.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


def generate_uuid() -> str:
    """Generate a UUID4 string for primary keys."""
    return str(uuid4())


def utc_now_iso() -> str:
    """Generate current UTC timestamp in ISO8601 format."""
    return datetime.now(UTC).isoformat()


# SQLAlchemy Base


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Models


class Shop(Base):
    """Installed Shopify shop.

    Attributes:
        id: UUID primary key
        shop_domain: Normalized myshopify domain (unique)
        access_token: Offline Admin API token; NULL until OAuth completes
        scope: Comma-separated granted scopes
        is_active: False once the app is uninstalled
        is_plus: Plan supports split shipping (Advanced/Plus)
        show_breakdown: Show per-warehouse lines in the combined rate
        enable_split_shipping: Offer one rate per warehouse (Plus only)
    """

    __tablename__ = "shops"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    shop_domain: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    access_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    scope: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    is_plus: Mapped[bool] = mapped_column(nullable=False, default=False)
    show_breakdown: Mapped[bool] = mapped_column(nullable=False, default=True)
    enable_split_shipping: Mapped[bool] = mapped_column(nullable=False, default=False)

    # Timestamps (ISO8601 strings for SQLite compatibility)
    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    updated_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso, onupdate=utc_now_iso
    )

    location_settings: Mapped[list["LocationSetting"]] = relationship(
        "LocationSetting", back_populates="shop", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Shop(domain={self.shop_domain!r}, active={self.is_active})>"


class LocationSetting(Base):
    """Merchant-configured shipping cost and ETA for one Shopify location.

    Lower priority numbers are preferred when an item is in stock at
    several locations.
    """

    __tablename__ = "location_settings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    shop_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False
    )
    shopify_location_id: Mapped[str] = mapped_column(String(64), nullable=False)
    location_name: Mapped[str] = mapped_column(String(255), nullable=False)

    shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    eta_min: Mapped[int] = mapped_column(nullable=False, default=1)
    eta_max: Mapped[int] = mapped_column(nullable=False, default=2)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    priority: Mapped[int] = mapped_column(nullable=False, default=0)

    created_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso
    )
    updated_at: Mapped[str] = mapped_column(
        String(50), nullable=False, default=utc_now_iso, onupdate=utc_now_iso
    )

    shop: Mapped["Shop"] = relationship("Shop", back_populates="location_settings")

    __table_args__ = (
        UniqueConstraint(
            "shop_id", "shopify_location_id", name="uq_location_settings_shop_location"
        ),
        Index("idx_location_settings_shop_priority", "shop_id", "priority"),
    )

    def __repr__(self) -> str:
        return (
            f"<LocationSetting(location={self.shopify_location_id!r}, "
            f"priority={self.priority}, active={self.is_active})>"
        )
