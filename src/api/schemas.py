"""Pydantic schemas for API request/response validation.

This module defines the data contracts for the Cloudship API: the Shopify
carrier-service callback (whose field names are fixed by Shopify) and the
admin endpoints for location and shop settings.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer


# Carrier-service callback schemas


class CarrierRateItem(BaseModel):
    """One cart line as sent by Shopify's carrier-service callback."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    sku: str | None = None
    quantity: int | None = None
    grams: int | None = None
    price: int | None = None
    vendor: str | None = None
    requires_shipping: bool = False
    taxable: bool | None = None
    fulfillment_service: str | None = None
    product_id: int | str | None = None
    variant_id: int | str | None = None


class CarrierRateRequest(BaseModel):
    """The ``rate`` object of the callback body."""

    model_config = ConfigDict(extra="ignore")

    origin: dict | None = None
    destination: dict | None = None
    items: list[CarrierRateItem] = Field(default_factory=list)
    currency: str | None = None
    locale: str | None = None


class CarrierRatePayload(BaseModel):
    """Request body for POST /api/shipping-rates."""

    model_config = ConfigDict(extra="ignore")

    rate: CarrierRateRequest


class ShippingRateOut(BaseModel):
    """A single rate in Shopify's carrier-service response format."""

    service_name: str
    service_code: str
    total_price: str
    description: str
    currency: str


class ShippingRatesResponse(BaseModel):
    """Response body for POST /api/shipping-rates."""

    rates: list[ShippingRateOut] = Field(default_factory=list)


# Location schemas


class LocationAddress(BaseModel):
    address1: str | None = None
    city: str | None = None
    province: str | None = None
    country: str | None = None
    zip: str | None = None


class LocationResponse(BaseModel):
    """A Shopify location as listed by the Admin REST API."""

    id: str
    name: str
    active: bool
    address: LocationAddress


class LocationListResponse(BaseModel):
    locations: list[LocationResponse]


class LocationSettingResponse(BaseModel):
    """Response schema for a location setting."""

    id: str
    shopify_location_id: str
    location_name: str
    shipping_cost: Decimal
    eta_min: int
    eta_max: int
    is_active: bool
    priority: int
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("shipping_cost")
    def _serialize_cost(self, value: Decimal) -> str:
        return f"{Decimal(str(value)):.2f}"


class LocationSettingListResponse(BaseModel):
    settings: list[LocationSettingResponse]


class LocationSettingCreate(BaseModel):
    """Request schema for upserting a location setting."""

    shopify_location_id: str = Field(..., min_length=1, max_length=64)
    location_name: str = Field(..., min_length=1, max_length=255)
    shipping_cost: Decimal = Field(default=Decimal("0"), ge=0)
    eta_min: int = Field(default=1, ge=0)
    eta_max: int = Field(default=2, ge=0)
    priority: int = 0


class LocationSettingPatch(BaseModel):
    """Request schema for updating a location setting (all fields optional)."""

    shipping_cost: Decimal | None = Field(default=None, ge=0)
    eta_min: int | None = Field(default=None, ge=0)
    eta_max: int | None = Field(default=None, ge=0)
    priority: int | None = None
    is_active: bool | None = None


# Shop settings schemas


class ShopSettingsResponse(BaseModel):
    """Rate display settings for a shop."""

    show_breakdown: bool = True
    enable_split_shipping: bool = False
    is_plus: bool = False

    model_config = ConfigDict(from_attributes=True)


class ShopSettingsPatch(BaseModel):
    """Request schema for updating shop settings (all fields optional)."""

    show_breakdown: bool | None = None
    enable_split_shipping: bool | None = None


class ErrorResponse(BaseModel):
    """Body returned for domain errors on admin endpoints."""

    error_code: str
    message: str
    remediation: str
