"""Restaurant API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RestaurantCreate(BaseModel):
    """Payload for listing a restaurant; coordinates come from geocoding the address."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str | None = None
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str | None = None
    phone: str | None = None


class RestaurantUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    phone: str | None = None
    is_active: bool | None = None


class RestaurantRead(BaseModel):
    id: int
    owner_id: str
    name: str
    description: str | None
    category: str | None
    address: str
    city: str
    state: str
    zip_code: str
    country: str | None
    latitude: float | None
    longitude: float | None
    formatted_address: str | None
    phone: str | None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NearbyRestaurantRead(RestaurantRead):
    distance_km: float


class NearbyRestaurantsResponse(BaseModel):
    restaurants: list[NearbyRestaurantRead]
    latitude: float
    longitude: float
    radius_km: float
    total: int
