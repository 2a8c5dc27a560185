"""User onboarding and origin-location schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserOnboard(BaseModel):
    """Profile mirrored from the identity provider on first sign-in."""

    email: str
    user_type: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class UserRead(BaseModel):
    id: str
    email: str
    first_name: str | None
    last_name: str | None
    user_type: str
    phone: str | None
    is_onboarding_completed: bool

    model_config = ConfigDict(from_attributes=True)


class UserOriginUpsert(BaseModel):
    origin_address: str
    city: str
    state: str
    country: str = "India"
    zip_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    geocoding_source: str = "api"
    geocoding_accuracy: str | None = None
    place_id: str | None = None
    formatted_address: str | None = None


class UserOriginRead(BaseModel):
    id: int
    user_id: str
    origin_address: str
    city: str
    state: str
    country: str
    zip_code: str | None
    latitude: float
    longitude: float
    geocoding_source: str
    geocoding_accuracy: str | None
    place_id: str | None
    formatted_address: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserOriginResponse(BaseModel):
    origin: UserOriginRead | None
