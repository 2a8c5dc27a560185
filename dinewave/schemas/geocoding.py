"""Reverse geocoding schema."""

from pydantic import BaseModel


class ReverseGeocodeResponse(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str | None
    city: str | None
    state: str | None
    country: str | None
    zip_code: str | None
