"""Favorite toggle schemas."""

from pydantic import BaseModel

from dinewave.schemas.restaurant import RestaurantRead


class FavoriteToggleRequest(BaseModel):
    restaurant_id: int


class FavoriteToggleResponse(BaseModel):
    restaurant_id: int
    action: str


class FavoriteListResponse(BaseModel):
    restaurants: list[RestaurantRead]
