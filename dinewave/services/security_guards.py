"""Centralized role and ownership guards for API routes."""

from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from dinewave.models import Restaurant, User
from dinewave.services.restaurant_service import get_restaurant_for_owner


def ensure_user_type(user: User, allowed_types: set[str]) -> None:
    """Ensure user type is one of allowed types."""
    if user.user_type not in allowed_types:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def require_owned_restaurant(db: Session, user: User) -> Restaurant:
    """Return the caller's restaurant; owners without one get 404."""
    ensure_user_type(user, {"restaurant_owner"})
    restaurant = get_restaurant_for_owner(db, user.id)
    if restaurant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No restaurant found for this user")
    return restaurant


def ensure_restaurant_owner(user: User, restaurant: Restaurant) -> None:
    """Apply IDOR-safe ownership check; return 404 to avoid leaking."""
    if restaurant.owner_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found")
