"""Restaurant listing, geocoding of addresses and proximity search."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from dinewave.models.restaurant import ADDRESS_FIELDS, Restaurant
from dinewave.services.geo import distance_km, is_valid_coordinates
from dinewave.services.geocoding import Geocoder, build_address_string

logger = logging.getLogger(__name__)


def get_restaurant(db: Session, restaurant_id: int) -> Restaurant | None:
    return db.get(Restaurant, restaurant_id)


def get_restaurant_for_owner(db: Session, owner_id: str) -> Restaurant | None:
    """Return the owner's restaurant (the earliest one when several exist)."""
    return db.scalar(
        select(Restaurant).where(Restaurant.owner_id == owner_id).order_by(Restaurant.id.asc()).limit(1)
    )


def _restaurant_address(restaurant: Restaurant) -> str:
    return build_address_string(
        address=restaurant.address,
        city=restaurant.city,
        state=restaurant.state,
        zip_code=restaurant.zip_code,
        country=restaurant.country,
    )


def apply_geocoding(restaurant: Restaurant, geocoder: Geocoder) -> bool:
    """Set coordinates from the restaurant's address; clear them when it cannot be resolved."""
    result = geocoder.geocode(_restaurant_address(restaurant))
    if result is None:
        restaurant.latitude = None
        restaurant.longitude = None
        restaurant.formatted_address = None
        logger.warning("[RESTAURANT] Could not geocode address for %r; saved without coordinates.", restaurant.name)
        return False
    restaurant.latitude = result.latitude
    restaurant.longitude = result.longitude
    restaurant.formatted_address = result.formatted_address
    return True


def create_restaurant(db: Session, geocoder: Geocoder, *, owner_id: str, fields: Mapping[str, Any]) -> Restaurant:
    """Create a restaurant; geocoding failure leaves coordinates empty instead of failing."""
    restaurant = Restaurant(owner_id=owner_id, is_active=True, **dict(fields))
    apply_geocoding(restaurant, geocoder)
    db.add(restaurant)
    db.commit()
    db.refresh(restaurant)
    return restaurant


def update_restaurant(db: Session, geocoder: Geocoder, restaurant: Restaurant, changes: Mapping[str, Any]) -> Restaurant:
    """Apply changes and re-geocode when any address part changed."""
    address_changed = any(
        field in changes and changes[field] != getattr(restaurant, field) for field in ADDRESS_FIELDS
    )
    for field, value in changes.items():
        setattr(restaurant, field, value)
    if address_changed:
        apply_geocoding(restaurant, geocoder)
    db.add(restaurant)
    db.commit()
    db.refresh(restaurant)
    return restaurant


def find_nearby_restaurants(
    db: Session,
    latitude: float,
    longitude: float,
    *,
    radius_km: float = 10,
    limit: int = 20,
) -> list[tuple[Restaurant, float]]:
    """Return active geocoded restaurants within radius, nearest first."""
    rows = db.scalars(
        select(Restaurant).where(
            Restaurant.is_active.is_(True),
            Restaurant.latitude.is_not(None),
            Restaurant.longitude.is_not(None),
        )
    ).all()
    matches: list[tuple[Restaurant, float]] = []
    for restaurant in rows:
        if not is_valid_coordinates(restaurant.latitude, restaurant.longitude):
            continue
        distance = distance_km(latitude, longitude, restaurant.latitude, restaurant.longitude)
        if distance <= radius_km:
            matches.append((restaurant, distance))
    matches.sort(key=lambda item: (item[1], item[0].id))
    return matches[:limit]


def list_restaurants_missing_coordinates(db: Session) -> list[Restaurant]:
    """Restaurants with no coordinates; zero is treated as missing."""
    return list(
        db.scalars(
            select(Restaurant)
            .where(
                or_(
                    Restaurant.latitude.is_(None),
                    Restaurant.longitude.is_(None),
                    Restaurant.latitude == 0,
                    Restaurant.longitude == 0,
                )
            )
            .order_by(Restaurant.id.asc())
        ).all()
    )


def backfill_coordinates(
    db: Session,
    geocoder: Geocoder,
    *,
    delay_seconds: float = 0.2,
    dry_run: bool = False,
) -> tuple[int, int]:
    """Geocode restaurants missing coordinates; return (succeeded, failed)."""
    succeeded = 0
    failed = 0
    for index, restaurant in enumerate(list_restaurants_missing_coordinates(db)):
        if index and delay_seconds > 0:
            time.sleep(delay_seconds)
        result = geocoder.geocode(_restaurant_address(restaurant))
        if result is None:
            logger.warning("[BACKFILL] Failed to geocode restaurant_id=%s (%s)", restaurant.id, restaurant.name)
            failed += 1
            continue
        logger.info(
            "[BACKFILL] Geocoded restaurant_id=%s: %s, %s", restaurant.id, result.latitude, result.longitude
        )
        succeeded += 1
        if not dry_run:
            restaurant.latitude = result.latitude
            restaurant.longitude = result.longitude
            restaurant.formatted_address = result.formatted_address
            db.add(restaurant)
            db.commit()
    return succeeded, failed
