"""User origin (fixed home location) helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from dinewave.core import errors
from dinewave.core.errors import ValidationError
from dinewave.models import UserOrigin
from dinewave.services.geo import is_valid_coordinates

REQUIRED_ORIGIN_FIELDS: tuple[str, ...] = ("origin_address", "city", "state")


def get_origin(db: Session, user_id: str) -> UserOrigin | None:
    return db.scalar(select(UserOrigin).where(UserOrigin.user_id == user_id).limit(1))


def upsert_origin(db: Session, user_id: str, fields: Mapping[str, Any]) -> UserOrigin:
    """Create or replace the user's origin after validating address and coordinates."""
    for field in REQUIRED_ORIGIN_FIELDS:
        if not str(fields.get(field) or "").strip():
            raise ValidationError(errors.MISSING_FIELD, f"{field} is required", field=field)
    if not is_valid_coordinates(fields.get("latitude"), fields.get("longitude")):
        raise ValidationError(errors.INVALID_COORDINATES, "Latitude and longitude are required and must be valid", field="latitude")

    origin = get_origin(db, user_id)
    if origin is None:
        origin = UserOrigin(user_id=user_id)
    for field, value in fields.items():
        setattr(origin, field, value)
    db.add(origin)
    db.commit()
    db.refresh(origin)
    return origin


def delete_origin(db: Session, user_id: str) -> bool:
    origin = get_origin(db, user_id)
    if origin is None:
        return False
    db.delete(origin)
    db.commit()
    return True
