"""Restaurant favorites; favoriters receive every broadcast of the restaurant."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from dinewave.core.errors import RestaurantNotFoundError
from dinewave.models import Favorite, Restaurant


def toggle_restaurant_favorite(db: Session, user_id: str, restaurant_id: int) -> bool:
    """Add or remove the favorite; return True when it was added."""
    if db.get(Restaurant, restaurant_id) is None:
        raise RestaurantNotFoundError()
    existing = db.scalar(
        select(Favorite).where(Favorite.user_id == user_id, Favorite.restaurant_id == restaurant_id).limit(1)
    )
    if existing is not None:
        db.delete(existing)
        db.commit()
        return False
    db.add(Favorite(user_id=user_id, restaurant_id=restaurant_id))
    db.commit()
    return True


def list_favorite_restaurants(db: Session, user_id: str) -> list[Restaurant]:
    return list(
        db.scalars(
            select(Restaurant)
            .join(Favorite, Favorite.restaurant_id == Restaurant.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        ).all()
    )
