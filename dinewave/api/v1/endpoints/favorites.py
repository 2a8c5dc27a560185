"""Favorite restaurant toggle and listing."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dinewave.core.security import get_current_user
from dinewave.db.session import get_db
from dinewave.models.user import User
from dinewave.schemas.favorite import FavoriteListResponse, FavoriteToggleRequest, FavoriteToggleResponse
from dinewave.schemas.restaurant import RestaurantRead
from dinewave.services.favorite_service import list_favorite_restaurants, toggle_restaurant_favorite

router: APIRouter = APIRouter()


@router.post("", response_model=FavoriteToggleResponse)
def toggle_favorite(
    payload: FavoriteToggleRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> FavoriteToggleResponse:
    added = toggle_restaurant_favorite(db, current_user.id, payload.restaurant_id)
    return FavoriteToggleResponse(restaurant_id=payload.restaurant_id, action="added" if added else "removed")


@router.get("", response_model=FavoriteListResponse)
def list_favorites(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> FavoriteListResponse:
    restaurants = list_favorite_restaurants(db, current_user.id)
    return FavoriteListResponse(restaurants=[RestaurantRead.model_validate(r) for r in restaurants])
