"""Restaurant listing and proximity search endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from dinewave.core.security import get_current_user
from dinewave.db.session import get_db
from dinewave.models.restaurant import Restaurant
from dinewave.models.user import User
from dinewave.schemas.restaurant import (
    NearbyRestaurantRead,
    NearbyRestaurantsResponse,
    RestaurantCreate,
    RestaurantRead,
    RestaurantUpdate,
)
from dinewave.services.geo import is_valid_coordinates
from dinewave.services.geocoding import Geocoder, get_geocoder
from dinewave.services.restaurant_service import (
    create_restaurant,
    find_nearby_restaurants,
    get_restaurant,
    update_restaurant,
)
from dinewave.services.security_guards import ensure_restaurant_owner, ensure_user_type

router: APIRouter = APIRouter()


@router.post("", response_model=RestaurantRead, status_code=status.HTTP_201_CREATED)
def create(
    payload: RestaurantCreate,
    db: Session = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
    current_user: User = Depends(get_current_user),
) -> Restaurant:
    """Create a restaurant; an address that cannot be geocoded is stored without coordinates."""
    ensure_user_type(current_user, {"restaurant_owner"})
    return create_restaurant(db, geocoder, owner_id=current_user.id, fields=payload.model_dump())


@router.get("/nearby", response_model=NearbyRestaurantsResponse)
def nearby(
    lat: float = Query(),
    lng: float = Query(),
    radius: float = Query(10, gt=0, le=100),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> NearbyRestaurantsResponse:
    """Return active restaurants within radius km of a point, nearest first."""
    if not is_valid_coordinates(lat, lng):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Latitude and longitude are required")
    matches = find_nearby_restaurants(db, lat, lng, radius_km=radius, limit=limit)
    items = [
        NearbyRestaurantRead(**RestaurantRead.model_validate(restaurant).model_dump(), distance_km=distance)
        for restaurant, distance in matches
    ]
    return NearbyRestaurantsResponse(restaurants=items, latitude=lat, longitude=lng, radius_km=radius, total=len(items))


@router.get("/{restaurant_id}", response_model=RestaurantRead)
def read(restaurant_id: int, db: Session = Depends(get_db)) -> Restaurant:
    restaurant = get_restaurant(db, restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found")
    return restaurant


@router.put("/{restaurant_id}", response_model=RestaurantRead)
def update(
    restaurant_id: int,
    payload: RestaurantUpdate,
    db: Session = Depends(get_db),
    geocoder: Geocoder = Depends(get_geocoder),
    current_user: User = Depends(get_current_user),
) -> Restaurant:
    """Edit a restaurant; changing any address part re-geocodes it."""
    restaurant = get_restaurant(db, restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found")
    ensure_restaurant_owner(current_user, restaurant)
    return update_restaurant(db, geocoder, restaurant, payload.model_dump(exclude_unset=True))
