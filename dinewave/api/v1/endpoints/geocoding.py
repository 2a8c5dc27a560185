"""Coordinate to address lookup for location pickers."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dinewave.schemas.geocoding import ReverseGeocodeResponse
from dinewave.services.geo import is_valid_coordinates
from dinewave.services.geocoding import Geocoder, get_geocoder

router: APIRouter = APIRouter()


@router.get("/reverse", response_model=ReverseGeocodeResponse)
def reverse(
    lat: float = Query(),
    lng: float = Query(),
    geocoder: Geocoder = Depends(get_geocoder),
) -> ReverseGeocodeResponse:
    """Resolve a point to address parts; 404 when the provider has nothing for it."""
    if not is_valid_coordinates(lat, lng):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid coordinates")
    result = geocoder.reverse_geocode(lat, lng)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No address found for these coordinates")
    return ReverseGeocodeResponse(
        latitude=lat,
        longitude=lng,
        formatted_address=result.formatted_address,
        city=result.city,
        state=result.state,
        country=result.country,
        zip_code=result.zip_code,
    )
