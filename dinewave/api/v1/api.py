"""API v1 router composition."""

from fastapi import APIRouter

from dinewave.api.v1.endpoints import favorites, geocoding, messages, notifications, origin, restaurants, user_messages, users

api_router: APIRouter = APIRouter()
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(restaurants.router, prefix="/restaurants", tags=["restaurants"])
api_router.include_router(messages.router, prefix="/restaurant/messages", tags=["messages"])
api_router.include_router(user_messages.router, prefix="/user/messages", tags=["inbox"])
api_router.include_router(origin.router, prefix="/user/origin", tags=["origin"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(geocoding.router, prefix="/geocoding", tags=["geocoding"])
