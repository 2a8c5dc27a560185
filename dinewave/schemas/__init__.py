"""Schema exports."""

from dinewave.schemas.favorite import FavoriteListResponse, FavoriteToggleRequest, FavoriteToggleResponse
from dinewave.schemas.geocoding import ReverseGeocodeResponse
from dinewave.schemas.message import (
    BroadcastSummary,
    InboxMessageRead,
    InboxResponse,
    MessageCreate,
    MessageCreateResponse,
    MessageListResponse,
    MessageRead,
    MessageStatsResponse,
    MessageUpdate,
    OfferDetails,
    TrackEventRequest,
    TrackEventResponse,
)
from dinewave.schemas.notification import NotificationCountResponse, NotificationRead, NotificationReadAllResponse
from dinewave.schemas.restaurant import (
    NearbyRestaurantRead,
    NearbyRestaurantsResponse,
    RestaurantCreate,
    RestaurantRead,
    RestaurantUpdate,
)
from dinewave.schemas.user import UserOnboard, UserOriginRead, UserOriginResponse, UserOriginUpsert, UserRead

__all__ = [
    "BroadcastSummary",
    "FavoriteListResponse",
    "FavoriteToggleRequest",
    "FavoriteToggleResponse",
    "InboxMessageRead",
    "InboxResponse",
    "MessageCreate",
    "MessageCreateResponse",
    "MessageListResponse",
    "MessageRead",
    "MessageStatsResponse",
    "MessageUpdate",
    "NearbyRestaurantRead",
    "NearbyRestaurantsResponse",
    "NotificationCountResponse",
    "NotificationRead",
    "NotificationReadAllResponse",
    "OfferDetails",
    "RestaurantCreate",
    "RestaurantRead",
    "RestaurantUpdate",
    "ReverseGeocodeResponse",
    "TrackEventRequest",
    "TrackEventResponse",
    "UserOnboard",
    "UserOriginRead",
    "UserOriginResponse",
    "UserOriginUpsert",
    "UserRead",
]
