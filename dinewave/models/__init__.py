"""Application models package."""

from dinewave.models.favorite import Favorite
from dinewave.models.message import MessageRecipient, RestaurantMessage
from dinewave.models.notification import Notification
from dinewave.models.restaurant import Restaurant
from dinewave.models.user import User, UserOrigin

__all__ = [
    "User", "UserOrigin", "Restaurant", "Favorite", "RestaurantMessage", "MessageRecipient", "Notification",
]
