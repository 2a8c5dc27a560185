"""Restaurant message, broadcast and engagement schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from dinewave.core.config import settings


class OfferDetails(BaseModel):
    """Structured offer attached to a message, validated on write and on read."""

    discount_percentage: float | None = Field(default=None, ge=0, le=100)
    valid_until: str | None = None
    conditions: str | None = Field(default=None, max_length=500)
    menu_items: list[str] = Field(default_factory=list)
    minimum_order: float | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class MessageCreate(BaseModel):
    """Payload for broadcasting a message; bounds are enforced by the broadcast service."""

    title: str | None = None
    message: str = ""
    message_type: str = "offer"
    offer_details: dict[str, Any] | None = None
    radius_km: int = settings.message_default_radius_km
    expires_in_hours: int | None = None


class MessageUpdate(BaseModel):
    """Mutable message fields; the recipient snapshot is never retargeted."""

    title: str | None = None
    message: str | None = None
    message_type: str | None = None
    offer_details: dict[str, Any] | None = None
    radius_km: int | None = None
    is_active: bool | None = None


class BroadcastSummary(BaseModel):
    total_recipients: int
    nearby_users: int
    favorite_users: int
    radius_km: int
    restaurant_name: str


class MessageCreateResponse(BaseModel):
    message_id: int
    recipient_count: int
    summary: BroadcastSummary


class MessageRead(BaseModel):
    """Serialized message with delivery counters for the owner dashboard."""

    id: int
    restaurant_id: int
    sender_id: str
    title: str
    message: str
    message_type: str
    offer_details: OfferDetails
    radius_km: int
    is_active: bool
    is_currently_active: bool
    created_at: datetime
    updated_at: datetime
    expires_at: datetime | None
    recipient_count: int = 0
    view_count: int = 0
    click_count: int = 0
    nearby_count: int = 0
    favorite_count: int = 0


class MessageListResponse(BaseModel):
    restaurant_id: int
    restaurant_name: str
    messages: list[MessageRead]
    limit: int
    offset: int


class MessageStatsResponse(BaseModel):
    message_id: int
    recipient_count: int
    view_count: int
    click_count: int
    engagement_rate_pct: int


class InboxMessageRead(BaseModel):
    """A received message as seen by its recipient."""

    message_id: int
    recipient_type: str
    distance_km: float | None
    is_read: bool
    read_at: datetime | None
    is_clicked: bool
    clicked_at: datetime | None
    received_at: datetime
    title: str
    message: str
    message_type: str
    offer_details: OfferDetails
    expires_at: datetime | None
    sent_at: datetime
    restaurant_id: int
    restaurant_name: str
    restaurant_city: str | None


class InboxResponse(BaseModel):
    messages: list[InboxMessageRead]
    unread_count: int
    limit: int
    offset: int
    has_more: bool


class TrackEventRequest(BaseModel):
    message_id: int
    action: Literal["read", "click"]


class TrackEventResponse(BaseModel):
    message_id: int
    action: str
    recorded: bool
