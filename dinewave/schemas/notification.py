"""Notification schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class NotificationRead(BaseModel):
    id: int
    type: str
    title: str
    message: str
    data: dict[str, Any] | None
    is_read: bool
    created_at: datetime
    expires_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class NotificationCountResponse(BaseModel):
    unread_count: int


class NotificationReadAllResponse(BaseModel):
    updated: int
