"""Recipient inbox and view/click tracking."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dinewave.core.security import get_current_user
from dinewave.db.session import get_db
from dinewave.models.user import User
from dinewave.schemas.message import InboxMessageRead, InboxResponse, TrackEventRequest, TrackEventResponse
from dinewave.services import engagement_service
from dinewave.services.message_service import read_offer_details
from dinewave.utils.time import as_utc

router: APIRouter = APIRouter()


@router.get("", response_model=InboxResponse)
def inbox(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InboxResponse:
    """Active messages the caller received, newest first."""
    rows = engagement_service.list_user_messages(
        db, current_user.id, limit=limit, offset=offset, unread_only=unread
    )
    messages = [
        InboxMessageRead(
            message_id=message.id,
            recipient_type=recipient.recipient_type,
            distance_km=recipient.distance_km,
            is_read=recipient.is_read,
            read_at=as_utc(recipient.read_at),
            is_clicked=recipient.is_clicked,
            clicked_at=as_utc(recipient.clicked_at),
            received_at=as_utc(recipient.created_at),
            title=message.title,
            message=message.message,
            message_type=message.message_type,
            offer_details=read_offer_details(message),
            expires_at=as_utc(message.expires_at),
            sent_at=as_utc(message.created_at),
            restaurant_id=restaurant.id,
            restaurant_name=restaurant.name,
            restaurant_city=restaurant.city,
        )
        for recipient, message, restaurant in rows
    ]
    return InboxResponse(
        messages=messages,
        unread_count=engagement_service.count_unread_messages(db, current_user.id),
        limit=limit,
        offset=offset,
        has_more=len(messages) == limit,
    )


def _track(db: Session, user: User, message_id: int, action: str) -> TrackEventResponse:
    if action == "click":
        recorded = engagement_service.record_click(db, message_id, user.id)
    else:
        recorded = engagement_service.record_view(db, message_id, user.id)
    return TrackEventResponse(message_id=message_id, action=action, recorded=recorded)


@router.patch("", response_model=TrackEventResponse)
def track_event(
    payload: TrackEventRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TrackEventResponse:
    """Record a read or click; repeated or stray events are accepted and ignored."""
    return _track(db, current_user, payload.message_id, payload.action)


@router.post("/{message_id}/view", response_model=TrackEventResponse)
def record_view(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TrackEventResponse:
    return _track(db, current_user, message_id, "read")


@router.post("/{message_id}/click", response_model=TrackEventResponse)
def record_click(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TrackEventResponse:
    return _track(db, current_user, message_id, "click")
