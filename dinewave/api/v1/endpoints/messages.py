"""Owner-facing message broadcast and management endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from dinewave.core.security import get_current_user
from dinewave.db.session import get_db
from dinewave.models.message import RestaurantMessage
from dinewave.models.user import User
from dinewave.schemas.message import (
    BroadcastSummary,
    MessageCreate,
    MessageCreateResponse,
    MessageListResponse,
    MessageRead,
    MessageStatsResponse,
    MessageUpdate,
)
from dinewave.services import engagement_service, message_service
from dinewave.services.security_guards import require_owned_restaurant
from dinewave.utils.time import as_utc

router: APIRouter = APIRouter()


def _message_read(message: RestaurantMessage, **counts: int) -> MessageRead:
    return MessageRead(
        id=message.id,
        restaurant_id=message.restaurant_id,
        sender_id=message.sender_id,
        title=message.title,
        message=message.message,
        message_type=message.message_type,
        offer_details=message_service.read_offer_details(message),
        radius_km=message.target_radius_km,
        is_active=message.is_active,
        is_currently_active=message_service.is_message_currently_active(message),
        created_at=as_utc(message.created_at),
        updated_at=as_utc(message.updated_at),
        expires_at=as_utc(message.expires_at),
        **counts,
    )


@router.post("", response_model=MessageCreateResponse, status_code=status.HTTP_201_CREATED)
def broadcast(
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageCreateResponse:
    """Broadcast a message to nearby customers and the restaurant's favoriters."""
    restaurant = require_owned_restaurant(db, current_user)
    result = message_service.create_message(
        db,
        restaurant=restaurant,
        sender_id=current_user.id,
        body=payload.message,
        radius_km=payload.radius_km,
        title=payload.title,
        message_type=payload.message_type,
        offer_details=payload.offer_details,
        expires_in_hours=payload.expires_in_hours,
    )
    return MessageCreateResponse(
        message_id=result.message.id,
        recipient_count=result.recipient_count,
        summary=BroadcastSummary(
            total_recipients=result.recipient_count,
            nearby_users=result.nearby_count,
            favorite_users=result.favorite_count,
            radius_km=result.radius_km,
            restaurant_name=restaurant.name,
        ),
    )


@router.get("", response_model=MessageListResponse)
def list_messages(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageListResponse:
    restaurant = require_owned_restaurant(db, current_user)
    summaries = message_service.list_messages_for_restaurant(db, restaurant.id, limit=limit, offset=offset)
    return MessageListResponse(
        restaurant_id=restaurant.id,
        restaurant_name=restaurant.name,
        messages=[
            _message_read(
                summary.message,
                recipient_count=summary.recipient_count,
                view_count=summary.view_count,
                click_count=summary.click_count,
                nearby_count=summary.nearby_count,
                favorite_count=summary.favorite_count,
            )
            for summary in summaries
        ],
        limit=limit,
        offset=offset,
    )


@router.get("/{message_id}/stats", response_model=MessageStatsResponse)
def message_stats(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageStatsResponse:
    """Delivery counters for one of the owner's messages."""
    restaurant = require_owned_restaurant(db, current_user)
    message = message_service.get_message_for_restaurant(db, message_id, restaurant.id)
    stats = engagement_service.get_stats(db, message.id)
    return MessageStatsResponse(
        message_id=message.id,
        recipient_count=stats.recipient_count,
        view_count=stats.view_count,
        click_count=stats.click_count,
        engagement_rate_pct=stats.engagement_rate_pct,
    )


@router.put("/{message_id}", response_model=MessageRead)
def update_message(
    message_id: int,
    payload: MessageUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageRead:
    restaurant = require_owned_restaurant(db, current_user)
    message = message_service.get_message_for_restaurant(db, message_id, restaurant.id)
    updated = message_service.update_message(db, message, payload.model_dump(exclude_unset=True))
    return _message_read(updated)


@router.post("/{message_id}/toggle", response_model=MessageRead)
def toggle_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageRead:
    restaurant = require_owned_restaurant(db, current_user)
    message = message_service.get_message_for_restaurant(db, message_id, restaurant.id)
    return _message_read(message_service.toggle_message_active(db, message))


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    restaurant = require_owned_restaurant(db, current_user)
    message = message_service.get_message_for_restaurant(db, message_id, restaurant.id)
    message_service.delete_message(db, message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
