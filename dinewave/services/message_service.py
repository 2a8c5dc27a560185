"""Broadcast, edit and listing of restaurant messages."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import case, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dinewave.core import errors
from dinewave.core.errors import MessageNotFoundError, PersistenceError, ValidationError
from dinewave.models import Favorite, MessageRecipient, Notification, Restaurant, RestaurantMessage, User, UserOrigin
from dinewave.models.message import MESSAGE_TYPES, RECIPIENT_FAVORITE, RECIPIENT_NEARBY
from dinewave.schemas.message import OfferDetails
from dinewave.services.geo import Coordinate
from dinewave.services.notification_service import create_message_notifications
from dinewave.services.recipient_resolver import Candidate, Recipient, resolve_recipients
from dinewave.utils.time import as_utc, utcnow

logger = logging.getLogger(__name__)

MESSAGE_MAX_LENGTH: int = 500
TITLE_MAX_LENGTH: int = 100
MIN_RADIUS_KM: int = 1
MAX_RADIUS_KM: int = 25


@dataclass
class BroadcastResult:
    message: RestaurantMessage
    recipients: list[Recipient]
    radius_km: int

    @property
    def recipient_count(self) -> int:
        return len(self.recipients)

    @property
    def nearby_count(self) -> int:
        return sum(1 for r in self.recipients if r.recipient_type == RECIPIENT_NEARBY)

    @property
    def favorite_count(self) -> int:
        return sum(1 for r in self.recipients if r.recipient_type == RECIPIENT_FAVORITE)


@dataclass
class MessageSummary:
    message: RestaurantMessage
    recipient_count: int
    view_count: int
    click_count: int
    nearby_count: int
    favorite_count: int


def validate_body(body: str | None) -> str:
    text = (body or "").strip()
    if not text or len(text) > MESSAGE_MAX_LENGTH:
        raise ValidationError(
            errors.EMPTY_OR_TOO_LONG_MESSAGE,
            f"Message must be between 1 and {MESSAGE_MAX_LENGTH} characters",
            field="message",
        )
    return text


def validate_radius(radius_km: Any) -> int:
    if isinstance(radius_km, bool) or not isinstance(radius_km, int) or not MIN_RADIUS_KM <= radius_km <= MAX_RADIUS_KM:
        raise ValidationError(
            errors.RADIUS_OUT_OF_RANGE,
            f"Radius must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM} km",
            field="radius_km",
        )
    return radius_km


def validate_title(title: str | None, body: str) -> str:
    """Return the stored title; a blank title falls back to the first line of the body."""
    text = (title or "").strip()
    if not text:
        return body.splitlines()[0].strip()[:TITLE_MAX_LENGTH]
    if len(text) > TITLE_MAX_LENGTH:
        raise ValidationError(
            errors.TITLE_TOO_LONG,
            f"Title must be at most {TITLE_MAX_LENGTH} characters",
            field="title",
        )
    return text


def validate_message_type(message_type: str | None) -> str:
    normalized = str(message_type or "").strip().lower()
    if normalized not in MESSAGE_TYPES:
        raise ValidationError(
            errors.INVALID_MESSAGE_TYPE,
            f"Message type must be one of: {', '.join(MESSAGE_TYPES)}",
            field="message_type",
        )
    return normalized


def validate_offer_details(offer_details: Mapping[str, Any] | OfferDetails | None) -> dict[str, Any]:
    """Validate offer details into the JSON shape stored on the message."""
    if offer_details is None:
        return {}
    try:
        details = offer_details if isinstance(offer_details, OfferDetails) else OfferDetails.model_validate(offer_details)
    except PydanticValidationError as exc:
        raise ValidationError(errors.INVALID_OFFER_DETAILS, "Offer details are invalid", field="offer_details") from exc
    return details.model_dump(mode="json", exclude_none=True)


def validate_expiry(expires_in_hours: int | None) -> int | None:
    if expires_in_hours is None:
        return None
    if isinstance(expires_in_hours, bool) or not isinstance(expires_in_hours, int) or expires_in_hours <= 0:
        raise ValidationError(errors.INVALID_EXPIRY, "Expiry must be a positive number of hours", field="expires_in_hours")
    return expires_in_hours


def read_offer_details(message: RestaurantMessage) -> OfferDetails:
    """Parse stored offer details; rows written before validation existed degrade to empty."""
    try:
        return OfferDetails.model_validate(message.offer_details or {})
    except PydanticValidationError:
        logger.warning("[MESSAGES] Stored offer details for message_id=%s are malformed; ignoring.", message.id)
        return OfferDetails()


def is_message_currently_active(message: RestaurantMessage, now: datetime | None = None) -> bool:
    """Owner toggle and expiry combined; expiry is evaluated lazily by readers."""
    if not message.is_active:
        return False
    expires_at = as_utc(message.expires_at)
    return expires_at is None or expires_at > (now or utcnow())


def load_candidates(db: Session, exclude_user_id: str) -> list[Candidate]:
    """Customers with a stored origin, excluding the sender."""
    rows = db.execute(
        select(UserOrigin.user_id, UserOrigin.latitude, UserOrigin.longitude)
        .join(User, User.id == UserOrigin.user_id)
        .where(User.user_type == "customer", User.id != exclude_user_id)
        .order_by(UserOrigin.user_id.asc())
    ).all()
    return [Candidate(user_id=row.user_id, latitude=row.latitude, longitude=row.longitude) for row in rows]


def load_favoriter_ids(db: Session, restaurant_id: int) -> list[str]:
    return list(
        db.scalars(
            select(Favorite.user_id)
            .where(Favorite.restaurant_id == restaurant_id)
            .distinct()
            .order_by(Favorite.user_id.asc())
        ).all()
    )


def create_message(
    db: Session,
    *,
    restaurant: Restaurant,
    sender_id: str,
    body: str | None,
    radius_km: Any,
    title: str | None = None,
    message_type: str | None = "offer",
    offer_details: Mapping[str, Any] | OfferDetails | None = None,
    expires_in_hours: int | None = None,
    now: datetime | None = None,
) -> BroadcastResult:
    """Validate, resolve recipients and persist the message with its recipient snapshot.

    Reading the candidate pool and writing the message, recipients and
    notifications share one transaction; on failure nothing is kept.
    """
    text = validate_body(body)
    radius = validate_radius(radius_km)
    stored_title = validate_title(title, text)
    kind = validate_message_type(message_type)
    details = validate_offer_details(offer_details)
    hours = validate_expiry(expires_in_hours)

    created_at = now or utcnow()
    expires_at = created_at + timedelta(hours=hours) if hours else None

    try:
        candidates = load_candidates(db, exclude_user_id=sender_id)
        favoriters = load_favoriter_ids(db, restaurant_id=restaurant.id)
        recipients = resolve_recipients(
            Coordinate(restaurant.latitude, restaurant.longitude),
            radius,
            candidates,
            favoriters,
        )

        message = RestaurantMessage(
            restaurant_id=restaurant.id,
            sender_id=sender_id,
            title=stored_title,
            message=text,
            message_type=kind,
            offer_details=details,
            target_radius_km=radius,
            is_active=True,
            created_at=created_at,
            updated_at=created_at,
            expires_at=expires_at,
        )
        db.add(message)
        db.flush()

        db.add_all(
            [
                MessageRecipient(
                    message_id=message.id,
                    user_id=recipient.user_id,
                    recipient_type=recipient.recipient_type,
                    distance_km=recipient.distance_km,
                    created_at=created_at,
                )
                for recipient in recipients
            ]
        )
        create_message_notifications(
            db,
            message=message,
            restaurant=restaurant,
            user_ids=[recipient.user_id for recipient in recipients],
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[BROADCAST] Failed to persist message for restaurant_id=%s", restaurant.id)
        raise PersistenceError(errors.MSG_SEND_FAILED) from exc

    db.refresh(message)
    result = BroadcastResult(message=message, recipients=recipients, radius_km=radius)
    logger.info(
        "[BROADCAST] restaurant_id=%s message_id=%s recipients=%s nearby=%s favorite=%s radius_km=%s",
        restaurant.id,
        message.id,
        result.recipient_count,
        result.nearby_count,
        result.favorite_count,
        radius,
    )
    return result


def get_message_for_restaurant(db: Session, message_id: int, restaurant_id: int) -> RestaurantMessage:
    """Return the message if it belongs to restaurant; otherwise fail closed with not-found."""
    message: RestaurantMessage | None = db.get(RestaurantMessage, message_id)
    if message is None or message.restaurant_id != restaurant_id:
        raise MessageNotFoundError()
    return message


def update_message(
    db: Session,
    message: RestaurantMessage,
    changes: Mapping[str, Any],
    now: datetime | None = None,
) -> RestaurantMessage:
    """Apply owner edits. Recipients stay exactly as they were broadcast."""
    body = validate_body(changes["message"]) if "message" in changes else message.message
    updates: dict[str, Any] = {}
    if "message" in changes:
        updates["message"] = body
    if "title" in changes:
        updates["title"] = validate_title(changes["title"], body)
    if "radius_km" in changes:
        updates["target_radius_km"] = validate_radius(changes["radius_km"])
    if "message_type" in changes:
        updates["message_type"] = validate_message_type(changes["message_type"])
    if "offer_details" in changes:
        updates["offer_details"] = validate_offer_details(changes["offer_details"])
    if changes.get("is_active") is not None:
        updates["is_active"] = bool(changes["is_active"])

    for field, value in updates.items():
        setattr(message, field, value)
    message.updated_at = now or utcnow()
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def toggle_message_active(db: Session, message: RestaurantMessage) -> RestaurantMessage:
    """Flip the active flag; expiry is left untouched."""
    message.is_active = not message.is_active
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def delete_message(db: Session, message: RestaurantMessage) -> None:
    """Delete the message together with its recipient rows and notifications."""
    db.execute(delete(Notification).where(Notification.message_id == message.id))
    db.delete(message)
    db.commit()


def list_messages_for_restaurant(
    db: Session,
    restaurant_id: int,
    *,
    limit: int = 20,
    offset: int = 0,
) -> list[MessageSummary]:
    """Return messages newest first with delivery counters."""
    stmt = (
        select(
            RestaurantMessage,
            func.count(MessageRecipient.id),
            func.count(case((MessageRecipient.is_read.is_(True), 1))),
            func.count(case((MessageRecipient.is_clicked.is_(True), 1))),
            func.count(case((MessageRecipient.recipient_type == RECIPIENT_NEARBY, 1))),
            func.count(case((MessageRecipient.recipient_type == RECIPIENT_FAVORITE, 1))),
        )
        .outerjoin(MessageRecipient, MessageRecipient.message_id == RestaurantMessage.id)
        .where(RestaurantMessage.restaurant_id == restaurant_id)
        .group_by(RestaurantMessage.id)
        .order_by(RestaurantMessage.created_at.desc(), RestaurantMessage.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [
        MessageSummary(
            message=message,
            recipient_count=int(total),
            view_count=int(views),
            click_count=int(clicks),
            nearby_count=int(nearby),
            favorite_count=int(favorite),
        )
        for message, total, views, clicks, nearby, favorite in db.execute(stmt).all()
    ]
