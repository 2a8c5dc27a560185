"""View/click tracking on recipient rows and engagement aggregates."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.orm import Session

from dinewave.models import MessageRecipient, Restaurant, RestaurantMessage
from dinewave.utils.time import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageStats:
    recipient_count: int
    view_count: int
    click_count: int
    engagement_rate_pct: int


def engagement_rate_pct(click_count: int, view_count: int) -> int:
    """Clicks per view as a whole percentage, rounded half up; 0 when nothing was viewed."""
    if view_count <= 0:
        return 0
    return math.floor(100 * click_count / view_count + 0.5)


def _recipient_filter(message_id: int, user_id: str):
    return (MessageRecipient.message_id == message_id, MessageRecipient.user_id == user_id)


def record_view(db: Session, message_id: int, user_id: str, now: datetime | None = None) -> bool:
    """Mark the recipient row read once.

    Returns False when the user is not in the message's snapshot or has already
    viewed it; the first read timestamp is never overwritten.
    """
    result = db.execute(
        update(MessageRecipient)
        .where(*_recipient_filter(message_id, user_id), MessageRecipient.is_read.is_(False))
        .values(is_read=True, read_at=now or utcnow())
    )
    db.commit()
    if result.rowcount == 0:
        logger.debug("[ENGAGEMENT] View ignored for message_id=%s user_id=%s", message_id, user_id)
    return result.rowcount > 0


def record_click(db: Session, message_id: int, user_id: str, now: datetime | None = None) -> bool:
    """Mark the recipient row clicked once; an unread row is also marked read."""
    timestamp = now or utcnow()
    result = db.execute(
        update(MessageRecipient)
        .where(*_recipient_filter(message_id, user_id), MessageRecipient.is_clicked.is_(False))
        .values(is_clicked=True, clicked_at=timestamp)
    )
    if result.rowcount > 0:
        db.execute(
            update(MessageRecipient)
            .where(*_recipient_filter(message_id, user_id), MessageRecipient.is_read.is_(False))
            .values(is_read=True, read_at=timestamp)
        )
    db.commit()
    if result.rowcount == 0:
        logger.debug("[ENGAGEMENT] Click ignored for message_id=%s user_id=%s", message_id, user_id)
    return result.rowcount > 0


def get_stats(db: Session, message_id: int) -> MessageStats:
    total, views, clicks = db.execute(
        select(
            func.count(MessageRecipient.id),
            func.count(case((MessageRecipient.is_read.is_(True), 1))),
            func.count(case((MessageRecipient.is_clicked.is_(True), 1))),
        ).where(MessageRecipient.message_id == message_id)
    ).one()
    return MessageStats(
        recipient_count=int(total),
        view_count=int(views),
        click_count=int(clicks),
        engagement_rate_pct=engagement_rate_pct(int(clicks), int(views)),
    )


def _active_inbox_filter(user_id: str, now: datetime):
    return (
        MessageRecipient.user_id == user_id,
        RestaurantMessage.is_active.is_(True),
        or_(RestaurantMessage.expires_at.is_(None), RestaurantMessage.expires_at > now),
    )


def list_user_messages(
    db: Session,
    user_id: str,
    *,
    limit: int = 20,
    offset: int = 0,
    unread_only: bool = False,
    now: datetime | None = None,
) -> list[tuple[MessageRecipient, RestaurantMessage, Restaurant]]:
    """Return the user's currently active received messages, newest first."""
    stmt = (
        select(MessageRecipient, RestaurantMessage, Restaurant)
        .join(RestaurantMessage, RestaurantMessage.id == MessageRecipient.message_id)
        .join(Restaurant, Restaurant.id == RestaurantMessage.restaurant_id)
        .where(*_active_inbox_filter(user_id, now or utcnow()))
    )
    if unread_only:
        stmt = stmt.where(MessageRecipient.is_read.is_(False))
    stmt = stmt.order_by(MessageRecipient.created_at.desc(), MessageRecipient.id.desc()).limit(limit).offset(offset)
    return [(row[0], row[1], row[2]) for row in db.execute(stmt).all()]


def count_unread_messages(db: Session, user_id: str, now: datetime | None = None) -> int:
    return int(
        db.scalar(
            select(func.count(MessageRecipient.id))
            .join(RestaurantMessage, RestaurantMessage.id == MessageRecipient.message_id)
            .where(*_active_inbox_filter(user_id, now or utcnow()), MessageRecipient.is_read.is_(False))
        )
        or 0
    )
