"""In-app notifications: broadcast fan-out and the user's notification inbox."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from dinewave.models import Notification, Restaurant, RestaurantMessage
from dinewave.utils.time import utcnow

NOTIFICATION_FILTERS: set[str] = {"all", "unread", "messages"}


def create_message_notifications(
    db: Session,
    *,
    message: RestaurantMessage,
    restaurant: Restaurant,
    user_ids: Iterable[str],
) -> None:
    """Stage one notification per recipient; the caller owns the transaction."""
    db.add_all(
        [
            Notification(
                user_id=user_id,
                message_id=message.id,
                type="message",
                title=f"New {message.message_type} from {restaurant.name}",
                message=message.title,
                data={
                    "restaurant_id": restaurant.id,
                    "message_id": message.id,
                    "url": f"/restaurant/{restaurant.id}",
                },
                expires_at=message.expires_at,
            )
            for user_id in user_ids
        ]
    )


def _visible(user_id: str, now: datetime):
    return (
        Notification.user_id == user_id,
        Notification.is_deleted.is_(False),
        or_(Notification.expires_at.is_(None), Notification.expires_at > now),
    )


def list_notifications(
    db: Session,
    user_id: str,
    *,
    filter_by: str = "all",
    limit: int = 20,
    offset: int = 0,
    now: datetime | None = None,
) -> list[Notification]:
    """Return visible notifications newest first."""
    stmt = select(Notification).where(*_visible(user_id, now or utcnow()))
    if filter_by == "unread":
        stmt = stmt.where(Notification.is_read.is_(False))
    elif filter_by == "messages":
        stmt = stmt.where(Notification.type == "message")
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).offset(offset)
    return list(db.scalars(stmt).all())


def count_unread(db: Session, user_id: str, now: datetime | None = None) -> int:
    return int(
        db.scalar(
            select(func.count(Notification.id)).where(
                *_visible(user_id, now or utcnow()),
                Notification.is_read.is_(False),
            )
        )
        or 0
    )


def mark_read(db: Session, user_id: str, notification_id: int, now: datetime | None = None) -> bool:
    """Mark one of the user's notifications read; False when it is not theirs or already read."""
    result = db.execute(
        update(Notification)
        .where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True, read_at=now or utcnow())
    )
    db.commit()
    return result.rowcount > 0


def mark_all_read(db: Session, user_id: str, now: datetime | None = None) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=now or utcnow())
    )
    db.commit()
    return int(result.rowcount)
