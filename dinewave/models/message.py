"""Restaurant broadcast message and recipient snapshot ORM models."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dinewave.db.base import Base

MESSAGE_TYPES = ("offer", "announcement", "promotion")
RECIPIENT_NEARBY = "nearby"
RECIPIENT_FAVORITE = "favorite"
RECIPIENT_TYPES = (RECIPIENT_NEARBY, RECIPIENT_FAVORITE)


class RestaurantMessage(Base):
    """Offer or announcement broadcast by a restaurant owner."""

    __tablename__ = "restaurant_messages"

    id: Mapped[int] = mapped_column(primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    message_type: Mapped[str] = mapped_column(Enum(*MESSAGE_TYPES, name="message_type"), nullable=False, default="offer")
    offer_details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    target_radius_km: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    restaurant: Mapped["Restaurant"] = relationship(back_populates="messages")
    recipients: Mapped[list["MessageRecipient"]] = relationship(
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="MessageRecipient.user_id",
    )


class MessageRecipient(Base):
    """One user selected when the message was broadcast."""

    __tablename__ = "message_recipients"
    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_message_recipient"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    message_id: Mapped[int] = mapped_column(ForeignKey("restaurant_messages.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_type: Mapped[str] = mapped_column(Enum(*RECIPIENT_TYPES, name="recipient_type"), nullable=False)
    # NULL for favorites: they are included regardless of distance.
    distance_km: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_clicked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    clicked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    message: Mapped[RestaurantMessage] = relationship(back_populates="recipients")
