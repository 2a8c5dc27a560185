"""User and origin-location ORM models."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dinewave.db.base import Base

USER_TYPES = ("customer", "restaurant_owner")


def normalize_user_type(value: str | None) -> str:
    """Return canonical user type or raise ValueError for unknown values."""
    normalized = str(value or "").strip().lower().replace("-", "_")
    if normalized == "owner":
        normalized = "restaurant_owner"
    if normalized not in USER_TYPES:
        raise ValueError(f"Unsupported user type: {value!r}")
    return normalized


class User(Base):
    """Account mirrored from the external identity provider; id is the provider subject."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    user_type: Mapped[str] = mapped_column(Enum(*USER_TYPES, name="user_type"), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_onboarding_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    origin: Mapped["UserOrigin | None"] = relationship(back_populates="user", uselist=False, cascade="all, delete-orphan")


class UserOrigin(Base):
    """Fixed home location of a user, the candidate pool for nearby targeting."""

    __tablename__ = "user_origins"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    origin_address: Mapped[str] = mapped_column(String(500), nullable=False)
    city: Mapped[str] = mapped_column(String(128), nullable=False)
    state: Mapped[str] = mapped_column(String(128), nullable=False)
    country: Mapped[str] = mapped_column(String(128), nullable=False, default="India")
    zip_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    geocoding_source: Mapped[str] = mapped_column(String(32), nullable=False, default="api")
    geocoding_accuracy: Mapped[str | None] = mapped_column(String(16), nullable=True)
    place_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    formatted_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user: Mapped[User] = relationship(back_populates="origin")
