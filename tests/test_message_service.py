from datetime import timedelta
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from dinewave.core.errors import MessageNotFoundError, PersistenceError, ValidationError
from dinewave.db.session import Database
from dinewave.models import Favorite, MessageRecipient, Notification, Restaurant, RestaurantMessage, User, UserOrigin
from dinewave.services import message_service, notification_service
from dinewave.utils.time import utcnow

RESTAURANT_LAT = 12.9716
RESTAURANT_LNG = 77.5946


def _database(tmp_path: Path) -> Database:
    database = Database(f"sqlite:///{tmp_path / 'messages.db'}")
    database.connect()
    database.create_all()
    return database


def _customer(db, user_id: str, lat_offset: float | None = None) -> User:
    user = User(id=user_id, email=f"{user_id}@example.com", user_type="customer")
    db.add(user)
    if lat_offset is not None:
        db.add(
            UserOrigin(
                user_id=user_id,
                origin_address="Somewhere",
                city="Bengaluru",
                state="Karnataka",
                latitude=RESTAURANT_LAT + lat_offset,
                longitude=RESTAURANT_LNG,
            )
        )
    return user


def _seed(db, *, geocoded: bool = True) -> Restaurant:
    db.add(User(id="owner", email="owner@example.com", user_type="restaurant_owner"))
    restaurant = Restaurant(
        owner_id="owner",
        name="Dosa Corner",
        address="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        zip_code="560001",
        latitude=RESTAURANT_LAT if geocoded else None,
        longitude=RESTAURANT_LNG if geocoded else None,
    )
    db.add(restaurant)
    _customer(db, "u-near", 0.017986)
    _customer(db, "u-edge", 0.044966)
    _customer(db, "u-far", 0.065650)
    _customer(db, "u-fan", 0.5)
    db.flush()
    db.add(Favorite(user_id="u-fan", restaurant_id=restaurant.id))
    db.commit()
    return restaurant


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def test_broadcast_selects_nearby_and_favorite_recipients(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)

        result = message_service.create_message(
            db,
            restaurant=restaurant,
            sender_id="owner",
            body="20% off all dosas today",
            radius_km=5,
        )

        assert result.recipient_count == 3
        assert result.nearby_count == 2
        assert result.favorite_count == 1
        assert result.message.title == "20% off all dosas today"
        rows = db.scalars(
            select(MessageRecipient).where(MessageRecipient.message_id == result.message.id).order_by(MessageRecipient.user_id)
        ).all()
        assert [(r.user_id, r.recipient_type, r.distance_km) for r in rows] == [
            ("u-edge", "nearby", 5.0),
            ("u-fan", "favorite", None),
            ("u-near", "nearby", 2.0),
        ]
        assert _count(db, Notification) == 3
    database.disconnect()


def test_sender_and_owners_are_not_candidates(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        db.add(
            UserOrigin(
                user_id="owner",
                origin_address="Upstairs",
                city="Bengaluru",
                state="Karnataka",
                latitude=RESTAURANT_LAT,
                longitude=RESTAURANT_LNG,
            )
        )
        db.commit()

        result = message_service.create_message(
            db, restaurant=restaurant, sender_id="owner", body="Hello", radius_km=1
        )

        assert [r.user_id for r in result.recipients] == ["u-fan"]
    database.disconnect()


def test_restaurant_without_coordinates_reaches_favoriters_only(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db, geocoded=False)

        result = message_service.create_message(
            db, restaurant=restaurant, sender_id="owner", body="Hello", radius_km=25
        )

        assert [(r.user_id, r.recipient_type) for r in result.recipients] == [("u-fan", "favorite")]
    database.disconnect()


@pytest.mark.parametrize(
    ("kwargs", "code"),
    [
        ({"body": "", "radius_km": 5}, "EMPTY_OR_TOO_LONG_MESSAGE"),
        ({"body": "   ", "radius_km": 5}, "EMPTY_OR_TOO_LONG_MESSAGE"),
        ({"body": "x" * 501, "radius_km": 5}, "EMPTY_OR_TOO_LONG_MESSAGE"),
        ({"body": "Hi", "radius_km": 0}, "RADIUS_OUT_OF_RANGE"),
        ({"body": "Hi", "radius_km": 26}, "RADIUS_OUT_OF_RANGE"),
        ({"body": "Hi", "radius_km": 2.5}, "RADIUS_OUT_OF_RANGE"),
        ({"body": "Hi", "radius_km": 5, "title": "t" * 101}, "TITLE_TOO_LONG"),
        ({"body": "Hi", "radius_km": 5, "message_type": "spam"}, "INVALID_MESSAGE_TYPE"),
        ({"body": "Hi", "radius_km": 5, "offer_details": {"discount_percentage": 150}}, "INVALID_OFFER_DETAILS"),
        ({"body": "Hi", "radius_km": 5, "offer_details": {"unknown": 1}}, "INVALID_OFFER_DETAILS"),
        ({"body": "Hi", "radius_km": 5, "expires_in_hours": 0}, "INVALID_EXPIRY"),
    ],
)
def test_invalid_broadcast_persists_nothing(tmp_path: Path, kwargs: dict, code: str) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)

        with pytest.raises(ValidationError) as exc_info:
            message_service.create_message(db, restaurant=restaurant, sender_id="owner", **kwargs)

        assert exc_info.value.code == code
        assert _count(db, RestaurantMessage) == 0
        assert _count(db, MessageRecipient) == 0
        assert _count(db, Notification) == 0
    database.disconnect()


def test_radius_bounds_are_inclusive(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        low = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="a", radius_km=1)
        high = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="b" * 500, radius_km=25)
        assert low.radius_km == 1
        assert high.message.target_radius_km == 25
        assert high.recipient_count == 4
    database.disconnect()


def test_persistence_failure_rolls_back_everything(tmp_path: Path, monkeypatch) -> None:
    database = _database(tmp_path)

    def _explode(*args, **kwargs) -> None:
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(message_service, "create_message_notifications", _explode)
    with database.session() as db:
        restaurant = _seed(db)

        with pytest.raises(PersistenceError) as exc_info:
            message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Hello", radius_km=5)

        assert str(exc_info.value) == "Failed to send message"
        assert _count(db, RestaurantMessage) == 0
        assert _count(db, MessageRecipient) == 0
    database.disconnect()


def test_recipient_snapshot_survives_origin_changes_and_edits(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        result = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Hello", radius_km=5)
        message_id = result.message.id

        far = db.scalar(select(UserOrigin).where(UserOrigin.user_id == "u-far"))
        far.latitude = RESTAURANT_LAT
        db.commit()
        message = message_service.get_message_for_restaurant(db, message_id, restaurant.id)
        updated = message_service.update_message(db, message, {"radius_km": 25, "message": "Updated body"})

        assert updated.target_radius_km == 25
        assert updated.message == "Updated body"
        recipients = db.scalars(
            select(MessageRecipient.user_id).where(MessageRecipient.message_id == message_id).order_by(MessageRecipient.user_id)
        ).all()
        assert recipients == ["u-edge", "u-fan", "u-near"]
    database.disconnect()


def test_message_lookup_is_scoped_to_restaurant(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        result = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Hello", radius_km=5)

        with pytest.raises(MessageNotFoundError):
            message_service.get_message_for_restaurant(db, result.message.id, restaurant.id + 1)
        with pytest.raises(MessageNotFoundError):
            message_service.get_message_for_restaurant(db, 9999, restaurant.id)
    database.disconnect()


def test_delete_removes_recipients_and_toggle_flips_activity(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        keep = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Keep", radius_km=5)
        drop = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Drop", radius_km=5)

        toggled = message_service.toggle_message_active(db, keep.message)
        assert toggled.is_active is False
        assert message_service.is_message_currently_active(toggled) is False

        message_service.delete_message(db, drop.message)
        assert _count(db, RestaurantMessage) == 1
        assert _count(db, MessageRecipient) == 3
    database.disconnect()


def test_expiry_and_listing_counters(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        sent_at = utcnow() - timedelta(hours=3)
        expired = message_service.create_message(
            db, restaurant=restaurant, sender_id="owner", body="Old", radius_km=5, expires_in_hours=2, now=sent_at
        )
        current = message_service.create_message(
            db, restaurant=restaurant, sender_id="owner", body="New", radius_km=2, expires_in_hours=48
        )

        assert message_service.is_message_currently_active(expired.message) is False
        assert message_service.is_message_currently_active(current.message) is True

        summaries = message_service.list_messages_for_restaurant(db, restaurant.id)
        assert [s.message.message for s in summaries] == ["New", "Old"]
        assert [(s.recipient_count, s.nearby_count, s.favorite_count) for s in summaries] == [(2, 1, 1), (3, 2, 1)]
    database.disconnect()


def test_malformed_stored_offer_details_read_as_empty(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        result = message_service.create_message(
            db,
            restaurant=restaurant,
            sender_id="owner",
            body="Deal",
            radius_km=5,
            offer_details={"discount_percentage": 20, "menu_items": ["Masala dosa"]},
        )
        assert message_service.read_offer_details(result.message).discount_percentage == 20

        result.message.offer_details = {"discount_percentage": "lots"}
        db.commit()

        details = message_service.read_offer_details(result.message)
        assert details.discount_percentage is None
        assert details.menu_items == []
    database.disconnect()


def test_broadcast_with_no_recipients_is_valid(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        db.add(User(id="owner", email="owner@example.com", user_type="restaurant_owner"))
        restaurant = Restaurant(
            owner_id="owner",
            name="Empty Street Cafe",
            address="1 Quiet Lane",
            city="Bengaluru",
            state="Karnataka",
            zip_code="560001",
            latitude=RESTAURANT_LAT,
            longitude=RESTAURANT_LNG,
        )
        db.add(restaurant)
        db.commit()

        result = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Anyone?", radius_km=25)

        assert result.recipient_count == 0
        assert _count(db, RestaurantMessage) == 1
        assert _count(db, Notification) == 0
    database.disconnect()


def test_delete_removes_the_broadcast_notifications(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        keep = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Keep", radius_km=5)
        drop = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Drop", radius_km=5)
        assert len(notification_service.list_notifications(db, "u-near")) == 2

        message_service.delete_message(db, drop.message)

        left = notification_service.list_notifications(db, "u-near")
        assert [(n.message_id, n.data["message_id"]) for n in left] == [(keep.message.id, keep.message.id)]
        assert notification_service.count_unread(db, "u-fan") == 1
        assert _count(db, Notification) == 3
    database.disconnect()


def test_favorite_added_after_broadcast_is_not_a_recipient(tmp_path: Path) -> None:
    database = _database(tmp_path)
    with database.session() as db:
        restaurant = _seed(db)
        result = message_service.create_message(db, restaurant=restaurant, sender_id="owner", body="Hello", radius_km=5)
        message_id = result.message.id

        db.add(Favorite(user_id="u-far", restaurant_id=restaurant.id))
        db.commit()

        recipients = db.scalars(
            select(MessageRecipient.user_id).where(MessageRecipient.message_id == message_id).order_by(MessageRecipient.user_id)
        ).all()
        assert recipients == ["u-edge", "u-fan", "u-near"]
        summary = message_service.list_messages_for_restaurant(db, restaurant.id)[0]
        assert (summary.recipient_count, summary.favorite_count) == (3, 1)
    database.disconnect()
