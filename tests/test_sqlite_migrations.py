"""Tests for lightweight SQLite schema migrations."""

from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from dinewave.core.security import create_access_token
from dinewave.db.base import Base
from dinewave.db.migrations import ensure_sqlite_schema
from dinewave.db.session import Database
from dinewave.main import create_app
from dinewave.services.geocoding import Geocoder


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _create_legacy_schema(engine: Engine) -> None:
    """Tables as written before geocoding, expiry and recipient uniqueness existed."""
    with engine.begin() as connection:
        connection.execute(
            text(
                """
                CREATE TABLE users (
                    id VARCHAR(128) NOT NULL PRIMARY KEY,
                    email VARCHAR(255) NOT NULL UNIQUE,
                    first_name VARCHAR(128),
                    last_name VARCHAR(128),
                    user_type VARCHAR(16) NOT NULL,
                    phone VARCHAR(32),
                    is_onboarding_completed BOOLEAN NOT NULL DEFAULT 0,
                    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
        )
        connection.execute(
            text(
                """
                CREATE TABLE restaurants (
                    id INTEGER NOT NULL PRIMARY KEY,
                    owner_id VARCHAR(128) NOT NULL REFERENCES users (id),
                    name VARCHAR(255) NOT NULL,
                    description TEXT,
                    category VARCHAR(32),
                    address VARCHAR(255) NOT NULL,
                    city VARCHAR(128) NOT NULL,
                    state VARCHAR(128) NOT NULL,
                    zip_code VARCHAR(16) NOT NULL,
                    phone VARCHAR(32),
                    is_active BOOLEAN NOT NULL DEFAULT 1,
                    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
        )
        connection.execute(
            text(
                """
                CREATE TABLE restaurant_messages (
                    id INTEGER NOT NULL PRIMARY KEY,
                    restaurant_id INTEGER NOT NULL REFERENCES restaurants (id),
                    sender_id VARCHAR(128) NOT NULL REFERENCES users (id),
                    title VARCHAR(100) NOT NULL,
                    message TEXT NOT NULL,
                    message_type VARCHAR(12) NOT NULL DEFAULT 'offer',
                    target_radius_km INTEGER NOT NULL DEFAULT 10,
                    is_active BOOLEAN NOT NULL DEFAULT 1,
                    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
        )
        connection.execute(
            text(
                """
                CREATE TABLE message_recipients (
                    id INTEGER NOT NULL PRIMARY KEY,
                    message_id INTEGER NOT NULL REFERENCES restaurant_messages (id),
                    user_id VARCHAR(128) NOT NULL REFERENCES users (id),
                    recipient_type VARCHAR(8) NOT NULL,
                    distance_km FLOAT,
                    is_read BOOLEAN NOT NULL DEFAULT 0,
                    read_at DATETIME,
                    is_clicked BOOLEAN NOT NULL DEFAULT 0,
                    clicked_at DATETIME,
                    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
        )
        connection.execute(
            text(
                "INSERT INTO users (id, email, user_type) VALUES "
                "('owner', 'owner@example.com', 'restaurant_owner'), ('cust', 'cust@example.com', 'customer')"
            )
        )
        connection.execute(
            text(
                "INSERT INTO restaurants (id, owner_id, name, address, city, state, zip_code) "
                "VALUES (1, 'owner', 'Dosa Corner', '12 MG Road', 'Bengaluru', 'Karnataka', '560001')"
            )
        )
        connection.execute(
            text(
                "INSERT INTO restaurant_messages (id, restaurant_id, sender_id, title, message) "
                "VALUES (1, 1, 'owner', 'Hello', 'Hello there')"
            )
        )
        connection.execute(
            text(
                "INSERT INTO message_recipients (id, message_id, user_id, recipient_type, distance_km) VALUES "
                "(1, 1, 'cust', 'nearby', 1.5), (2, 1, 'cust', 'nearby', 1.5)"
            )
        )


def _column_names(engine: Engine, table: str) -> set[str]:
    with engine.begin() as connection:
        rows = connection.execute(text(f"PRAGMA table_info({table});"))
        return {str(row[1]) for row in rows}


def _unique_recipient_indexes(engine: Engine) -> int:
    count = 0
    with engine.begin() as connection:
        for row in connection.execute(text("PRAGMA index_list(message_recipients);")).mappings().all():
            if not row["unique"]:
                continue
            columns = [
                str(info["name"])
                for info in connection.execute(text(f"PRAGMA index_info('{row['name']}');")).mappings().all()
            ]
            if columns == ["message_id", "user_id"]:
                count += 1
    return count


def test_ensure_sqlite_schema_adds_missing_columns(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "legacy_schema.db")
    _create_legacy_schema(engine)

    ensure_sqlite_schema(engine)

    assert {"latitude", "longitude", "formatted_address", "country"} <= _column_names(engine, "restaurants")
    assert {"expires_at", "updated_at", "offer_details"} <= _column_names(engine, "restaurant_messages")
    with engine.begin() as connection:
        offer_details = connection.execute(text("SELECT offer_details FROM restaurant_messages WHERE id = 1")).scalar()
    assert offer_details == "{}"


def test_ensure_sqlite_schema_dedupes_recipients_and_adds_unique_index(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "legacy_recipients.db")
    _create_legacy_schema(engine)

    ensure_sqlite_schema(engine)
    ensure_sqlite_schema(engine)

    with engine.begin() as connection:
        ids = connection.execute(text("SELECT id FROM message_recipients ORDER BY id")).scalars().all()
    assert ids == [1]
    assert _unique_recipient_indexes(engine) == 1


def test_ensure_sqlite_schema_is_noop_on_current_schema(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "current.db")
    Base.metadata.create_all(bind=engine)

    ensure_sqlite_schema(engine)

    assert _unique_recipient_indexes(engine) == 1


def test_startup_upgrades_legacy_database(tmp_path: Path) -> None:
    db_file = tmp_path / "legacy_app.db"
    _create_legacy_schema(_build_test_engine(db_file))
    app = create_app(database=Database(f"sqlite:///{db_file}"), geocoder=Geocoder(api_key=""))

    with TestClient(app) as client:
        headers = {"Authorization": f"Bearer {create_access_token('owner')}"}
        listing = client.get("/api/v1/restaurant/messages", headers=headers)
        stats = client.get("/api/v1/restaurant/messages/1/stats", headers=headers)

    assert listing.status_code == 200
    assert listing.json()["messages"][0]["offer_details"]["menu_items"] == []
    assert stats.json()["recipient_count"] == 1


def test_ensure_sqlite_schema_links_legacy_notifications_to_messages(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "legacy_notifications.db")
    _create_legacy_schema(engine)
    with engine.begin() as connection:
        connection.execute(
            text(
                """
                CREATE TABLE notifications (
                    id INTEGER NOT NULL PRIMARY KEY,
                    user_id VARCHAR(128) NOT NULL REFERENCES users (id),
                    type VARCHAR(32) NOT NULL,
                    title VARCHAR(255) NOT NULL,
                    message TEXT NOT NULL,
                    data JSON,
                    is_read BOOLEAN NOT NULL DEFAULT 0,
                    is_deleted BOOLEAN NOT NULL DEFAULT 0,
                    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    read_at DATETIME,
                    expires_at DATETIME
                )
                """
            )
        )
        connection.execute(
            text(
                "INSERT INTO notifications (id, user_id, type, title, message, data) VALUES "
                "(1, 'cust', 'message', 'New offer from Dosa Corner', 'Hello', '{\"message_id\": 1}'), "
                "(2, 'cust', 'message', 'New offer from Dosa Corner', 'Gone', '{\"message_id\": 99}'), "
                "(3, 'cust', 'system', 'Welcome', 'Hi', NULL)"
            )
        )

    ensure_sqlite_schema(engine)
    ensure_sqlite_schema(engine)

    assert "message_id" in _column_names(engine, "notifications")
    with engine.begin() as connection:
        rows = connection.execute(text("SELECT id, message_id FROM notifications ORDER BY id")).all()
    assert [tuple(row) for row in rows] == [(1, 1), (3, None)]
