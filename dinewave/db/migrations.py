"""Lightweight schema migrations for SQLite databases."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine


def _sqlite_column_names(connection: Connection, table_name: str) -> set[str]:
    """Return column names for a SQLite table using PRAGMA table_info."""
    rows = connection.execute(text(f"PRAGMA table_info({table_name});")).mappings().all()
    return {str(row["name"]) for row in rows}


def _sqlite_has_unique_index(connection: Connection, table_name: str, columns: tuple[str, ...]) -> bool:
    """Return whether a unique index, named or implicit, covers exactly columns."""
    rows = connection.execute(text(f"PRAGMA index_list({table_name});")).mappings().all()
    for row in rows:
        if not row["unique"]:
            continue
        info = connection.execute(text(f"PRAGMA index_info('{row['name']}');")).mappings().all()
        if tuple(str(item["name"]) for item in info) == columns:
            return True
    return False


def ensure_sqlite_schema(engine: Engine) -> None:
    """Apply lightweight schema updates for legacy SQLite databases."""
    if engine.dialect.name != "sqlite":
        return

    with engine.begin() as connection:
        table_rows = connection.execute(text("SELECT name FROM sqlite_master WHERE type='table';")).all()
        table_names: set[str] = {str(row[0]) for row in table_rows}

        if "restaurants" in table_names:
            restaurant_columns: set[str] = _sqlite_column_names(connection, "restaurants")
            if "latitude" not in restaurant_columns:
                connection.execute(text("ALTER TABLE restaurants ADD COLUMN latitude FLOAT"))
            if "longitude" not in restaurant_columns:
                connection.execute(text("ALTER TABLE restaurants ADD COLUMN longitude FLOAT"))
            if "formatted_address" not in restaurant_columns:
                connection.execute(text("ALTER TABLE restaurants ADD COLUMN formatted_address VARCHAR(500)"))
            if "country" not in restaurant_columns:
                connection.execute(text("ALTER TABLE restaurants ADD COLUMN country VARCHAR(128)"))

        if "restaurant_messages" in table_names:
            message_columns: set[str] = _sqlite_column_names(connection, "restaurant_messages")
            if "expires_at" not in message_columns:
                connection.execute(text("ALTER TABLE restaurant_messages ADD COLUMN expires_at DATETIME"))
            if "updated_at" not in message_columns:
                now_iso: str = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
                connection.execute(
                    text(
                        "ALTER TABLE restaurant_messages ADD COLUMN updated_at DATETIME NOT NULL "
                        f"DEFAULT '{now_iso}'"
                    )
                )
            if "offer_details" not in message_columns:
                connection.execute(
                    text("ALTER TABLE restaurant_messages ADD COLUMN offer_details JSON NOT NULL DEFAULT '{}'")
                )

        if "message_recipients" in table_names:
            # Older databases allowed duplicate rows per (message, user); keep the first one.
            connection.execute(
                text(
                    """
                    DELETE FROM message_recipients
                    WHERE id NOT IN (
                        SELECT MIN(id)
                        FROM message_recipients
                        GROUP BY message_id, user_id
                    )
                    """
                )
            )
            if not _sqlite_has_unique_index(connection, "message_recipients", ("message_id", "user_id")):
                connection.execute(
                    text(
                        "CREATE UNIQUE INDEX IF NOT EXISTS uq_message_recipient "
                        "ON message_recipients(message_id, user_id)"
                    )
                )

        if "notifications" in table_names:
            notification_columns: set[str] = _sqlite_column_names(connection, "notifications")
            if "message_id" not in notification_columns:
                connection.execute(
                    text(
                        "ALTER TABLE notifications ADD COLUMN message_id INTEGER "
                        "REFERENCES restaurant_messages (id) ON DELETE CASCADE"
                    )
                )
                # Link broadcast notifications written before the column existed; drop ones whose message is gone.
                connection.execute(
                    text(
                        """
                        DELETE FROM notifications
                        WHERE type = 'message'
                          AND json_extract(data, '$.message_id') IS NOT NULL
                          AND json_extract(data, '$.message_id') NOT IN (SELECT id FROM restaurant_messages)
                        """
                    )
                )
                connection.execute(
                    text(
                        """
                        UPDATE notifications
                        SET message_id = json_extract(data, '$.message_id')
                        WHERE type = 'message' AND json_extract(data, '$.message_id') IS NOT NULL
                        """
                    )
                )
            connection.execute(
                text("CREATE INDEX IF NOT EXISTS ix_notifications_message_id ON notifications(message_id)")
            )
