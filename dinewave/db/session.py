"""Database engine and session management."""

from __future__ import annotations

import logging
from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from dinewave.db.base import Base
from dinewave.db.migrations import ensure_sqlite_schema

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Store client owning one engine and its session factory.

    Constructed by the process entry point and connected/disconnected by it;
    nothing here runs at import time.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self.engine: Engine | None = None
        self.SessionLocal: sessionmaker[Session] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def connect(self) -> None:
        if self.engine is not None:
            return
        connect_args: dict[str, bool] = {"check_same_thread": False} if self.is_sqlite else {}
        self.engine = create_engine(self.url, connect_args=connect_args, echo=self.echo)
        if self.is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info("[DB] Connected (%s)", self.engine.dialect.name)

    def create_all(self) -> None:
        """Create missing tables and apply lightweight SQLite upgrades."""
        if self.engine is None:
            raise RuntimeError("Database is not connected")
        Base.metadata.create_all(bind=self.engine)
        ensure_sqlite_schema(self.engine)

    def disconnect(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self.SessionLocal = None
        logger.info("[DB] Disconnected")

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database is not connected")
        return self.SessionLocal()


def get_database(request: Request) -> Database:
    """Return the store client owned by the running application."""
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    """Yield a database session and ensure proper cleanup."""
    db: Session = database.session()
    try:
        yield db
    finally:
        db.close()
