"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from dinewave.models import favorite as _favorite  # noqa: E402,F401
from dinewave.models import message as _message  # noqa: E402,F401
from dinewave.models import notification as _notification  # noqa: E402,F401
from dinewave.models import restaurant as _restaurant  # noqa: E402,F401
from dinewave.models import user as _user  # noqa: E402,F401
