"""SQLAlchemy declarative Base and shared column helpers."""

import uuid

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    """Opaque primary key for rows exposed through the API."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
