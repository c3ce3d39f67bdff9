"""Timestamp columns shared by every table."""

from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalise to aware UTC; SQLite hands timestamps back without a zone."""
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


def timestamp_field(**column_kwargs: Any) -> Any:
    """A non-null, zone-aware column stamped by the application and the database."""
    return Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), **column_kwargs},
    )


class TimestampMixin(SQLModel, table=False):
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field(onupdate=utcnow)


__all__ = ["TimestampMixin", "ensure_utc", "timestamp_field", "utcnow"]
