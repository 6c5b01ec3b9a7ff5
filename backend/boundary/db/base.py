"""
SQLAlchemy declarative base and common mixins.

Provides base class for all ORM models, the upload/update timestamp
mixin and the UTC time helpers that keep updated_at strictly increasing.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

TIMESTAMP_STEP = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime read back from the store to aware UTC.

    SQLite drops tzinfo on round-trip; values without one are UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_timestamp(previous: datetime | None) -> datetime:
    """
    Timestamp for the next write of a row.

    Strictly greater than ``previous`` even if the clock has not
    advanced (or went backwards) since the last write.
    """
    now = utc_now()
    if previous is None:
        return now
    floor = as_utc(previous) + TIMESTAMP_STEP
    return now if now >= floor else floor


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for ORM model registration.

    All database models inherit from this class to ensure they're
    registered with the metadata and included in table creation.
    """

    pass


class TimestampMixin:
    """
    Mixin providing upload and modification timestamps.

    uploaded_at is set once on row creation and never changes.
    updated_at is set on creation and advanced explicitly by every
    write through the CRUD layer (see next_timestamp).

    Attributes:
        uploaded_at: Row creation timestamp (UTC, immutable)
        updated_at: Last modification timestamp (UTC, strictly increasing)
    """

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
