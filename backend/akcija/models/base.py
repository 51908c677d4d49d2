"""Declarative base shared by all models."""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


def utcnow() -> datetime:
    """Timezone-aware current time used for scrape timestamps."""
    return datetime.now(timezone.utc)
