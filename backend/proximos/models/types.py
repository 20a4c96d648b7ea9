"""
DB types and mixins that work on both SQLite (for local runs and tests) and PostgreSQL.
Use these in models so the app runs without Docker when DATABASE_URL is sqlite:///...
"""
import enum
import uuid
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, TypeDecorator
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func


class UuidType(TypeDecorator):
    """UUID that stores as string(36) so it works on SQLite and PostgreSQL."""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class Lifecycle(str, enum.Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class IdentityMixin:
    """Internal integer id (never exposed) plus the public UUID used in URLs and JSON."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    public_id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), unique=True, nullable=False, index=True, default=uuid.uuid4
    )


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class LifecycleMixin:
    """
    active | archived. Archived rows are hidden from every query through Model.active();
    nothing filters on the raw column elsewhere.
    """

    lifecycle: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Lifecycle.ACTIVE.value, server_default=Lifecycle.ACTIVE.value, index=True
    )

    @classmethod
    def active(cls):
        return cls.lifecycle == Lifecycle.ACTIVE.value

    @property
    def is_active(self) -> bool:
        return self.lifecycle == Lifecycle.ACTIVE.value

    def archive(self) -> None:
        self.lifecycle = Lifecycle.ARCHIVED.value


def parse_public_id(value) -> uuid.UUID | None:
    """Parse a client-supplied public id; None for anything that is not a UUID (treated as not found)."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None
