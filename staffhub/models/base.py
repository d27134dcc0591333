"""
SQLAlchemy declarative base and common model utilities.
"""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class LookupMixin:
    """Single-value dimension table (id + unique value)."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    value: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(value={self.value!r})>"
