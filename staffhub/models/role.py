"""
Role model (job role with daily cost).
"""

import uuid

from sqlalchemy import Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.models.base import Base


class Role(Base):
    """Job role; `daily_expenses` is derived from `daily_cost` at write time."""

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )
    seniority_level: Mapped[str | None] = mapped_column(String(255))
    daily_cost: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    standard_cost: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    daily_expenses: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))

    def __repr__(self) -> str:
        return f"<Role(name={self.name!r})>"
