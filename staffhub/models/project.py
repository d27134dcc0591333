"""
Project model.
"""

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship as orm_relationship

from staffhub.models.base import Base

if TYPE_CHECKING:
    from staffhub.models.client import Client


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        UniqueConstraint("name", "client_id", name="uq_projects_name_client"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("clients.id"),
    )
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    budget: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False))
    realization_percentage: Mapped[int] = mapped_column(
        Integer,
        default=100,
    )
    project_manager: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)

    client: Mapped["Client"] = orm_relationship("Client")

    def __repr__(self) -> str:
        return f"<Project(name={self.name!r})>"
