"""
Resource model (a staffable person).
"""

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship as orm_relationship

from staffhub.models.base import Base

if TYPE_CHECKING:
    from staffhub.models.role import Role


class Resource(Base):
    """
    A person that can be staffed on projects.

    Identified by email across imports. `tutor_id` is a weak reference to
    another resource; deleting the tutor clears it.
    """

    __tablename__ = "resources"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
    )
    role_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("roles.id"),
    )
    horizontal: Mapped[str | None] = mapped_column(String(255))
    location: Mapped[str | None] = mapped_column(String(255))
    hire_date: Mapped[date | None] = mapped_column(Date)
    work_seniority: Mapped[int | None] = mapped_column(Integer)
    notes: Mapped[str | None] = mapped_column(Text)
    max_staffing_percentage: Mapped[int] = mapped_column(
        Integer,
        default=100,
    )
    resigned: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
    )
    last_day_of_work: Mapped[date | None] = mapped_column(Date)
    tutor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("resources.id", ondelete="SET NULL"),
    )

    # Relationships
    role: Mapped["Role"] = orm_relationship("Role")
    tutor: Mapped["Resource"] = orm_relationship(
        "Resource",
        remote_side=[id],
    )

    def __repr__(self) -> str:
        return f"<Resource(email={self.email!r})>"
