"""
Staffing models: a resource assigned to a project, and the per-day
allocation percentages of that assignment.
"""

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship as orm_relationship

from staffhub.models.base import Base


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("resource_id", "project_id", name="uq_assignments_resource_project"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    resource_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    allocations: Mapped[list["Allocation"]] = orm_relationship(
        "Allocation",
        back_populates="assignment",
        cascade="all, delete-orphan",
    )


class Allocation(Base):
    __tablename__ = "allocations"

    assignment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("assignments.id", ondelete="CASCADE"),
        primary_key=True,
    )
    allocation_date: Mapped[date] = mapped_column(
        Date,
        primary_key=True,
    )
    percentage: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    assignment: Mapped["Assignment"] = orm_relationship(
        "Assignment",
        back_populates="allocations",
    )

    def __repr__(self) -> str:
        return f"<Allocation(date={self.allocation_date}, percentage={self.percentage})>"
