"""
CompanyCalendarEvent model for holidays and company closures.
"""

import uuid
from datetime import date

from sqlalchemy import Date, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.models.base import Base


class CompanyCalendarEvent(Base):
    """
    A non-working day, either global (no location) or bound to one office.
    """

    __tablename__ = "company_calendar"
    __table_args__ = (
        UniqueConstraint("date", "location", name="uq_company_calendar_date_location"),
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
    date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="NATIONAL_HOLIDAY",
    )
    location: Mapped[str | None] = mapped_column(
        String(255),
        comment="NULL for global holidays",
    )

    def __repr__(self) -> str:
        return f"<CompanyCalendarEvent(date={self.date}, location={self.location!r})>"
