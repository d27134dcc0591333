"""
ResourceRequest model (headcount request for a project role).
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.models.base import Base

REQUEST_CODE_PREFIX = "HCR"


class ResourceRequest(Base):
    """
    Request for a resource with a given role on a project.

    `is_long_term` is derived from the date span when the row is written and
    stored as-is; see `span_is_long_term`.
    """

    __tablename__ = "resource_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    request_code: Mapped[str | None] = mapped_column(
        String(50),
        unique=True,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    requestor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("resources.id", ondelete="SET NULL"),
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    commitment_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    is_urgent: Mapped[bool] = mapped_column(Boolean, default=False)
    is_long_term: Mapped[bool] = mapped_column(Boolean, default=False)
    is_tech_request: Mapped[bool] = mapped_column(Boolean, default=False)
    is_osr_open: Mapped[bool] = mapped_column(Boolean, default=False)
    osr_number: Mapped[str | None] = mapped_column(String(50))
    notes: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
    )

    @staticmethod
    def span_is_long_term(start: date, end: date, threshold_days: int = 60) -> bool:
        """True when the request spans more than `threshold_days` days."""
        return (end - start).days > threshold_days

    @staticmethod
    def format_code(number: int) -> str:
        return f"{REQUEST_CODE_PREFIX}{number:05d}"

    @staticmethod
    def parse_code(code: str | None) -> int:
        """Sequence number of an `HCRnnnnn` code, 0 if it does not match."""
        if not code or not code.startswith(REQUEST_CODE_PREFIX):
            return 0
        digits = code[len(REQUEST_CODE_PREFIX):]
        return int(digits) if digits.isdigit() else 0
