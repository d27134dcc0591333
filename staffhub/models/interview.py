"""
Interview model (recruitment pipeline).
"""

import uuid
from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.models.base import Base


class Interview(Base):
    __tablename__ = "interviews"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    resource_request_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("resource_requests.id", ondelete="SET NULL"),
    )
    candidate_name: Mapped[str] = mapped_column(String(255), nullable=False)
    candidate_surname: Mapped[str] = mapped_column(String(255), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date)
    horizontal: Mapped[str | None] = mapped_column(String(255))
    role_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("roles.id", ondelete="SET NULL"),
    )
    cv_summary: Mapped[str | None] = mapped_column(Text)
    interviewer_ids: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        comment="Resource ids of the interviewers",
    )
    interview_date: Mapped[date | None] = mapped_column(Date)
    feedback: Mapped[str | None] = mapped_column(String(50))
    notes: Mapped[str | None] = mapped_column(Text)
    hiring_status: Mapped[str | None] = mapped_column(String(50))
    entry_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
    )

    @property
    def candidate_full_name(self) -> str:
        return f"{self.candidate_name} {self.candidate_surname}".strip()
