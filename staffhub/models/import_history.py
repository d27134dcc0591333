"""
ImportHistory model for tracking bulk import runs.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    String,
    Text,
    Integer,
    DateTime,
    Enum,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.models.base import Base


class ImportStatus(str, enum.Enum):
    """Outcome of an import run."""

    success = "success"
    partial = "partial"
    failed = "failed"


class ImportHistory(Base):
    """
    One row per import run (committed or rolled back).

    Written after the run's own transaction has finished, so a failed run
    still leaves a trace even though none of its data persisted.
    """

    __tablename__ = "import_history"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    import_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Import family selector (core_entities, staffing, ...)",
    )
    status: Mapped[ImportStatus] = mapped_column(
        Enum(ImportStatus),
        default=ImportStatus.success,
        comment="Status of the import run",
    )
    username: Mapped[str | None] = mapped_column(
        String(255),
        comment="Caller that started the run",
    )
    original_filename: Mapped[str | None] = mapped_column(
        String(255),
        comment="Uploaded workbook name, if the run came from a file",
    )
    # Run statistics
    records_processed: Mapped[int] = mapped_column(
        Integer,
        default=0,
        comment="Number of input records examined",
    )
    records_written: Mapped[int] = mapped_column(
        Integer,
        default=0,
        comment="Number of rows queued for writing",
    )
    records_skipped: Mapped[int] = mapped_column(
        Integer,
        default=0,
        comment="Number of records dropped with a warning",
    )
    warnings: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
    )
    # Error tracking
    error_message: Mapped[str | None] = mapped_column(
        Text,
        comment="Error message if the run was rolled back",
    )
    # Timestamps
    imported_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        comment="When the run finished",
    )

    def __repr__(self) -> str:
        return f"<ImportHistory(type={self.import_type!r}, status={self.status.value})>"

    @property
    def warning_count(self) -> int:
        return len(self.warnings or [])
