"""
Pydantic schemas for import runs.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from staffhub.models import ImportStatus


class ImportStatsSchema(BaseModel):
    """Counters for one run."""
    processed: int = Field(0, description="Input records examined")
    written: int = Field(0, description="Rows queued for writing")
    skipped: int = Field(0, description="Records dropped with a warning")


class ImportResponse(BaseModel):
    """Schema for a committed import run."""
    message: str
    warnings: List[str] = Field(default_factory=list)
    stats: ImportStatsSchema = Field(default_factory=ImportStatsSchema)
    import_type: Optional[str] = None


class ImportTypesResponse(BaseModel):
    """Registered import families and their workbook sheet names."""
    types: List[str]
    sheets: Dict[str, Dict[str, str]]


class ImportHistoryResponse(BaseModel):
    """Schema for ImportHistory response."""
    id: UUID
    import_type: str
    status: ImportStatus
    username: Optional[str] = None
    original_filename: Optional[str] = None
    records_processed: int
    records_written: int
    records_skipped: int
    warnings: List[str] = Field(default_factory=list)
    error_message: Optional[str] = None
    imported_at: datetime

    class Config:
        from_attributes = True
