"""
Pydantic schemas for API request/response validation.
"""

from staffhub.schemas.imports import (
    ImportHistoryResponse,
    ImportResponse,
    ImportStatsSchema,
    ImportTypesResponse,
)

__all__ = [
    "ImportHistoryResponse",
    "ImportResponse",
    "ImportStatsSchema",
    "ImportTypesResponse",
]
