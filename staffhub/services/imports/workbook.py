"""
Workbook (.xlsx) reader for import uploads.

Turns the sheets of an uploaded workbook into the JSON payload shape the
importers expect: {payload_key: [ {header: value, ...}, ... ]}. The first
row of each sheet is the header row; fully blank rows are dropped.
"""

import logging
import zipfile
from datetime import date, datetime
from io import BytesIO
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from staffhub.services.imports.base import DataImportError, UnknownImportTypeError
from staffhub.services.imports.normalizer import format_date, normalize_key

logger = logging.getLogger(__name__)

# Workbook sheet title -> payload key, per import type
SHEET_NAMES: dict[str, dict[str, str]] = {
    "core_entities": {
        "Config_Horizontals": "horizontals",
        "Config_Seniority": "seniority_levels",
        "Config_ProjectStatus": "project_statuses",
        "Config_ClientSectors": "client_sectors",
        "Config_Locations": "locations",
        "Calendar": "calendar",
        "Roles": "roles",
        "Clients": "clients",
        "Resources": "resources",
        "Projects": "projects",
    },
    "staffing": {"Staffing": "staffing"},
    "resource_requests": {"Resource_Requests": "resource_requests"},
    "interviews": {"Interviews": "interviews"},
    "skills": {"Skills": "skills", "Resource_Skills": "resource_skills"},
    "leaves": {"Leaves": "leaves"},
    "users_permissions": {"Users": "users", "Permissions": "permissions"},
    "tutor_mapping": {"Tutor_Mapping": "tutor_mapping"},
}


class WorkbookError(DataImportError):
    """Raised when an upload cannot be read as a workbook."""

    pass


def _header(value: Any) -> str | None:
    # Date headers (staffing day columns) become YYYY-MM-DD labels
    if isinstance(value, (datetime, date)):
        return format_date(value)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _is_blank(values) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in values)


def _sheet_key(title: str, sheets: dict[str, str]) -> str | None:
    wanted = normalize_key(title.replace("_", " "))
    for sheet_name, payload_key in sheets.items():
        if wanted in (normalize_key(sheet_name.replace("_", " ")), normalize_key(payload_key.replace("_", " "))):
            return payload_key
    return None


def read_workbook(content: bytes, import_type: str) -> dict[str, list[dict[str, Any]]]:
    """
    Read an .xlsx upload into an import payload.

    Args:
        content: Raw workbook bytes
        import_type: Import family; selects which sheets are read

    Returns:
        Payload dict keyed by payload sheet name

    Raises:
        UnknownImportTypeError: If the import type has no sheet layout
        WorkbookError: If the file is not a readable workbook
    """
    sheets = SHEET_NAMES.get(import_type)
    if sheets is None:
        raise UnknownImportTypeError(import_type)

    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        raise WorkbookError(f"Could not read workbook: {e}")

    payload: dict[str, list[dict[str, Any]]] = {}
    try:
        for worksheet in workbook.worksheets:
            payload_key = _sheet_key(worksheet.title, sheets)
            if payload_key is None:
                logger.debug(f"Workbook sheet '{worksheet.title}' ignored for '{import_type}'")
                continue

            rows = worksheet.iter_rows(values_only=True)
            headers = [_header(value) for value in next(rows, ())]
            records = []
            for values in rows:
                if _is_blank(values):
                    continue
                records.append(
                    {header: value for header, value in zip(headers, values) if header is not None}
                )
            payload[payload_key] = records
            logger.info(f"Workbook sheet '{worksheet.title}': {len(records)} rows")
    finally:
        workbook.close()

    return payload
