"""
Bulk import engine.

Importing this package registers every import family with the registry in
`base`; look one up with `get_importer(import_type)`.
"""

from staffhub.services.imports.base import (
    BaseImporter,
    DataImportError,
    ImportContext,
    ImportStats,
    UnknownImportTypeError,
    available_import_types,
    get_importer,
    register_importer,
)
from staffhub.services.imports import (  # noqa: F401
    core_entities,
    interviews,
    leaves,
    resource_requests,
    skills,
    staffing,
    tutor_mapping,
    users_permissions,
)
from staffhub.services.imports.orchestrator import (
    ImportAuthorizationError,
    ImportOrchestrator,
    ImportOutcome,
    ImportRunError,
    RunState,
    get_import_orchestrator,
)
from staffhub.services.imports.workbook import SHEET_NAMES, WorkbookError, read_workbook

__all__ = [
    "BaseImporter",
    "DataImportError",
    "ImportAuthorizationError",
    "ImportContext",
    "ImportOrchestrator",
    "ImportOutcome",
    "ImportRunError",
    "ImportStats",
    "RunState",
    "SHEET_NAMES",
    "UnknownImportTypeError",
    "WorkbookError",
    "available_import_types",
    "get_import_orchestrator",
    "get_importer",
    "read_workbook",
    "register_importer",
]
