"""
Common interface for per-family importers.

Every importer turns raw records into resolved rows and hands them to the
bulk writer. Row-level problems never raise: they become warnings on the
run's `ImportContext` and the record is skipped.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Type

from sqlalchemy.orm import Session

from staffhub.config import Settings, get_settings
from staffhub.services.imports.normalizer import normalize_key
from staffhub.services.imports.resolver import ResolverContext
from staffhub.services.imports.writer import BulkWriter

logger = logging.getLogger(__name__)


class DataImportError(Exception):
    """Base exception for import engine errors."""

    pass


class UnknownImportTypeError(DataImportError):
    """Raised when the request names an import family that is not registered."""

    def __init__(self, import_type: str):
        self.import_type = import_type
        super().__init__(f"Unknown import type: '{import_type}'")


@dataclass
class ImportStats:
    """Counters for one run."""

    processed: int = 0
    written: int = 0
    skipped: int = 0

    def as_dict(self) -> dict[str, int]:
        return {"processed": self.processed, "written": self.written, "skipped": self.skipped}


@dataclass
class ImportContext:
    """State shared by every step of one importer invocation."""

    db: Session
    resolver: ResolverContext
    writer: BulkWriter
    settings: Settings = field(default_factory=get_settings)
    warnings: list[str] = field(default_factory=list)
    stats: ImportStats = field(default_factory=ImportStats)

    def __post_init__(self):
        # Ambiguous names found while resolving are reported on this run
        if self.resolver.warn is None:
            self.resolver.warn = lambda message: self.warn(message, skip=False)

    @classmethod
    def create(cls, db: Session, settings: Settings | None = None) -> "ImportContext":
        settings = settings or get_settings()
        return cls(
            db=db,
            resolver=ResolverContext(db),
            writer=BulkWriter(db, max_params=settings.import_max_bind_params),
            settings=settings,
        )

    def warn(self, message: str, skip: bool = True) -> None:
        """Record a non-fatal problem; `skip` marks the record as dropped."""
        self.warnings.append(message)
        if skip:
            self.stats.skipped += 1
        logger.warning(f"Import warning: {message}")

    def write(self, target: Any, columns, rows, policy, conflict_keys=(), update_columns=None) -> None:
        """Write rows through the bulk writer and count them."""
        self.writer.write(target, columns, rows, policy, conflict_keys, update_columns)
        self.stats.written += len(rows)


class BaseImporter(ABC):
    """
    One import family (core entities, staffing, ...).

    Subclasses set `import_type` and implement `run`.
    """

    import_type: str = ""

    @abstractmethod
    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        """Import one payload; append warnings to `ctx`."""

    @staticmethod
    def records(ctx: ImportContext, payload: dict[str, Any], key: str) -> list[dict[str, Any]]:
        """Records under `key`; an absent sheet is an empty list."""
        raw = payload.get(key) if isinstance(payload, dict) else None
        if raw is None:
            return []
        if not isinstance(raw, list):
            ctx.warn(f"Sheet '{key}' is not a list of records and was ignored.", skip=False)
            return []
        records = []
        for position, record in enumerate(raw, start=1):
            if isinstance(record, dict):
                records.append(record)
            else:
                ctx.warn(f"Sheet '{key}', row {position}: not a record, skipped.")
        ctx.stats.processed += len(records)
        return records

    @staticmethod
    def cell(record: dict[str, Any], *labels: str, default: Any = None) -> Any:
        """
        Value of the first matching label, compared case/space-insensitively.

        Blank strings count as absent and yield `default`.
        """
        wanted = {normalize_key(label) for label in labels}
        for key, value in record.items():
            if normalize_key(key) in wanted:
                if value is None or (isinstance(value, str) and not value.strip()):
                    continue
                return value
        return default


# Importer registry
_IMPORTERS: dict[str, Type[BaseImporter]] = {}


def register_importer(importer_class: Type[BaseImporter]) -> Type[BaseImporter]:
    """Register an importer class under its `import_type` (usable as decorator)."""
    if not importer_class.import_type:
        raise ValueError(f"{importer_class.__name__} has no import_type")
    _IMPORTERS[importer_class.import_type] = importer_class
    return importer_class


def get_importer(import_type: str) -> BaseImporter:
    """
    Instantiate the importer registered for `import_type`.

    Raises:
        UnknownImportTypeError: If no importer is registered under that name
    """
    importer_class = _IMPORTERS.get((import_type or "").strip())
    if importer_class is None:
        raise UnknownImportTypeError(import_type)
    return importer_class()


def available_import_types() -> list[str]:
    return sorted(_IMPORTERS)
