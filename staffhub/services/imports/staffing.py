"""
Staffing importer.

The `staffing` sheet is wide: one row per resource/project pair, and every
other column whose label is a date holds the allocation percentage for that
day. A long layout (Date + Percentage columns) is accepted as well.
"""

import logging
import re
from typing import Any
from uuid import UUID

from staffhub.models import Allocation, Assignment
from staffhub.services.imports.base import BaseImporter, ImportContext, register_importer
from staffhub.services.imports.normalizer import clean_text, normalize_key, to_date, to_int
from staffhub.services.imports.writer import ConflictPolicy

logger = logging.getLogger(__name__)

IDENTITY_LABELS = {
    "resource",
    "resource name",
    "email",
    "project",
    "project name",
    "client",
    "role",
    "notes",
    "date",
    "percentage",
    "%",
}
_HAS_DIGIT = re.compile(r"\d")


@register_importer
class StaffingImporter(BaseImporter):
    import_type = "staffing"

    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        dayfirst = ctx.settings.import_dayfirst
        resolver = ctx.resolver
        new_assignments: dict[UUID, dict[str, Any]] = {}
        allocations: dict[tuple, dict[str, Any]] = {}
        column_days: dict[Any, Any] = {}

        for record in self.records(ctx, payload, "staffing"):
            resource_label = clean_text(self.cell(record, "Resource", "Email", "Resource Name"))
            project_label = clean_text(self.cell(record, "Project", "Project Name"))
            client_label = clean_text(self.cell(record, "Client"))
            if not resource_label or not project_label:
                ctx.warn("Staffing row skipped: resource and project are required.")
                continue

            resource_id = resolver.resolve_resource(resource_label)
            if resource_id is None:
                ctx.warn(f"Staffing row skipped: resource '{resource_label}' not found.")
                continue
            project_id = resolver.resolve_project(project_label, client_label)
            if project_id is None:
                ctx.warn(
                    f"Staffing row for '{resource_label}' skipped: project '{project_label}'"
                    f"{f' ({client_label})' if client_label else ''} not found."
                )
                continue

            assignment_id, created = resolver.assignments.resolve_or_create((resource_id, project_id))
            if created:
                new_assignments[assignment_id] = {
                    "id": assignment_id,
                    "resource_id": resource_id,
                    "project_id": project_id,
                }

            for day, raw in self._cells(record, column_days, dayfirst):
                percentage = to_int(raw)
                if percentage is None:
                    ctx.warn(
                        f"Staffing for '{resource_label}' on {day.isoformat()}: "
                        f"'{raw}' is not a percentage, ignored.",
                        skip=False,
                    )
                    continue
                allocations[(assignment_id, day)] = {
                    "assignment_id": assignment_id,
                    "allocation_date": day,
                    "percentage": percentage,
                }

        ctx.write(
            Assignment,
            ["id", "resource_id", "project_id"],
            list(new_assignments.values()),
            ConflictPolicy.none,
        )
        ctx.write(
            Allocation,
            ["assignment_id", "allocation_date", "percentage"],
            list(allocations.values()),
            ConflictPolicy.merge,
            ["assignment_id", "allocation_date"],
            ["percentage"],
        )
        logger.info(
            f"Staffing: {len(new_assignments)} new assignments, {len(allocations)} allocations"
        )

    def _cells(self, record: dict[str, Any], column_days: dict, dayfirst: bool):
        """Yield (day, raw percentage) pairs from a wide or long row."""
        long_day = self.cell(record, "Date")
        if long_day is not None:
            day = to_date(long_day, dayfirst)
            raw = self.cell(record, "Percentage", "%")
            if day is not None and raw is not None:
                yield day, raw
            return

        for label, raw in record.items():
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            if label not in column_days:
                column_days[label] = self._column_day(label, dayfirst)
            day = column_days[label]
            if day is not None:
                yield day, raw

    @staticmethod
    def _column_day(label: Any, dayfirst: bool):
        if isinstance(label, str):
            if normalize_key(label) in IDENTITY_LABELS or not _HAS_DIGIT.search(label):
                return None
        return to_date(label, dayfirst)
