"""
Leave requests importer (append-only).
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from staffhub.models import LeaveRequest
from staffhub.services.imports.base import BaseImporter, ImportContext, register_importer
from staffhub.services.imports.normalizer import clean_text, split_list, to_bool, to_date
from staffhub.services.imports.writer import ConflictPolicy

logger = logging.getLogger(__name__)

LEAVE_COLUMNS = [
    "id",
    "resource_id",
    "type_id",
    "start_date",
    "end_date",
    "status",
    "approver_ids",
    "is_half_day",
    "notes",
    "created_at",
]
DEFAULT_STATUS = "PENDING"


@register_importer
class LeavesImporter(BaseImporter):
    import_type = "leaves"

    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        dayfirst = ctx.settings.import_dayfirst
        resolver = ctx.resolver
        created_at = datetime.now(timezone.utc)
        rows = []

        for record in self.records(ctx, payload, "leaves"):
            resource_label = clean_text(self.cell(record, "Resource", "Email"))
            type_label = clean_text(self.cell(record, "Type", "Leave Type"))
            start = to_date(self.cell(record, "Start Date"), dayfirst)
            raw_end = self.cell(record, "End Date")
            end = to_date(raw_end, dayfirst)

            if not resource_label or not type_label or start is None:
                ctx.warn("Leave row skipped: resource, type and start date are required.")
                continue
            if end is None:
                if raw_end is not None:
                    ctx.warn(
                        f"Leave for '{resource_label}': end date '{raw_end}' is not a date, "
                        f"the start date is used.",
                        skip=False,
                    )
                end = start
            if end < start:
                ctx.warn(f"Leave for '{resource_label}' skipped: end date is before start date.")
                continue

            resource_id = resolver.resolve_resource(resource_label)
            if resource_id is None:
                ctx.warn(f"Leave skipped: resource '{resource_label}' not found.")
                continue
            type_id = resolver.leave_types.resolve(type_label)
            if type_id is None:
                ctx.warn(f"Leave for '{resource_label}' skipped: leave type '{type_label}' not found.")
                continue

            approver_ids: list[str] = []
            for label in split_list(self.cell(record, "Approvers", "Approver")):
                approver_id = resolver.resolve_resource(label)
                if approver_id is None:
                    ctx.warn(f"Leave for '{resource_label}': approver '{label}' not found, ignored.", skip=False)
                elif approver_id == resource_id:
                    ctx.warn(
                        f"Leave for '{resource_label}': a resource cannot approve its own leave, "
                        f"approver removed.",
                        skip=False,
                    )
                elif str(approver_id) not in approver_ids:
                    approver_ids.append(str(approver_id))

            rows.append(
                {
                    "id": uuid4(),
                    "resource_id": resource_id,
                    "type_id": type_id,
                    "start_date": start,
                    "end_date": end,
                    "status": (clean_text(self.cell(record, "Status")) or DEFAULT_STATUS).upper(),
                    "approver_ids": approver_ids,
                    "is_half_day": to_bool(self.cell(record, "Half Day", "Is Half Day")),
                    "notes": clean_text(self.cell(record, "Notes")),
                    "created_at": created_at,
                }
            )

        ctx.write(LeaveRequest, LEAVE_COLUMNS, rows, ConflictPolicy.none)
        logger.info(f"Leaves: {len(rows)} created")
