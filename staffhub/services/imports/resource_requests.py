"""
Resource requests importer (append-only).

Each row becomes a new staffing request for a project and role. Request
codes continue the `HCRnnnnn` sequence already in the store; a row that
carries its own code keeps it, unless that code is already taken.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import select

from staffhub.models import ResourceRequest
from staffhub.services.imports.base import BaseImporter, ImportContext, register_importer
from staffhub.services.imports.normalizer import clean_text, normalize_key, to_bool, to_date, to_int
from staffhub.services.imports.writer import ConflictPolicy

logger = logging.getLogger(__name__)

REQUEST_COLUMNS = [
    "id",
    "request_code",
    "project_id",
    "role_id",
    "requestor_id",
    "start_date",
    "end_date",
    "commitment_percentage",
    "is_urgent",
    "is_long_term",
    "is_tech_request",
    "is_osr_open",
    "osr_number",
    "notes",
    "status",
    "created_at",
]
DEFAULT_STATUS = "ACTIVE"


class RequestCodeSequence:
    """Hands out request codes after the highest one already in use."""

    def __init__(self, existing_codes):
        self.used = {normalize_key(code) for code in existing_codes if code}
        self.last = max((ResourceRequest.parse_code(code) for code in existing_codes if code), default=0)

    def claim(self, code: str) -> bool:
        """Reserve an explicit code; False if it is already used."""
        key = normalize_key(code)
        if key in self.used:
            return False
        self.used.add(key)
        self.last = max(self.last, ResourceRequest.parse_code(code))
        return True

    def next(self) -> str:
        while True:
            self.last += 1
            code = ResourceRequest.format_code(self.last)
            if self.claim(code):
                return code


@register_importer
class ResourceRequestsImporter(BaseImporter):
    import_type = "resource_requests"

    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        records = self.records(ctx, payload, "resource_requests")
        if not records:
            return

        dayfirst = ctx.settings.import_dayfirst
        resolver = ctx.resolver
        codes = RequestCodeSequence(ctx.db.execute(select(ResourceRequest.request_code)).scalars().all())
        created_at = datetime.now(timezone.utc)
        rows = []

        for position, record in enumerate(records, start=1):
            project_label = clean_text(self.cell(record, "Project"))
            client_label = clean_text(self.cell(record, "Client"))
            role_label = clean_text(self.cell(record, "Role"))
            start = to_date(self.cell(record, "Start Date"), dayfirst)
            end = to_date(self.cell(record, "End Date"), dayfirst)
            where = f"Resource request row {position}"

            if not project_label or not role_label or start is None or end is None:
                ctx.warn(f"{where} skipped: project, role, start date and end date are required.")
                continue
            if end < start:
                ctx.warn(f"{where} skipped: end date {end.isoformat()} is before start date.")
                continue

            project_id = resolver.resolve_project(project_label, client_label)
            if project_id is None:
                ctx.warn(f"{where} skipped: project '{project_label}' not found.")
                continue
            role_id = resolver.roles.resolve(role_label)
            if role_id is None:
                ctx.warn(f"{where} skipped: role '{role_label}' not found.")
                continue

            requestor_label = clean_text(self.cell(record, "Requestor"))
            requestor_id = resolver.resolve_resource(requestor_label) if requestor_label else None
            if requestor_label and requestor_id is None:
                ctx.warn(f"{where}: requestor '{requestor_label}' not found, left empty.", skip=False)

            code = clean_text(self.cell(record, "Request Code", "Code"))
            if code:
                if not codes.claim(code):
                    ctx.warn(f"{where} skipped: request code '{code}' already exists.")
                    continue
            else:
                code = codes.next()

            rows.append(
                {
                    "id": uuid4(),
                    "request_code": code,
                    "project_id": project_id,
                    "role_id": role_id,
                    "requestor_id": requestor_id,
                    "start_date": start,
                    "end_date": end,
                    "commitment_percentage": to_int(self.cell(record, "Commitment %", "Commitment"), 100),
                    "is_urgent": to_bool(self.cell(record, "Urgent")),
                    "is_long_term": ResourceRequest.span_is_long_term(
                        start, end, ctx.settings.long_term_threshold_days
                    ),
                    "is_tech_request": to_bool(self.cell(record, "Tech Request")),
                    "is_osr_open": to_bool(self.cell(record, "OSR Open")),
                    "osr_number": clean_text(self.cell(record, "OSR Number")),
                    "notes": clean_text(self.cell(record, "Notes")),
                    "status": (clean_text(self.cell(record, "Status")) or DEFAULT_STATUS).upper(),
                    "created_at": created_at,
                }
            )

        ctx.write(ResourceRequest, REQUEST_COLUMNS, rows, ConflictPolicy.none)
        logger.info(f"Resource requests: {len(rows)} created, last code {codes.last}")
