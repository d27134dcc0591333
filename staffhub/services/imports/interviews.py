"""
Interviews importer (append-only).
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import select

from staffhub.models import Interview, ResourceRequest
from staffhub.services.imports.base import BaseImporter, ImportContext, register_importer
from staffhub.services.imports.normalizer import clean_text, normalize_key, split_list, to_date
from staffhub.services.imports.resolver import KeyMap
from staffhub.services.imports.writer import ConflictPolicy

logger = logging.getLogger(__name__)

INTERVIEW_COLUMNS = [
    "id",
    "resource_request_id",
    "candidate_name",
    "candidate_surname",
    "birth_date",
    "horizontal",
    "role_id",
    "cv_summary",
    "interviewer_ids",
    "interview_date",
    "feedback",
    "notes",
    "hiring_status",
    "entry_date",
    "status",
    "created_at",
]
DEFAULT_STATUS = "OPEN"


def _upper(value: Any) -> str | None:
    text = clean_text(value)
    return text.upper() if text else None


@register_importer
class InterviewsImporter(BaseImporter):
    import_type = "interviews"

    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        records = self.records(ctx, payload, "interviews")
        if not records:
            return

        dayfirst = ctx.settings.import_dayfirst
        resolver = ctx.resolver
        request_codes = KeyMap(
            "request_codes",
            {
                code: rid
                for rid, code in ctx.db.execute(
                    select(ResourceRequest.id, ResourceRequest.request_code)
                ).all()
                if code
            },
        )
        created_at = datetime.now(timezone.utc)
        rows = []

        for record in records:
            name = clean_text(self.cell(record, "Candidate Name", "Name"))
            surname = clean_text(self.cell(record, "Candidate Surname", "Surname"))
            if not name or not surname:
                ctx.warn("Interview row skipped: candidate name and surname are required.")
                continue
            candidate = f"{name} {surname}"

            role_label = clean_text(self.cell(record, "Role"))
            role_id = resolver.roles.resolve(role_label) if role_label else None
            if role_label and role_id is None:
                ctx.warn(f"Interview for '{candidate}': role '{role_label}' not found, left empty.", skip=False)

            request_label = clean_text(self.cell(record, "Request Code", "Resource Request"))
            request_id = request_codes.resolve(request_label) if request_label else None
            if request_label and request_id is None:
                ctx.warn(
                    f"Interview for '{candidate}': request '{request_label}' not found, left unlinked.",
                    skip=False,
                )

            interviewer_ids: list[str] = []
            for label in split_list(self.cell(record, "Interviewers", "Interviewer")):
                interviewer_id = resolver.resolve_resource(label)
                if interviewer_id is None:
                    ctx.warn(f"Interview for '{candidate}': interviewer '{label}' not found, ignored.", skip=False)
                elif str(interviewer_id) not in interviewer_ids:
                    interviewer_ids.append(str(interviewer_id))

            rows.append(
                {
                    "id": uuid4(),
                    "resource_request_id": request_id,
                    "candidate_name": name,
                    "candidate_surname": surname,
                    "birth_date": to_date(self.cell(record, "Birth Date"), dayfirst),
                    "horizontal": clean_text(self.cell(record, "Horizontal")),
                    "role_id": role_id,
                    "cv_summary": clean_text(self.cell(record, "CV Summary")),
                    "interviewer_ids": interviewer_ids,
                    "interview_date": to_date(self.cell(record, "Interview Date"), dayfirst),
                    "feedback": _upper(self.cell(record, "Feedback")),
                    "notes": clean_text(self.cell(record, "Notes")),
                    "hiring_status": _upper(self.cell(record, "Hiring Status")),
                    "entry_date": to_date(self.cell(record, "Entry Date"), dayfirst),
                    "status": _upper(self.cell(record, "Status")) or DEFAULT_STATUS,
                    "created_at": created_at,
                }
            )

        ctx.write(Interview, INTERVIEW_COLUMNS, rows, ConflictPolicy.none)
        logger.info(f"Interviews: {len(rows)} created")
