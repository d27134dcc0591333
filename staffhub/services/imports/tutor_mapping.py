"""
Tutor mapping importer.

Tutor links are a weak resource -> resource reference, applied as a final
pass of per-row UPDATEs once every resource of the run exists. Each edge is
checked on its own: a resource cannot tutor itself, and an edge that would
close a tutor cycle (A -> B -> ... -> A) is not applied.
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select, update

from staffhub.models import Resource
from staffhub.services.imports.base import BaseImporter, ImportContext, register_importer
from staffhub.services.imports.normalizer import clean_text

logger = logging.getLogger(__name__)


@dataclass
class TutorEdge:
    """Requested tutor for one resource; `tutor_id` None clears the link."""

    resource_id: UUID
    tutor_id: UUID | None
    resource_label: str
    tutor_label: str | None = None


def _closes_cycle(links: dict[UUID, UUID | None], resource_id: UUID, tutor_id: UUID) -> bool:
    """True if following tutor links from `tutor_id` leads back to `resource_id`."""
    seen: set[UUID] = set()
    current: UUID | None = tutor_id
    while current is not None and current not in seen:
        if current == resource_id:
            return True
        seen.add(current)
        current = links.get(current)
    return False


def apply_tutor_edges(ctx: ImportContext, edges: list[TutorEdge]) -> int:
    """
    Apply tutor edges with direct UPDATE statements.

    Returns:
        Number of resources updated
    """
    if not edges:
        return 0

    links: dict[UUID, UUID | None] = {
        rid: tid for rid, tid in ctx.db.execute(select(Resource.id, Resource.tutor_id)).all()
    }

    applied = 0
    for edge in edges:
        tutor_id = edge.tutor_id
        if tutor_id is not None and tutor_id == edge.resource_id:
            ctx.warn(
                f"Resource '{edge.resource_label}' cannot be its own tutor; tutor cleared.",
                skip=False,
            )
            tutor_id = None
        elif tutor_id is not None and _closes_cycle(links, edge.resource_id, tutor_id):
            ctx.warn(
                f"Tutor '{edge.tutor_label}' for '{edge.resource_label}' would create a tutor cycle; "
                f"link not applied."
            )
            continue

        ctx.db.execute(
            update(Resource).where(Resource.id == edge.resource_id).values(tutor_id=tutor_id)
        )
        links[edge.resource_id] = tutor_id
        applied += 1

    ctx.stats.written += applied
    logger.info(f"Tutor links applied: {applied} of {len(edges)}")
    return applied


@register_importer
class TutorMappingImporter(BaseImporter):
    """`tutor_mapping` sheet: Resource, Tutor (email or name). Blank tutor clears."""

    import_type = "tutor_mapping"

    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        resolver = ctx.resolver
        edges: dict[UUID, TutorEdge] = {}

        for record in self.records(ctx, payload, "tutor_mapping"):
            resource_label = clean_text(self.cell(record, "Resource", "Email", "Resource Email"))
            tutor_label = clean_text(self.cell(record, "Tutor", "Tutor Email"))

            if not resource_label:
                ctx.warn("Tutor mapping row skipped: missing resource.")
                continue

            resource_id = resolver.resolve_resource(resource_label)
            if resource_id is None:
                ctx.warn(f"Tutor mapping skipped: resource '{resource_label}' not found.")
                continue

            tutor_id = None
            if tutor_label:
                tutor_id = resolver.resolve_resource(tutor_label)
                if tutor_id is None:
                    ctx.warn(
                        f"Tutor mapping for '{resource_label}' skipped: tutor '{tutor_label}' not found."
                    )
                    continue

            if resource_id in edges:
                ctx.warn(
                    f"Resource '{resource_label}' appears more than once; the later tutor wins.",
                    skip=False,
                )
            edges[resource_id] = TutorEdge(resource_id, tutor_id, resource_label, tutor_label)

        apply_tutor_edges(ctx, list(edges.values()))
