"""
Core entities importer.

Loads the master data of the application in dependency order:
configuration dimensions, company calendar, roles, clients, resources
(with their inline skills), projects, and finally tutor links.

Payload sheets:
    horizontals, seniority_levels, project_statuses, client_sectors,
    locations, calendar, roles, clients, resources, projects
"""

import logging
from typing import Any
from uuid import UUID

from staffhub.models import (
    Client,
    CompanyCalendarEvent,
    LOOKUP_MODELS,
    Project,
    Resource,
    ResourceSkill,
    Role,
    Skill,
)
from staffhub.services.imports.base import BaseImporter, ImportContext, register_importer
from staffhub.services.imports.normalizer import (
    clean_text,
    present_name,
    split_list,
    to_bool,
    to_date,
    to_int,
    to_number,
)
from staffhub.services.imports.tutor_mapping import TutorEdge, apply_tutor_edges
from staffhub.services.imports.writer import ConflictPolicy

logger = logging.getLogger(__name__)

CALENDAR_COLUMNS = ["id", "name", "date", "type", "location"]
ROLE_COLUMNS = ["id", "name", "seniority_level", "daily_cost", "standard_cost", "daily_expenses"]
CLIENT_COLUMNS = ["id", "name", "sector", "contact_email"]
RESOURCE_COLUMNS = [
    "id",
    "name",
    "email",
    "role_id",
    "horizontal",
    "location",
    "hire_date",
    "work_seniority",
    "notes",
    "max_staffing_percentage",
    "resigned",
    "last_day_of_work",
]
PROJECT_COLUMNS = [
    "id",
    "name",
    "client_id",
    "start_date",
    "end_date",
    "budget",
    "realization_percentage",
    "project_manager",
    "status",
    "notes",
]

DEFAULT_CALENDAR_TYPE = "NATIONAL_HOLIDAY"


@register_importer
class CoreEntitiesImporter(BaseImporter):
    import_type = "core_entities"

    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        self._import_dimensions(ctx, payload)
        self._import_calendar(ctx, payload)
        self._import_named(ctx, payload, "roles", Role, ctx.resolver.roles, self._role_row, ROLE_COLUMNS)
        self._import_named(
            ctx, payload, "clients", Client, ctx.resolver.clients, self._client_row, CLIENT_COLUMNS
        )
        tutor_requests = self._import_resources(ctx, payload)
        self._import_projects(ctx, payload)
        self._apply_tutors(ctx, tutor_requests)

    # Configuration dimensions

    def _import_dimensions(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        for key, model in LOOKUP_MODELS.items():
            key_map = ctx.resolver.lookup(key)
            rows = []
            for record in self.records(ctx, payload, key):
                value = clean_text(self.cell(record, "Value", "Name", key))
                if not value:
                    ctx.warn(f"{key}: row without a value skipped.")
                    continue
                entity_id, created = key_map.resolve_or_create(value)
                if created:
                    rows.append({"id": entity_id, "value": present_name(value)})
            ctx.write(model, ["id", "value"], rows, ConflictPolicy.ignore, ["value"])

    # Company calendar

    def _import_calendar(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        dayfirst = ctx.settings.import_dayfirst
        key_map = ctx.resolver.calendar
        rows: dict[UUID, dict[str, Any]] = {}

        for record in self.records(ctx, payload, "calendar"):
            name = clean_text(self.cell(record, "Name", "Description"))
            day = to_date(self.cell(record, "Date"), dayfirst)
            if not name or day is None:
                ctx.warn(f"Calendar event '{name or ''}' skipped: name and a valid date are required.")
                continue
            location = clean_text(self.cell(record, "Location"))
            event_type = clean_text(self.cell(record, "Type")) or DEFAULT_CALENDAR_TYPE

            event_id, _ = key_map.resolve_or_create((day.isoformat(), location or ""))
            if event_id in rows:
                ctx.warn(
                    f"Calendar event on {day.isoformat()} ({location or 'all locations'}) "
                    f"appears more than once; the later row wins.",
                    skip=False,
                )
            rows[event_id] = {
                "id": event_id,
                "name": name,
                "date": day,
                "type": event_type.upper().replace(" ", "_"),
                "location": location,
            }

        ctx.write(
            CompanyCalendarEvent, CALENDAR_COLUMNS, list(rows.values()), ConflictPolicy.merge, ["id"]
        )

    # Roles and clients

    def _role_row(self, ctx: ImportContext, record: dict[str, Any]) -> dict[str, Any]:
        daily_cost = to_number(self.cell(record, "Daily Cost"), 0.0)
        return {
            "seniority_level": clean_text(self.cell(record, "Seniority Level", "Seniority")),
            "daily_cost": daily_cost,
            "standard_cost": to_number(self.cell(record, "Standard Cost")),
            "daily_expenses": round(daily_cost * ctx.settings.daily_expense_ratio, 2),
        }

    def _client_row(self, ctx: ImportContext, record: dict[str, Any]) -> dict[str, Any]:
        return {
            "sector": clean_text(self.cell(record, "Sector")),
            "contact_email": clean_text(self.cell(record, "Contact Email", "Email")),
        }

    def _import_named(self, ctx, payload, key, model, key_map, build_row, columns) -> None:
        """Append-only sheet keyed by name; existing names are reported and skipped."""
        label = key[:-1].capitalize()
        rows = []
        for record in self.records(ctx, payload, key):
            name = clean_text(self.cell(record, "Name"))
            if not name:
                ctx.warn(f"{label} row without a name skipped.")
                continue
            if name in key_map:
                if key_map.is_new(name):
                    ctx.warn(f"{label} '{name}' appears more than once; only the first row was imported.")
                else:
                    ctx.warn(f"{label} '{name}' already exists, skipped.")
                continue
            entity_id, _ = key_map.resolve_or_create(name)
            rows.append({"id": entity_id, "name": present_name(name), **build_row(ctx, record)})
        ctx.write(model, columns, rows, ConflictPolicy.none)

    # Resources

    def _import_resources(self, ctx: ImportContext, payload: dict[str, Any]) -> list[tuple]:
        """
        Upsert resources by email and link their inline skills.

        Returns:
            (resource_id, resource label, tutor label) for the tutor pass
        """
        dayfirst = ctx.settings.import_dayfirst
        resolver = ctx.resolver
        rows: dict[UUID, dict[str, Any]] = {}
        tutors: dict[UUID, tuple] = {}
        inline_skills: dict[UUID, list[str]] = {}

        for record in self.records(ctx, payload, "resources"):
            name = clean_text(self.cell(record, "Name", "Full Name"))
            email = clean_text(self.cell(record, "Email"))
            if not email or not name:
                ctx.warn(f"Resource '{name or email or ''}' skipped: name and email are required.")
                continue

            role_label = clean_text(self.cell(record, "Role"))
            role_id = None
            if role_label:
                role_id = resolver.roles.resolve(role_label)
                if role_id is None:
                    ctx.warn(f"Resource '{email}' skipped: role '{role_label}' not found.")
                    continue

            resource_id, created = resolver.resources_by_email.resolve_or_create(email)
            if created:
                resolver.resources_by_name.register_unique(name, resource_id)
            if resource_id in rows:
                ctx.warn(
                    f"Resource email '{email}' appears more than once; the later row wins.",
                    skip=False,
                )

            rows[resource_id] = {
                "id": resource_id,
                "name": present_name(name),
                "email": email.lower(),
                "role_id": role_id,
                "horizontal": clean_text(self.cell(record, "Horizontal")),
                "location": clean_text(self.cell(record, "Location", "Office")),
                "hire_date": to_date(self.cell(record, "Hire Date"), dayfirst),
                "work_seniority": to_int(self.cell(record, "Work Seniority"), 0),
                "notes": clean_text(self.cell(record, "Notes")),
                "max_staffing_percentage": to_int(self.cell(record, "Max Staffing %", "Max Staffing"), 100),
                "resigned": to_bool(self.cell(record, "Resigned")),
                "last_day_of_work": to_date(self.cell(record, "Last Day Of Work"), dayfirst),
            }

            tutor_label = clean_text(self.cell(record, "Tutor"))
            if tutor_label:
                tutors[resource_id] = (email, tutor_label)
            else:
                tutors.pop(resource_id, None)
            inline_skills[resource_id] = split_list(self.cell(record, "Skills"))

        ctx.write(Resource, RESOURCE_COLUMNS, list(rows.values()), ConflictPolicy.merge, ["id"])
        self._link_inline_skills(ctx, inline_skills)

        return [(rid, label, tutor) for rid, (label, tutor) in tutors.items()]

    def _link_inline_skills(self, ctx: ImportContext, inline_skills: dict[UUID, list[str]]) -> None:
        skills = ctx.resolver.skills
        new_skills = []
        links: dict[tuple, dict[str, Any]] = {}
        for resource_id, names in inline_skills.items():
            for skill_name in names:
                skill_id, created = skills.resolve_or_create(skill_name)
                if created:
                    new_skills.append(
                        {"id": skill_id, "name": present_name(skill_name), "is_certification": False}
                    )
                links[(resource_id, skill_id)] = {"resource_id": resource_id, "skill_id": skill_id}

        ctx.write(Skill, ["id", "name", "is_certification"], new_skills, ConflictPolicy.ignore, ["name"])
        ctx.write(
            ResourceSkill,
            ["resource_id", "skill_id"],
            list(links.values()),
            ConflictPolicy.ignore,
            ["resource_id", "skill_id"],
        )

    # Projects

    def _import_projects(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        dayfirst = ctx.settings.import_dayfirst
        resolver = ctx.resolver
        rows: dict[UUID, dict[str, Any]] = {}

        for record in self.records(ctx, payload, "projects"):
            name = clean_text(self.cell(record, "Name"))
            if not name:
                ctx.warn("Project row without a name skipped.")
                continue

            client_label = clean_text(self.cell(record, "Client"))
            client_id = None
            if client_label:
                client_id = resolver.clients.resolve(client_label)
                if client_id is None:
                    ctx.warn(f"Project '{name}' skipped: client '{client_label}' not found.")
                    continue

            project_id, created = resolver.projects.resolve_or_create((name, client_id or ""))
            if created:
                resolver.projects_by_name.register_unique(name, project_id)
            if project_id in rows:
                ctx.warn(
                    f"Project '{name}' ({client_label or 'no client'}) appears more than once; "
                    f"the later row wins.",
                    skip=False,
                )

            rows[project_id] = {
                "id": project_id,
                "name": present_name(name),
                "client_id": client_id,
                "start_date": to_date(self.cell(record, "Start Date"), dayfirst),
                "end_date": to_date(self.cell(record, "End Date"), dayfirst),
                "budget": to_number(self.cell(record, "Budget")),
                "realization_percentage": to_int(
                    self.cell(record, "Realization %", "Realization"), 100
                ),
                "project_manager": clean_text(self.cell(record, "Project Manager")),
                "status": clean_text(self.cell(record, "Status")),
                "notes": clean_text(self.cell(record, "Notes")),
            }

        ctx.write(Project, PROJECT_COLUMNS, list(rows.values()), ConflictPolicy.merge, ["id"])

    # Tutors

    def _apply_tutors(self, ctx: ImportContext, requests: list[tuple]) -> None:
        edges = []
        for resource_id, resource_label, tutor_label in requests:
            tutor_id = ctx.resolver.resolve_resource(tutor_label)
            if tutor_id is None:
                ctx.warn(
                    f"Tutor '{tutor_label}' for resource '{resource_label}' not found; tutor not set.",
                    skip=False,
                )
                continue
            edges.append(TutorEdge(resource_id, tutor_id, resource_label, tutor_label))
        apply_tutor_edges(ctx, edges)
