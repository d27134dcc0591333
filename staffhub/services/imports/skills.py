"""
Skills importer.

Payload sheets:
    skills           Name, Category, Macro Category, Certification
    resource_skills  Resource, Skill, Level, Acquisition Date, Expiration Date

Categories and macro categories are created on first mention; the
skill -> category and category -> macro maps only ever gain links.
"""

import logging
from typing import Any
from uuid import UUID

from staffhub.models import (
    CategoryMacroLink,
    ResourceSkill,
    Skill,
    SkillCategory,
    SkillCategoryLink,
    SkillMacroCategory,
)
from staffhub.services.imports.base import BaseImporter, ImportContext, register_importer
from staffhub.services.imports.normalizer import (
    clean_text,
    present_name,
    split_list,
    to_bool,
    to_date,
    to_int,
)
from staffhub.services.imports.resolver import KeyMap
from staffhub.services.imports.writer import ConflictPolicy

logger = logging.getLogger(__name__)


@register_importer
class SkillsImporter(BaseImporter):
    import_type = "skills"

    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        resolver = ctx.resolver
        skills: dict[UUID, dict[str, Any]] = {}
        categories: list[dict[str, Any]] = []
        macros: list[dict[str, Any]] = []
        skill_links: set[tuple[UUID, UUID]] = set()
        macro_links: set[tuple[UUID, UUID]] = set()

        for record in self.records(ctx, payload, "skills"):
            name = clean_text(self.cell(record, "Name", "Skill"))
            if not name:
                ctx.warn("Skill row without a name skipped.")
                continue

            skill_id, _ = resolver.skills.resolve_or_create(name)
            skills[skill_id] = {
                "id": skill_id,
                "name": present_name(name),
                "is_certification": to_bool(self.cell(record, "Certification", "Is Certification")),
            }

            category_ids = [
                self._named(resolver.skill_categories, label, categories)
                for label in split_list(self.cell(record, "Category", "Categories"))
            ]
            macro_ids = [
                self._named(resolver.skill_macro_categories, label, macros)
                for label in split_list(self.cell(record, "Macro Category", "Macro Categories"))
            ]
            for category_id in category_ids:
                skill_links.add((skill_id, category_id))
                for macro_id in macro_ids:
                    macro_links.add((category_id, macro_id))
            if macro_ids and not category_ids:
                ctx.warn(f"Skill '{name}': macro category given without a category, ignored.", skip=False)

        resource_skills = self._resource_skills(ctx, payload, skills)

        ctx.write(
            Skill,
            ["id", "name", "is_certification"],
            list(skills.values()),
            ConflictPolicy.merge,
            ["id"],
            ["is_certification"],
        )
        ctx.write(SkillCategory, ["id", "name"], categories, ConflictPolicy.ignore, ["name"])
        ctx.write(SkillMacroCategory, ["id", "name"], macros, ConflictPolicy.ignore, ["name"])
        ctx.write(
            SkillCategoryLink,
            ["skill_id", "category_id"],
            [{"skill_id": s, "category_id": c} for s, c in sorted(skill_links, key=str)],
            ConflictPolicy.ignore,
            ["skill_id", "category_id"],
        )
        ctx.write(
            CategoryMacroLink,
            ["category_id", "macro_category_id"],
            [{"category_id": c, "macro_category_id": m} for c, m in sorted(macro_links, key=str)],
            ConflictPolicy.ignore,
            ["category_id", "macro_category_id"],
        )
        ctx.write(
            ResourceSkill,
            ["resource_id", "skill_id", "level", "acquisition_date", "expiration_date"],
            resource_skills,
            ConflictPolicy.merge,
            ["resource_id", "skill_id"],
        )

    @staticmethod
    def _named(key_map: KeyMap, label: str, new_rows: list[dict[str, Any]]) -> UUID:
        entity_id, created = key_map.resolve_or_create(label)
        if created:
            new_rows.append({"id": entity_id, "name": present_name(label)})
        return entity_id

    def _resource_skills(
        self, ctx: ImportContext, payload: dict[str, Any], skills: dict[UUID, dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Rows for `resource_skills`; unknown skills are added to `skills`."""
        dayfirst = ctx.settings.import_dayfirst
        resolver = ctx.resolver
        rows: dict[tuple, dict[str, Any]] = {}

        for record in self.records(ctx, payload, "resource_skills"):
            resource_label = clean_text(self.cell(record, "Resource", "Email"))
            skill_label = clean_text(self.cell(record, "Skill", "Skill Name"))
            if not resource_label or not skill_label:
                ctx.warn("Resource skill row skipped: resource and skill are required.")
                continue

            resource_id = resolver.resolve_resource(resource_label)
            if resource_id is None:
                ctx.warn(f"Skill '{skill_label}' skipped: resource '{resource_label}' not found.")
                continue

            skill_id, created = resolver.skills.resolve_or_create(skill_label)
            if created:
                skills[skill_id] = {
                    "id": skill_id,
                    "name": present_name(skill_label),
                    "is_certification": False,
                }

            rows[(resource_id, skill_id)] = {
                "resource_id": resource_id,
                "skill_id": skill_id,
                "level": to_int(self.cell(record, "Level")),
                "acquisition_date": to_date(self.cell(record, "Acquisition Date"), dayfirst),
                "expiration_date": to_date(self.cell(record, "Expiration Date"), dayfirst),
            }

        return list(rows.values())
