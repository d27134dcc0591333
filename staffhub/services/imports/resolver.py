"""
Natural-key resolution for import runs.

Each entity family gets a `KeyMap` (normalized natural key -> id) that is
bulk-loaded from the store with one query the first time it is needed and
then extended purely in memory. A `ResolverContext` holds the maps for one
importer invocation and is passed explicitly to every step that needs it.
"""

import logging
import uuid
from typing import Any, Callable, Hashable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from staffhub.models import (
    AppUser,
    Assignment,
    Client,
    CompanyCalendarEvent,
    LeaveType,
    LOOKUP_MODELS,
    Project,
    Resource,
    Role,
    Skill,
    SkillCategory,
    SkillMacroCategory,
)
from staffhub.services.imports.normalizer import normalize_key

logger = logging.getLogger(__name__)


def _normalize(key: Any) -> Hashable:
    """Normalize a scalar key or each element of a composite key."""
    if isinstance(key, tuple):
        return tuple(_normalize(part) for part in key)
    if isinstance(key, UUID):
        return key
    return normalize_key(key)


class KeyMap:
    """
    In-memory natural key -> identifier map for one entity family.

    Keys are normalized on every call, so "  Acme " and "acme" are the same
    entity. Ids minted by `resolve_or_create` are visible to later lookups
    immediately.
    """

    def __init__(
        self,
        name: str,
        entries: dict[Hashable, UUID] | None = None,
        id_factory: Callable[[], UUID] = uuid.uuid4,
    ):
        self.name = name
        self._ids: dict[Hashable, UUID] = {}
        self._id_factory = id_factory
        self.created: set[Hashable] = set()
        self.ambiguous: set[Hashable] = set()
        for key, value in (entries or {}).items():
            normalized = _normalize(key)
            # First persisted row wins for duplicate keys
            if normalized not in self._ids:
                self._ids[normalized] = value

    def __contains__(self, key: Any) -> bool:
        return _normalize(key) in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def resolve(self, key: Any) -> UUID | None:
        """Return the id for `key`, or None if the entity is unknown."""
        normalized = _normalize(key)
        if normalized in ("", ()):
            return None
        return self._ids.get(normalized)

    def resolve_or_create(self, key: Any) -> tuple[UUID, bool]:
        """
        Return the id for `key`, minting and registering a new one if needed.

        Returns:
            (id, created) where created is True only for a newly minted id
        """
        normalized = _normalize(key)
        existing = self._ids.get(normalized)
        if existing is not None:
            return existing, False
        new_id = self._id_factory()
        self._ids[normalized] = new_id
        self.created.add(normalized)
        return new_id, True

    def register_unique(self, key: Any, entity_id: UUID) -> None:
        """
        Register `key` only while a single entity holds it.

        A key claimed by a second id stops resolving for the rest of the run.
        """
        normalized = _normalize(key)
        if normalized in ("", ()) or normalized in self.ambiguous:
            return
        existing = self._ids.get(normalized)
        if existing is None:
            self._ids[normalized] = entity_id
        elif existing != entity_id:
            del self._ids[normalized]
            self.ambiguous.add(normalized)

    def is_ambiguous(self, key: Any) -> bool:
        return _normalize(key) in self.ambiguous

    @classmethod
    def unique(cls, name: str, pairs: list[tuple]) -> "KeyMap":
        """Build a map from (id, key) pairs, leaving out keys shared by several ids."""
        key_map = cls(name)
        for entity_id, key in pairs:
            key_map.register_unique(key, entity_id)
        return key_map

    def is_new(self, key: Any) -> bool:
        """True if the id for `key` was minted during this run."""
        return _normalize(key) in self.created


class ResolverContext:
    """
    Resolver maps for one importer invocation.

    Maps load lazily, once, on first access. They are never refreshed from
    the store afterwards; rows created during the run become visible only
    through the in-memory registration done by the importer that made them.
    """

    def __init__(self, db: Session, warn: Callable[[str], None] | None = None):
        self.db = db
        self.warn = warn
        self._maps: dict[str, KeyMap] = {}
        self._reported: set[tuple] = set()

    def _load(self, name: str, loader: Callable[[], dict[Hashable, UUID] | KeyMap]) -> KeyMap:
        key_map = self._maps.get(name)
        if key_map is None:
            loaded = loader()
            key_map = loaded if isinstance(loaded, KeyMap) else KeyMap(name, loaded)
            self._maps[name] = key_map
            logger.debug(f"Resolver map '{name}' loaded with {len(key_map)} entries")
        return key_map

    def _pairs(self, *columns) -> list[tuple]:
        return list(self.db.execute(select(*columns)).all())

    # Core entities

    @property
    def roles(self) -> KeyMap:
        return self._load("roles", lambda: {n: i for i, n in self._pairs(Role.id, Role.name)})

    @property
    def clients(self) -> KeyMap:
        return self._load("clients", lambda: {n: i for i, n in self._pairs(Client.id, Client.name)})

    @property
    def resources_by_email(self) -> KeyMap:
        return self._load(
            "resources_by_email",
            lambda: {e: i for i, e in self._pairs(Resource.id, Resource.email) if e},
        )

    @property
    def resources_by_name(self) -> KeyMap:
        return self._load(
            "resources_by_name",
            lambda: KeyMap.unique("resources_by_name", self._pairs(Resource.id, Resource.name)),
        )

    @property
    def projects(self) -> KeyMap:
        """(project name, client id or "") -> project id."""
        return self._load(
            "projects",
            lambda: {
                (n, c if c else ""): i
                for i, n, c in self._pairs(Project.id, Project.name, Project.client_id)
            },
        )

    @property
    def projects_by_name(self) -> KeyMap:
        return self._load(
            "projects_by_name",
            lambda: KeyMap.unique("projects_by_name", self._pairs(Project.id, Project.name)),
        )

    @property
    def assignments(self) -> KeyMap:
        """(resource id, project id) -> assignment id."""
        return self._load(
            "assignments",
            lambda: {
                (r, p): i
                for i, r, p in self._pairs(Assignment.id, Assignment.resource_id, Assignment.project_id)
            },
        )

    @property
    def calendar(self) -> KeyMap:
        """(YYYY-MM-DD, location or "") -> calendar event id."""
        return self._load(
            "calendar",
            lambda: {
                (d.isoformat(), loc or ""): i
                for i, d, loc in self._pairs(
                    CompanyCalendarEvent.id,
                    CompanyCalendarEvent.date,
                    CompanyCalendarEvent.location,
                )
            },
        )

    # Skills taxonomy

    @property
    def skills(self) -> KeyMap:
        return self._load("skills", lambda: {n: i for i, n in self._pairs(Skill.id, Skill.name)})

    @property
    def skill_categories(self) -> KeyMap:
        return self._load(
            "skill_categories",
            lambda: {n: i for i, n in self._pairs(SkillCategory.id, SkillCategory.name)},
        )

    @property
    def skill_macro_categories(self) -> KeyMap:
        return self._load(
            "skill_macro_categories",
            lambda: {n: i for i, n in self._pairs(SkillMacroCategory.id, SkillMacroCategory.name)},
        )

    # Operations & security

    @property
    def leave_types(self) -> KeyMap:
        return self._load(
            "leave_types",
            lambda: {n: i for i, n in self._pairs(LeaveType.id, LeaveType.name)},
        )

    @property
    def app_users(self) -> KeyMap:
        return self._load(
            "app_users",
            lambda: {n: i for i, n in self._pairs(AppUser.id, AppUser.username)},
        )

    def lookup(self, payload_key: str) -> KeyMap:
        """Map for a configuration dimension table (horizontals, locations, ...)."""
        model = LOOKUP_MODELS[payload_key]
        return self._load(
            f"lookup:{payload_key}",
            lambda: {v: i for i, v in self._pairs(model.id, model.value)},
        )

    # Cross-family helpers

    def resolve_resource(self, label: Any) -> UUID | None:
        """Resolve a resource by email first, then by name."""
        if label is None:
            return None
        found = self.resources_by_email.resolve(label)
        if found is None:
            found = self.resources_by_name.resolve(label)
        if found is None and self.resources_by_name.is_ambiguous(label):
            self._report_ambiguous("resource", label, "use the email instead")
        return found

    def resolve_project(self, name: Any, client_name: Any = None) -> UUID | None:
        """
        Resolve a project by name, narrowed to a client when one is given.

        Without a client the name must identify a single project.
        """
        if normalize_key(client_name):
            client_id = self.clients.resolve(client_name)
            if client_id is None:
                return None
            return self.projects.resolve((name, client_id))
        found = self.projects_by_name.resolve(name)
        if found is None and self.projects_by_name.is_ambiguous(name):
            self._report_ambiguous("project", name, "give the client as well")
        return found

    def _report_ambiguous(self, kind: str, label: Any, hint: str) -> None:
        key = (kind, normalize_key(label))
        if key in self._reported:
            return
        self._reported.add(key)
        message = f"{kind.capitalize()} name '{label}' matches more than one {kind}; {hint}."
        if self.warn is not None:
            self.warn(message)
        else:
            logger.warning(message)
