"""
Tests for natural-key resolution.
"""

import uuid

from staffhub.models import Client, Project, Resource
from staffhub.services.imports.resolver import KeyMap, ResolverContext


class TestKeyMap:
    """Test the in-memory key map."""

    def test_resolve_is_case_and_space_insensitive(self):
        """Test that keys are normalized on lookup."""
        entity_id = uuid.uuid4()
        key_map = KeyMap("clients", {"Acme Corp": entity_id})
        assert key_map.resolve("  acme   CORP ") == entity_id

    def test_resolve_unknown_and_empty(self):
        """Test that unknown and empty keys resolve to None."""
        key_map = KeyMap("clients", {"Acme": uuid.uuid4()})
        assert key_map.resolve("Globex") is None
        assert key_map.resolve("") is None
        assert key_map.resolve(None) is None

    def test_resolve_or_create_mints_once(self):
        """Test that a created id is reused for the same key."""
        key_map = KeyMap("roles")
        first, created = key_map.resolve_or_create("Manager")
        second, created_again = key_map.resolve_or_create(" manager ")
        assert created is True
        assert created_again is False
        assert first == second
        assert key_map.is_new("MANAGER")

    def test_existing_key_is_not_new(self):
        """Test that loaded keys are not reported as created."""
        entity_id = uuid.uuid4()
        key_map = KeyMap("roles", {"Manager": entity_id})
        assert key_map.resolve_or_create("manager") == (entity_id, False)
        assert not key_map.is_new("manager")

    def test_composite_keys(self):
        """Test tuple keys with uuid parts."""
        client_id = uuid.uuid4()
        project_id = uuid.uuid4()
        key_map = KeyMap("projects", {("Apollo", client_id): project_id})
        assert key_map.resolve(("APOLLO ", client_id)) == project_id
        assert key_map.resolve(("Apollo", "")) is None

    def test_register_unique_marks_shared_keys(self):
        """Test that a key claimed by two ids stops resolving."""
        key_map = KeyMap("resources_by_name")
        first, second = uuid.uuid4(), uuid.uuid4()
        key_map.register_unique("John Smith", first)
        key_map.register_unique("john smith", first)
        assert key_map.resolve("John Smith") == first

        key_map.register_unique("JOHN SMITH", second)
        key_map.register_unique("John Smith", uuid.uuid4())
        assert key_map.resolve("John Smith") is None
        assert key_map.is_ambiguous("john  smith")

    def test_unique_drops_shared_keys(self):
        """Test building a map from pairs with a repeated key."""
        kept = uuid.uuid4()
        pairs = [(uuid.uuid4(), "Apollo"), (kept, "Gemini"), (uuid.uuid4(), "apollo")]
        key_map = KeyMap.unique("projects_by_name", pairs)
        assert key_map.resolve("Gemini") == kept
        assert key_map.resolve("Apollo") is None
        assert key_map.is_ambiguous("Apollo")


class TestResolverContext:
    """Test maps loaded from the store."""

    def test_maps_load_from_store(self, db_session):
        """Test that persisted rows are resolvable."""
        client = Client(name="Acme")
        db_session.add(client)
        db_session.flush()
        project = Project(name="Apollo", client_id=client.id)
        db_session.add(project)
        db_session.commit()

        resolver = ResolverContext(db_session)
        assert resolver.clients.resolve("acme") == client.id
        assert resolver.resolve_project("apollo", "ACME") == project.id
        assert resolver.resolve_project("Apollo") == project.id

    def test_maps_load_only_once(self, db_session):
        """Test that later store changes are not seen by a loaded map."""
        resolver = ResolverContext(db_session)
        assert len(resolver.clients) == 0
        db_session.add(Client(name="Late"))
        db_session.commit()
        assert resolver.clients.resolve("Late") is None

    def test_resource_by_email_then_name(self, db_session):
        """Test resource resolution by email first, then unique name."""
        anna = Resource(name="Anna Bianchi", email="anna@example.com")
        db_session.add(anna)
        db_session.commit()

        resolver = ResolverContext(db_session)
        assert resolver.resolve_resource("ANNA@example.com") == anna.id
        assert resolver.resolve_resource("anna bianchi") == anna.id
        assert resolver.resolve_resource("nobody") is None

    def test_ambiguous_names_do_not_resolve(self, db_session):
        """Test that a name shared by two resources is not resolvable."""
        db_session.add_all(
            [
                Resource(name="Luca Verdi", email="luca1@example.com"),
                Resource(name="Luca Verdi", email="luca2@example.com"),
            ]
        )
        db_session.commit()

        warnings = []
        resolver = ResolverContext(db_session, warn=warnings.append)
        assert resolver.resolve_resource("Luca Verdi") is None
        assert resolver.resolve_resource("luca verdi") is None
        assert resolver.resolve_resource("luca2@example.com") is not None
        assert warnings == [
            "Resource name 'Luca Verdi' matches more than one resource; use the email instead."
        ]

    def test_project_without_client_needs_unique_name(self, db_session):
        """Test that an ambiguous project name needs the client."""
        acme = Client(name="Acme")
        globex = Client(name="Globex")
        db_session.add_all([acme, globex])
        db_session.flush()
        db_session.add_all(
            [Project(name="Apollo", client_id=acme.id), Project(name="Apollo", client_id=globex.id)]
        )
        db_session.commit()

        resolver = ResolverContext(db_session)
        assert resolver.resolve_project("Apollo") is None
        assert resolver.resolve_project("Apollo", "Globex") is not None
        assert resolver.resolve_project("Apollo", "Unknown") is None
