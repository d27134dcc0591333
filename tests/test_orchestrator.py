"""
Tests for import run orchestration.
"""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from staffhub.models import ImportHistory, ImportStatus, Project, Resource, Role
from staffhub.services.imports import (
    ImportAuthorizationError,
    ImportOrchestrator,
    ImportRunError,
    RunState,
    UnknownImportTypeError,
    available_import_types,
)
from staffhub.services.imports.core_entities import CoreEntitiesImporter
from staffhub.services.imports.writer import BulkWriter, ConflictPolicy


def count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar()


class TestAuthentication:
    """Test caller checks before any work."""

    def test_missing_token_rejected(self, orchestrator):
        """Test that a run without token is rejected."""
        with pytest.raises(ImportAuthorizationError) as exc_info:
            orchestrator.run(None, "core_entities", {})
        assert exc_info.value.authenticated is False
        assert orchestrator.state is RunState.rejected

    def test_garbage_token_rejected(self, orchestrator):
        """Test that a token that does not verify is rejected."""
        with pytest.raises(ImportAuthorizationError):
            orchestrator.run("not-a-token", "core_entities", {})
        assert orchestrator.state is RunState.rejected

    def test_non_operational_role_rejected(self, orchestrator, simple_token, db_session):
        """Test that a valid token without an operational role writes nothing."""
        with pytest.raises(ImportAuthorizationError) as exc_info:
            orchestrator.run(simple_token, "core_entities", {"roles": [{"Name": "Manager"}]})
        assert exc_info.value.authenticated is True
        assert count(db_session, Role) == 0

    @pytest.mark.parametrize("role", ["ADMIN", "MANAGER", "SENIOR MANAGER", "managing director"])
    def test_operational_roles_accepted(self, orchestrator, credentials, role):
        """Test every operational role."""
        claims = orchestrator.authenticate(credentials.issue("user", role))
        assert claims.role == role.upper()
        assert orchestrator.state is RunState.authenticated


class TestRunLifecycle:
    """Test commit, rollback and history."""

    def test_unknown_type_writes_nothing(self, orchestrator, admin_token, db_session):
        """Test that an unknown import type is refused before any write."""
        with pytest.raises(UnknownImportTypeError):
            orchestrator.run(admin_token, "payroll", {"roles": [{"Name": "Manager"}]})
        assert orchestrator.state is RunState.rolled_back
        assert count(db_session, Role) == 0
        assert count(db_session, ImportHistory) == 0

    def test_successful_run_commits(self, orchestrator, admin_token, db_session, core_payload):
        """Test state, message and history of a clean run."""
        outcome = orchestrator.run(admin_token, "core_entities", core_payload)

        assert orchestrator.state is RunState.committed
        assert outcome.message == "Import completed."
        assert outcome.stats.processed > 0
        history = db_session.execute(select(ImportHistory)).scalar_one()
        assert history.status is ImportStatus.success
        assert history.username == "admin"
        assert history.import_type == "core_entities"

    def test_warnings_mark_run_partial(self, orchestrator, admin_token, db_session):
        """Test that a run with warnings is recorded as partial."""
        outcome = orchestrator.run(admin_token, "core_entities", {"resources": [{"Name": "No Mail"}]})
        history = db_session.execute(select(ImportHistory)).scalar_one()
        assert history.status is ImportStatus.partial
        assert history.warnings == outcome.warnings

    def test_failure_rolls_back_everything(self, orchestrator, admin_token, db_session, core_payload):
        """Test that an error after earlier writes leaves no rows behind."""
        original_write = BulkWriter.write

        def failing_write(self, target, *args, **kwargs):
            if target is Project:
                raise RuntimeError("disk full")
            return original_write(self, target, *args, **kwargs)

        with patch.object(BulkWriter, "write", failing_write):
            with pytest.raises(ImportRunError, match="disk full"):
                orchestrator.run(admin_token, "core_entities", core_payload)

        assert orchestrator.state is RunState.rolled_back
        assert count(db_session, Role) == 0
        assert count(db_session, Resource) == 0
        history = db_session.execute(select(ImportHistory)).scalar_one()
        assert history.status is ImportStatus.failed
        assert history.error_message == "disk full"
        assert history.records_written == 0

    def test_store_error_message_surfaced(self, orchestrator, admin_token, db_session):
        """Test that a constraint violation is reported with the driver message."""
        db_session.add(Role(name="Manager"))
        db_session.commit()

        def conflicting_names(self, ctx, payload):
            ctx.write(Role, ["id", "name"], [{"id": uuid.uuid4(), "name": "Manager"}], ConflictPolicy.none)

        with patch.object(CoreEntitiesImporter, "run", conflicting_names):
            with pytest.raises(ImportRunError) as exc_info:
                orchestrator.run(admin_token, "core_entities", {})

        assert "UNIQUE" in str(exc_info.value).upper()
        assert count(db_session, Role) == 1

    def test_empty_payload_commits(self, orchestrator, admin_token):
        """Test that an empty payload is a successful no-op."""
        outcome = orchestrator.run(admin_token, "skills", {})
        assert outcome.warnings == []
        assert outcome.stats.as_dict() == {"processed": 0, "written": 0, "skipped": 0}


class TestRegistry:
    """Test the importer registry."""

    def test_all_families_registered(self):
        """Test that every import family is available."""
        assert available_import_types() == [
            "core_entities",
            "interviews",
            "leaves",
            "resource_requests",
            "skills",
            "staffing",
            "tutor_mapping",
            "users_permissions",
        ]

    def test_orchestrator_uses_default_settings(self, db_session, credentials):
        """Test construction with only a session and credentials."""
        orchestrator = ImportOrchestrator(db_session, credentials)
        assert orchestrator.state is RunState.unauthenticated
        assert "ADMIN" in orchestrator.settings.operational_roles
