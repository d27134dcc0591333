"""
Tests for the import API routes.
"""

import uuid
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from staffhub.database import get_db
from staffhub.main import app
from staffhub.models import Role
from staffhub.services.imports.core_entities import CoreEntitiesImporter


@pytest.fixture
def client(db_session):
    """Test client sharing the test session."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestImportEndpoint:
    """Test POST /api/import."""

    def test_successful_import(self, client, admin_token, db_session):
        """Test a committed run returns message, warnings and stats."""
        response = client.post(
            "/api/import",
            params={"type": "core_entities"},
            json={"roles": [{"Name": "Manager", "Daily Cost": 800}, {"Name": ""}]},
            headers=bearer(admin_token),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Import completed."
        assert len(data["warnings"]) == 1
        assert data["stats"]["skipped"] == 1
        assert db_session.execute(select(Role.name)).scalars().all() == ["Manager"]

    def test_missing_token_is_401(self, client):
        """Test that an anonymous call is refused."""
        response = client.post("/api/import", params={"type": "core_entities"}, json={})
        assert response.status_code == 401

    def test_wrong_scheme_is_401(self, client, admin_token):
        """Test that only bearer tokens are accepted."""
        response = client.post(
            "/api/import",
            params={"type": "core_entities"},
            json={},
            headers={"Authorization": f"Basic {admin_token}"},
        )
        assert response.status_code == 401

    def test_non_operational_role_is_403(self, client, simple_token):
        """Test that a valid non-operational user is forbidden."""
        response = client.post(
            "/api/import", params={"type": "core_entities"}, json={}, headers=bearer(simple_token)
        )
        assert response.status_code == 403

    def test_unknown_type_is_400(self, client, admin_token):
        """Test that an unknown import type is a client error."""
        response = client.post("/api/import", params={"type": "payroll"}, json={}, headers=bearer(admin_token))
        assert response.status_code == 400
        assert "payroll" in response.json()["detail"]

    def test_missing_type_is_422(self, client, admin_token):
        """Test that the type query parameter is required."""
        response = client.post("/api/import", json={}, headers=bearer(admin_token))
        assert response.status_code == 422

    def test_failed_run_is_500(self, client, admin_token, db_session):
        """Test that a rolled back run reports its error."""

        def broken_run(self, ctx, payload):
            ctx.write(Role, ["id", "name"], [{"id": uuid.uuid4(), "name": "Manager"}])
            raise RuntimeError("connection lost")

        with patch.object(CoreEntitiesImporter, "run", broken_run):
            response = client.post(
                "/api/import",
                params={"type": "core_entities"},
                json={},
                headers=bearer(admin_token),
            )

        assert response.status_code == 500
        assert response.json() == {"detail": "connection lost"}
        assert db_session.execute(select(Role)).all() == []


class TestAuxiliaryEndpoints:
    """Test types, history and health."""

    def test_types(self, client):
        """Test the list of import families."""
        response = client.get("/api/import/types")
        assert response.status_code == 200
        data = response.json()
        assert "core_entities" in data["types"]
        assert data["sheets"]["skills"]["Resource_Skills"] == "resource_skills"

    def test_history_after_run(self, client, admin_token):
        """Test that runs are listed newest first."""
        client.post("/api/import", params={"type": "skills"}, json={}, headers=bearer(admin_token))
        client.post("/api/import", params={"type": "leaves"}, json={}, headers=bearer(admin_token))

        response = client.get("/api/import/history", headers=bearer(admin_token))

        assert response.status_code == 200
        history = response.json()
        assert {h["import_type"] for h in history} == {"skills", "leaves"}
        assert all(h["status"] == "success" for h in history)

    def test_history_requires_token(self, client):
        """Test that history is not public."""
        assert client.get("/api/import/history").status_code == 401

    def test_health(self, client):
        """Test the health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"
