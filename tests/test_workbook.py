"""
Tests for reading import workbooks.
"""

from datetime import datetime
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import select

from staffhub.database import get_db
from staffhub.main import app
from staffhub.models import Client, Role
from staffhub.services.imports import UnknownImportTypeError, WorkbookError, read_workbook


def build_workbook(sheets):
    """Serialize {title: [header_row, *rows]} into .xlsx bytes."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        worksheet = workbook.create_sheet(title)
        for row in rows:
            worksheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestReadWorkbook:
    """Test sheet to payload conversion."""

    def test_sheets_become_payload_keys(self):
        """Test header mapping and sheet selection."""
        content = build_workbook(
            {
                "Roles": [["Name", "Daily Cost"], ["Manager", 800], [None, None]],
                "Clients": [["Name", "Sector"], ["Acme", "Retail"]],
                "Notes": [["Anything"], ["ignored"]],
            }
        )

        payload = read_workbook(content, "core_entities")

        assert payload == {
            "roles": [{"Name": "Manager", "Daily Cost": 800}],
            "clients": [{"Name": "Acme", "Sector": "Retail"}],
        }

    def test_date_headers_become_day_labels(self):
        """Test that staffing day columns keep their day as label."""
        content = build_workbook(
            {"Staffing": [["Resource", "Project", datetime(2024, 3, 15)], ["anna@example.com", "Apollo", 50]]}
        )

        payload = read_workbook(content, "staffing")

        assert payload["staffing"] == [{"Resource": "anna@example.com", "Project": "Apollo", "2024-03-15": 50}]

    def test_sheet_titles_match_loosely(self):
        """Test that sheet titles match case and separator insensitively."""
        content = build_workbook({"resource skills": [["Resource", "Skill"], ["a@x.com", "SQL"]]})
        assert "resource_skills" in read_workbook(content, "skills")

    def test_unknown_type(self):
        """Test that an unknown type is refused."""
        with pytest.raises(UnknownImportTypeError):
            read_workbook(build_workbook({"Roles": [["Name"]]}), "payroll")

    def test_not_a_workbook(self):
        """Test that arbitrary bytes are refused."""
        with pytest.raises(WorkbookError):
            read_workbook(b"definitely not a zip file", "core_entities")


class TestWorkbookEndpoint:
    """Test POST /api/import/workbook."""

    @pytest.fixture
    def client(self, db_session):
        def override_get_db():
            yield db_session

        app.dependency_overrides[get_db] = override_get_db
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_upload_runs_import(self, client, admin_token, db_session):
        """Test that an uploaded workbook is imported like a JSON payload."""
        content = build_workbook(
            {"Roles": [["Name", "Daily Cost"], ["Manager", 800]], "Clients": [["Name"], ["Acme"]]}
        )

        response = client.post(
            "/api/import/workbook",
            params={"type": "core_entities"},
            files={
                "file": (
                    "core.xlsx",
                    content,
                    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                )
            },
            headers={"Authorization": f"Bearer {admin_token}"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Import completed."
        assert db_session.execute(select(Role.name)).scalars().all() == ["Manager"]
        assert db_session.execute(select(Client.name)).scalars().all() == ["Acme"]

    def test_wrong_extension_is_400(self, client, admin_token):
        """Test that only .xlsx uploads are accepted."""
        response = client.post(
            "/api/import/workbook",
            params={"type": "core_entities"},
            files={"file": ("data.csv", b"a,b", "text/csv")},
            headers={"Authorization": f"Bearer {admin_token}"},
        )
        assert response.status_code == 400
