"""
Pytest configuration and fixtures for StaffHub tests.

Every test gets its own in-memory SQLite database, so import runs can commit
and roll back freely without leaking state between tests.
"""

import os

from cryptography.fernet import Fernet

# Must be set before staffhub is imported (settings are cached)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TOKEN_KEY"] = Fernet.generate_key().decode()
os.environ["IMPORT_MAX_BIND_PARAMS"] = "30000"

import pytest  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from staffhub.config import get_settings  # noqa: E402
from staffhub.database import build_engine  # noqa: E402
from staffhub.models import Base  # noqa: E402
from staffhub.services.credentials import CredentialService  # noqa: E402
from staffhub.services.imports import ImportContext, ImportOrchestrator  # noqa: E402


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database with the full schema."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Session:
    """Provide a database session for tests."""
    session_factory = sessionmaker(bind=engine, autoflush=False)
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def credentials(settings):
    return CredentialService(settings.token_key, settings.token_ttl_seconds)


@pytest.fixture
def admin_token(credentials):
    """Token for an operational user."""
    return credentials.issue("admin", "ADMIN")


@pytest.fixture
def simple_token(credentials):
    """Token for a user without import rights."""
    return credentials.issue("viewer", "SIMPLE")


@pytest.fixture
def orchestrator(db_session, credentials, settings):
    return ImportOrchestrator(db_session, credentials, settings)


@pytest.fixture
def run_import(db_session, credentials, settings, admin_token):
    """Run one committed import as an admin and return the outcome."""

    def _run(import_type, payload):
        return ImportOrchestrator(db_session, credentials, settings).run(
            admin_token, import_type, payload
        )

    return _run


@pytest.fixture
def import_context(db_session, settings):
    """Importer context on the test session, without the orchestrator."""
    return ImportContext.create(db_session, settings)


@pytest.fixture
def core_payload():
    """Small but complete core_entities payload."""
    return {
        "horizontals": [{"Value": "Data"}, {"Value": "cloud"}],
        "locations": [{"Value": "Milano"}, {"Value": "Roma"}],
        "calendar": [
            {"Name": "Ferragosto", "Date": "2024-08-15", "Location": None},
            {"Name": "Sant'Ambrogio", "Date": 45633, "Location": "Milano"},
        ],
        "roles": [
            {"Name": "Consultant", "Seniority Level": "Junior", "Daily Cost": 400},
            {"Name": "Manager", "Seniority Level": "Senior", "Daily Cost": "800"},
        ],
        "clients": [
            {"Name": "Acme", "Sector": "Retail"},
            {"Name": "Globex", "Sector": "Energy"},
        ],
        "resources": [
            {
                "Name": "Anna Bianchi",
                "Email": "anna@example.com",
                "Role": "Manager",
                "Location": "Milano",
                "Hire Date": 45366,
                "Skills": "Python, SQL",
            },
            {
                "Name": "Marco Rossi",
                "Email": "marco@example.com",
                "Role": "consultant",
                "Tutor": "anna@example.com",
            },
        ],
        "projects": [
            {"Name": "Apollo", "Client": "Acme", "Start Date": "2024-01-01", "Budget": 100000},
            {"Name": "Internal", "Client": None},
        ],
    }


@pytest.fixture
def seeded(run_import, core_payload):
    """Database populated with `core_payload`."""
    return run_import("core_entities", core_payload)
