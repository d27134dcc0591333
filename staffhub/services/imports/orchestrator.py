"""
Import run orchestration.

One run = authenticate the caller, open a single transaction, dispatch the
payload to the importer registered for the requested type, then commit on
success or roll back on any error. Warnings collected by the importer are
returned with the outcome; an ImportHistory row is recorded afterwards in
its own transaction.

Run states:
    unauthenticated -> authenticated -> transaction_open -> committed
                                                         -> rolled_back
    unauthenticated -> rejected
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from staffhub.config import Settings, get_settings
from staffhub.models import ImportHistory, ImportStatus
from staffhub.services.credentials import (
    CredentialClaims,
    CredentialError,
    CredentialService,
    get_credential_service,
)
from staffhub.services.imports.base import (
    DataImportError,
    ImportContext,
    ImportStats,
    UnknownImportTypeError,
    get_importer,
)

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Import completed."


class RunState(str, enum.Enum):
    unauthenticated = "unauthenticated"
    authenticated = "authenticated"
    transaction_open = "transaction_open"
    committed = "committed"
    rolled_back = "rolled_back"
    rejected = "rejected"


class ImportAuthorizationError(DataImportError):
    """
    Raised when the caller may not run imports.

    `authenticated` is False for a missing/invalid token and True when the
    token is valid but its role is not operational.
    """

    def __init__(self, message: str, authenticated: bool = False):
        self.authenticated = authenticated
        super().__init__(message)


class ImportRunError(DataImportError):
    """Raised when a run was rolled back; carries the underlying error message."""

    pass


@dataclass
class ImportOutcome:
    """Result of a committed run."""

    import_type: str
    message: str = SUCCESS_MESSAGE
    warnings: list[str] = field(default_factory=list)
    stats: ImportStats = field(default_factory=ImportStats)
    state: RunState = RunState.committed


def _error_message(error: Exception) -> str:
    """Driver-level message for store errors, plain message otherwise."""
    original = getattr(error, "orig", None)
    return str(original) if original is not None else str(error)


class ImportOrchestrator:
    """Runs one import request against one database session."""

    def __init__(
        self,
        db: Session,
        credentials: CredentialService | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self._credentials = credentials
        self.state = RunState.unauthenticated

    @property
    def credentials(self) -> CredentialService:
        if self._credentials is None:
            self._credentials = get_credential_service()
        return self._credentials

    def authenticate(self, token: str | None) -> CredentialClaims:
        """
        Verify the bearer token and require an operational role.

        Raises:
            ImportAuthorizationError: If the token is missing, invalid, or
                the role is not allowed to import
            CredentialConfigError: If no token key is configured
        """
        if not token:
            self.state = RunState.rejected
            raise ImportAuthorizationError("Missing bearer token")
        service = self.credentials
        try:
            claims = service.verify(token)
        except CredentialError as e:
            self.state = RunState.rejected
            raise ImportAuthorizationError(str(e))

        allowed = {role.upper() for role in self.settings.operational_roles}
        if claims.role not in allowed:
            self.state = RunState.rejected
            logger.warning(f"Import refused for '{claims.username}' with role '{claims.role}'")
            raise ImportAuthorizationError(
                f"Role '{claims.role}' is not allowed to run imports", authenticated=True
            )

        self.state = RunState.authenticated
        return claims

    def run(
        self,
        token: str | None,
        import_type: str,
        payload: dict[str, Any] | None,
        original_filename: str | None = None,
    ) -> ImportOutcome:
        """
        Execute one import run.

        Raises:
            ImportAuthorizationError: Caller not authenticated/authorized
            UnknownImportTypeError: No importer for `import_type`; nothing written
            ImportRunError: Any failure after the transaction opened; rolled back
        """
        claims = self.authenticate(token)
        try:
            importer = get_importer(import_type)
        except UnknownImportTypeError:
            self.state = RunState.rolled_back
            raise

        if not self.db.in_transaction():
            self.db.begin()
        self.state = RunState.transaction_open
        ctx = ImportContext.create(self.db, self.settings)
        logger.info(f"Import '{import_type}' started by '{claims.username}'")

        try:
            importer.run(ctx, payload or {})
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            self.state = RunState.rolled_back
            message = _error_message(e)
            logger.exception(f"Import '{import_type}' rolled back: {message}")
            self._record(import_type, ImportStatus.failed, claims, ctx, original_filename, message)
            raise ImportRunError(message) from e

        self.state = RunState.committed
        status = ImportStatus.partial if ctx.warnings else ImportStatus.success
        logger.info(
            f"Import '{import_type}' committed: {ctx.stats.as_dict()}, {len(ctx.warnings)} warnings"
        )
        self._record(import_type, status, claims, ctx, original_filename)

        return ImportOutcome(
            import_type=import_type,
            warnings=list(ctx.warnings),
            stats=ctx.stats,
            state=self.state,
        )

    def _record(
        self,
        import_type: str,
        status: ImportStatus,
        claims: CredentialClaims,
        ctx: ImportContext,
        original_filename: str | None,
        error_message: str | None = None,
    ) -> None:
        """Store the run in import history; failures here never change the outcome."""
        history = ImportHistory(
            import_type=import_type,
            status=status,
            username=claims.username,
            original_filename=original_filename,
            records_processed=ctx.stats.processed,
            records_written=0 if status is ImportStatus.failed else ctx.stats.written,
            records_skipped=ctx.stats.skipped,
            warnings=list(ctx.warnings),
            error_message=error_message,
        )
        try:
            self.db.add(history)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Could not record import history for '{import_type}'")


def get_import_orchestrator(db: Session) -> ImportOrchestrator:
    """Factory function to create the import orchestrator."""
    return ImportOrchestrator(db)


__all__ = [
    "ImportAuthorizationError",
    "ImportOrchestrator",
    "ImportOutcome",
    "ImportRunError",
    "RunState",
    "SUCCESS_MESSAGE",
    "UnknownImportTypeError",
    "get_import_orchestrator",
]
