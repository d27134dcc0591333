"""
Batched multi-row writes with a bound-parameter budget.

Rows are split so that rows_in_chunk * len(columns) never exceeds the
configured ceiling, and each chunk becomes one INSERT ... VALUES (...), (...)
statement executed on the caller's session. Nothing is committed here.
"""

import enum
import logging
from typing import Any, Sequence

from sqlalchemy import Table, insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from staffhub.config import get_settings

logger = logging.getLogger(__name__)


class ConflictPolicy(str, enum.Enum):
    """What to do when an incoming row collides with an existing unique key."""

    ignore = "ignore"  # keep the existing row
    merge = "merge"  # overwrite update columns from the incoming row
    none = "none"  # caller guarantees no collision


class BulkWriteError(Exception):
    """Raised when a write request cannot be rendered."""

    pass


def chunk_rows(rows: Sequence[Any], column_count: int, max_params: int) -> list[list[Any]]:
    """
    Split rows into chunks that stay within the bound-parameter budget.

    Args:
        rows: Rows to split
        column_count: Parameters per row
        max_params: Maximum bound parameters per statement

    Returns:
        List of chunks (lists of rows), in input order
    """
    if column_count <= 0:
        raise BulkWriteError("At least one column is required")
    size = max(1, max_params // column_count)
    return [list(rows[i:i + size]) for i in range(0, len(rows), size)]


def _target_table(target: Any) -> Table:
    """Accept either a Table or a mapped model class."""
    return target if isinstance(target, Table) else target.__table__


class BulkWriter:
    """
    Renders in-memory rows into chunked INSERT statements.

    One writer is bound to one session for the length of a run; statements
    are issued in order on that session's transaction.
    """

    def __init__(self, db: Session, max_params: int | None = None):
        self.db = db
        self.max_params = max_params or get_settings().import_max_bind_params
        self.statements_issued = 0

    def _insert_for_dialect(self, table: Table, policy: ConflictPolicy):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(table)
        if dialect == "sqlite":
            return sqlite_insert(table)
        if policy is not ConflictPolicy.none:
            raise BulkWriteError(
                f"Conflict policy '{policy.value}' is not supported on dialect '{dialect}'"
            )
        return insert(table)

    def write(
        self,
        target: Any,
        columns: Sequence[str],
        rows: Sequence[dict[str, Any]],
        policy: ConflictPolicy = ConflictPolicy.none,
        conflict_keys: Sequence[str] = (),
        update_columns: Sequence[str] | None = None,
    ) -> int:
        """
        Write rows to a table in parameter-bounded chunks.

        Args:
            target: Table or mapped model class
            columns: Columns to write; cells missing from a row are written as NULL
            rows: Row dicts keyed by column name
            policy: Conflict policy for unique-key collisions
            conflict_keys: Unique columns the policy applies to (ignore/merge)
            update_columns: Columns overwritten on merge; defaults to every
                non-key column

        Returns:
            Number of statements issued
        """
        if not rows:
            return 0

        table = _target_table(target)
        columns = list(columns)
        if policy is not ConflictPolicy.none and not conflict_keys:
            raise BulkWriteError(f"Policy '{policy.value}' on {table.name} needs conflict keys")
        if update_columns is None:
            update_columns = [c for c in columns if c not in conflict_keys]

        values = [{column: row.get(column) for column in columns} for row in rows]
        chunks = chunk_rows(values, len(columns), self.max_params)

        for index, chunk in enumerate(chunks, start=1):
            stmt = self._insert_for_dialect(table, policy).values(chunk)
            if policy is ConflictPolicy.ignore:
                stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_keys))
            elif policy is ConflictPolicy.merge:
                if update_columns:
                    stmt = stmt.on_conflict_do_update(
                        index_elements=list(conflict_keys),
                        set_={column: stmt.excluded[column] for column in update_columns},
                    )
                else:
                    stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_keys))
            self.db.execute(stmt)
            self.statements_issued += 1
            logger.debug(
                f"{table.name}: chunk {index}/{len(chunks)} wrote {len(chunk)} rows ({policy.value})"
            )

        return len(chunks)
