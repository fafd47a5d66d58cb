"""Schema Engine for creating, altering and dropping tables at runtime."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from morphdb.core.types import (
    RESERVED_COLUMNS,
    AlterResult,
    ColumnEdit,
    EditAction,
    EditOutcome,
    TableSnapshot,
    TableSpec,
)
from morphdb.exceptions import (
    DuplicateTableError,
    IntegrityViolationError,
    SchemaMutationError,
    TableNotFoundError,
    UnsupportedAlterationError,
)
from morphdb.schema import ddl
from morphdb.schema.introspection import SchemaInspector

if TYPE_CHECKING:
    from sqlalchemy.sql.base import Executable

    from morphdb.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)


class SchemaEngine:
    """Translates table descriptions into DDL and reads the live schema back.

    The database catalog is the only source of truth: every existence check
    re-reads it, and every mutation returns a freshly read snapshot rather
    than echoing the request.
    """

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize the schema engine.

        Args:
            connection: Database connection to use
        """
        self._connection = connection
        self._inspector = SchemaInspector(connection)

    def _alter_statements(self) -> ddl.AlterStatements:
        return ddl.AlterStatements(self._connection.engine.dialect)

    def _execute(self, statement: Executable) -> None:
        self._connection.execute_ddl(statement)

    def _reread(self, name: str, operation: str) -> TableSnapshot:
        snapshot = self._inspector.get_table(name)
        if snapshot is None:
            logger.error(f"{operation} on '{name}' succeeded but the table is not in the catalog")
            raise IntegrityViolationError(name, operation)
        return snapshot

    def _unsupported(
        self, table_name: str, column_name: str, error: UnsupportedAlterationError
    ) -> EditOutcome:
        logger.warning(f"Alter '{table_name}': {error.message}")
        return EditOutcome(
            column=column_name, action=EditAction.UNSUPPORTED, error=error.to_dict()
        )

    def list_tables(self) -> list[TableSnapshot]:
        """List all tables with their columns and constraints.

        Returns:
            Snapshots ordered by table name
        """
        return self._inspector.list_tables()

    def list_table_names(self) -> list[str]:
        """List all table names."""
        return self._inspector.table_names()

    def get_table(self, name: str) -> TableSnapshot:
        """Get a table snapshot by exact name.

        Raises:
            TableNotFoundError: If no table has that name
        """
        snapshot = self._inspector.get_table(name)
        if snapshot is None:
            raise TableNotFoundError(name, self._inspector.table_names())
        return snapshot

    def table_exists(self, name: str) -> bool:
        """Check if a table exists."""
        return self._inspector.get_table(name) is not None

    def create_table(self, spec: TableSpec) -> TableSnapshot:
        """Create a table with the engine-owned columns plus the requested ones.

        Args:
            spec: Validated table specification

        Returns:
            Snapshot of the created table, read back from the catalog

        Raises:
            DuplicateTableError: If a table with that name already exists
            SchemaMutationError: If the backend rejects the CREATE TABLE
            IntegrityViolationError: If the table is missing after creation
        """
        if self._inspector.get_table(spec.name) is not None:
            raise DuplicateTableError(spec.name)

        statement = ddl.create_table(spec, self._connection.engine.dialect)
        try:
            self._execute(statement)
        except SchemaMutationError as e:
            # A concurrent creator may have won between the check and the CREATE
            if self._inspector.get_table(spec.name) is not None:
                raise DuplicateTableError(spec.name) from e
            raise

        logger.info(f"Created table '{spec.name}' with {len(spec.columns)} user column(s)")
        return self._reread(spec.name, "create")

    def rename_table(self, name: str, new_name: str) -> TableSnapshot:
        """Rename a table.

        A clash with an existing ``new_name`` is left for the backend to reject.

        Raises:
            TableNotFoundError: If the table does not exist
            SchemaMutationError: If the backend rejects the rename
            IntegrityViolationError: If the renamed table is not found afterwards
        """
        if not self.table_exists(name):
            raise TableNotFoundError(name, self._inspector.table_names())

        self._execute(self._alter_statements().rename_table(name, new_name))
        logger.info(f"Renamed table '{name}' to '{new_name}'")
        return self._reread(new_name, "rename")

    def alter_table(self, name: str, edits: list[ColumnEdit]) -> AlterResult:
        """Apply column edits in order, one DDL statement per edit.

        For each edit the first matching rule wins:

        1. unknown column: skipped
        2. ``id``, ``created_at`` or ``updated_at``: reported as unsupported
        3. new name: column renamed, and the request ends here
        4. nothing to change: no-op
        5. new type: column type changed
        6. ``notNull`` false / true: NOT NULL dropped / set
        7. ``default``: default set
        8. anything else: reported as unsupported, later edits still run

        Edits are not transactional together. If the backend rejects one, the
        earlier ones stay applied and SchemaMutationError lists them.

        Raises:
            TableNotFoundError: If the table does not exist
            SchemaMutationError: If the backend rejects an edit
            IntegrityViolationError: If the table is missing afterwards
        """
        table = self.get_table(name)
        statements = self._alter_statements()
        outcomes: list[EditOutcome] = []

        for edit in edits:
            column = table.get_column(edit.col_name)
            if column is None:
                logger.warning(f"Alter '{name}': column '{edit.col_name}' not found, skipping")
                outcomes.append(EditOutcome(column=edit.col_name, action=EditAction.SKIPPED))
                continue

            changes = edit.updated_values
            constraints = changes.constraints
            requested = constraints.requested() if constraints is not None else []

            if column.name in RESERVED_COLUMNS:
                error = UnsupportedAlterationError(
                    column.name,
                    name,
                    sorted(changes.model_dump(exclude_none=True, by_alias=True)),
                    reason="The column is managed by the engine and cannot be altered.",
                )
                outcomes.append(self._unsupported(name, column.name, error))
                continue

            if changes.name is not None and changes.name != column.name:
                statement = statements.rename_column(name, column.name, changes.name)
                action = EditAction.RENAMED
            elif changes.type is None and not requested:
                outcomes.append(EditOutcome(column=column.name, action=EditAction.NOOP))
                continue
            elif changes.type is not None:
                statement = statements.set_type(name, column.name, changes.type)
                action = EditAction.TYPE_CHANGED
            elif constraints is not None and constraints.not_null is False:
                statement = statements.drop_not_null(name, column.name)
                action = EditAction.NOT_NULL_DROPPED
            elif constraints is not None and constraints.not_null is True:
                statement = statements.set_not_null(name, column.name)
                action = EditAction.NOT_NULL_SET
            elif constraints is not None and constraints.default is not None:
                statement = statements.set_default(name, column.name, constraints.default)
                action = EditAction.DEFAULT_SET
            else:
                error = UnsupportedAlterationError(column.name, name, requested)
                outcomes.append(self._unsupported(name, column.name, error))
                continue

            try:
                self._execute(statement)
            except SchemaMutationError as e:
                e.context["applied"] = [o.model_dump(by_alias=True) for o in outcomes]
                e.context["failed_column"] = column.name
                raise

            logger.info(f"Alter '{name}': {action} on column '{column.name}'")
            outcomes.append(EditOutcome(column=column.name, action=action))

            if action == EditAction.RENAMED:
                # A rename ends the request; later edits are not applied
                break

        return AlterResult(table=self._reread(name, "alter"), edits=outcomes)

    def drop_table(self, name: str) -> None:
        """Drop a table.

        No existence pre-check: a missing table is reported by the backend.

        Raises:
            SchemaMutationError: If the backend rejects the DROP TABLE
        """
        self._execute(ddl.drop_table(name))
        logger.info(f"Dropped table '{name}'")
