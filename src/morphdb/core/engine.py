"""Main MorphDB engine and TableHandle class."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pydantic

from morphdb.core.connection import DatabaseConnection
from morphdb.core.types import AlterResult, ColumnEdit, TableSnapshot, TableSpec
from morphdb.data.records import DEFAULT_LIMIT, RecordEngine
from morphdb.exceptions import ValidationError
from morphdb.schema.engine import SchemaEngine

if TYPE_CHECKING:
    from sqlalchemy.engine.url import URL

    from morphdb.core.types import ColumnSpec


def _validate(model: type[pydantic.BaseModel], data: Any) -> Any:
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        field_errors = {
            ".".join(str(part) for part in error["loc"]) or "__root__": error["msg"]
            for error in e.errors()
        }
        raise ValidationError(
            f"Invalid {model.__name__}: {'; '.join(field_errors.values())}", field_errors
        ) from e


class TableHandle:
    """Record operations on one table.

    The handle holds only the table name; the table itself is re-read from the
    database on every call.
    """

    def __init__(self, name: str, db: MorphDB) -> None:
        """Initialize the handle.

        Args:
            name: Table name
            db: Parent MorphDB instance
        """
        self._name = name
        self._db = db

    @property
    def name(self) -> str:
        """Get table name."""
        return self._name

    def describe(self) -> TableSnapshot:
        """Get the current table snapshot."""
        return self._db.describe_table(self._name)

    def insert(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return it as stored."""
        return self._db._records.insert(self._name, data)

    def find(
        self, columns: list[str] | None = None, limit: int = DEFAULT_LIMIT
    ) -> list[dict[str, Any]]:
        """Read records, optionally restricted to some columns."""
        return self._db._records.find(self._name, columns=columns, limit=limit)

    def find_by_id(self, record_id: int) -> dict[str, Any] | None:
        """Find a record by id."""
        return self._db._records.find_by_id(self._name, record_id)

    def update(self, record_id: int, data: dict[str, Any]) -> dict[str, Any]:
        """Update a record and return it as stored."""
        return self._db._records.update(self._name, record_id, data)

    def delete(self, record_id: int) -> None:
        """Delete a record."""
        self._db._records.delete(self._name, record_id)


class MorphDB:
    """Runtime-defined tables on top of a relational database.

    Example:
        db = MorphDB("sqlite:///:memory:")
        db.create_table("users", columns=[{"name": "email", "type": "text"}])
        db.table("users").insert({"email": "ada@example.com"})
    """

    def __init__(self, url: str | URL, echo: bool = False) -> None:
        """Initialize MorphDB.

        Args:
            url: Database URL (PostgreSQL or SQLite)
            echo: Whether to echo SQL statements
        """
        self._connection = DatabaseConnection(url, echo=echo)
        self._schema_engine = SchemaEngine(self._connection)
        self._records = RecordEngine(self._connection)

    @property
    def connection(self) -> DatabaseConnection:
        """Get the underlying database connection."""
        return self._connection

    @property
    def dialect(self) -> str:
        """Get the database dialect name."""
        return self._connection.dialect

    def create_table(
        self,
        name: str,
        columns: list[dict[str, Any] | ColumnSpec] | None = None,
    ) -> TableSnapshot:
        """Create a table.

        Args:
            name: Table name
            columns: Column specs (dicts in snake_case or camelCase, or ColumnSpec)

        Returns:
            Snapshot of the created table

        Raises:
            ValidationError: If the specification is invalid
            DuplicateTableError: If the table already exists
            SchemaMutationError: If the database rejects the table
        """
        payload = {
            "name": name,
            "columns": [
                c.model_dump(by_alias=True, exclude_none=True)
                if isinstance(c, pydantic.BaseModel)
                else c
                for c in columns or []
            ],
        }
        return self.create_table_from_spec(_validate(TableSpec, payload))

    def create_table_from_spec(self, spec: TableSpec) -> TableSnapshot:
        """Create a table from an already validated specification."""
        return self._schema_engine.create_table(spec)

    def list_tables(self) -> list[TableSnapshot]:
        """List all tables."""
        return self._schema_engine.list_tables()

    def list_table_names(self) -> list[str]:
        """List all table names."""
        return self._schema_engine.list_table_names()

    def describe_table(self, name: str) -> TableSnapshot:
        """Get a table snapshot.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        return self._schema_engine.get_table(name)

    def table_exists(self, name: str) -> bool:
        """Check if a table exists."""
        return self._schema_engine.table_exists(name)

    def rename_table(self, name: str, new_name: str) -> TableSnapshot:
        """Rename a table and return its snapshot under the new name."""
        return self._schema_engine.rename_table(name, new_name)

    def alter_table(
        self, name: str, edits: list[dict[str, Any] | ColumnEdit]
    ) -> AlterResult:
        """Apply column edits to a table.

        Args:
            name: Table name
            edits: Column edits (dicts with ``colName``/``updatedValues`` or ColumnEdit)

        Returns:
            Per-edit outcomes and the re-read table
        """
        parsed = [e if isinstance(e, ColumnEdit) else _validate(ColumnEdit, e) for e in edits]
        return self._schema_engine.alter_table(name, parsed)

    def drop_table(self, name: str) -> None:
        """Drop a table."""
        self._schema_engine.drop_table(name)

    def table(self, name: str) -> TableHandle:
        """Get a record handle for a table.

        The table is not checked here; record operations report a missing table.
        """
        return TableHandle(name, self)

    def close(self) -> None:
        """Close the database connection."""
        self._connection.close()

    def __enter__(self) -> MorphDB:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
