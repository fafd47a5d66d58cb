"""Custom exceptions for MorphDB.

Every error carries an actionable message plus a JSON-serializable context,
so the HTTP layer and the CLI can render it without knowing the error type.
"""

from __future__ import annotations

from typing import Any


class MorphDBError(Exception):
    """Base exception for all MorphDB errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class BackendUnavailableError(MorphDBError):
    """The database could not be reached or the connection broke mid-request."""

    pass


class DuplicateTableError(MorphDBError):
    """Table already exists."""

    def __init__(self, table_name: str) -> None:
        message = (
            f"Table '{table_name}' already exists. "
            "Choose another name or drop the existing table first."
        )
        super().__init__(message, {"table_name": table_name})
        self.table_name = table_name


class TableNotFoundError(MorphDBError):
    """Table does not exist."""

    def __init__(self, table_name: str, available_tables: list[str] | None = None) -> None:
        available = available_tables or []
        if available:
            message = f"Table '{table_name}' not found. Available tables: {', '.join(available)}"
        else:
            message = f"Table '{table_name}' not found. No tables exist yet."

        super().__init__(message, {"table_name": table_name, "available_tables": available})
        self.table_name = table_name
        self.available_tables = available


class ColumnNotFoundError(MorphDBError):
    """Column does not exist on table."""

    def __init__(
        self, column_name: str, table_name: str, available_columns: list[str] | None = None
    ) -> None:
        available = available_columns or []
        if available:
            message = (
                f"Column '{column_name}' not found on '{table_name}'. "
                f"Available columns: {', '.join(available)}"
            )
        else:
            message = f"Column '{column_name}' not found on '{table_name}'."

        super().__init__(
            message,
            {
                "column_name": column_name,
                "table_name": table_name,
                "available_columns": available,
            },
        )
        self.column_name = column_name
        self.table_name = table_name
        self.available_columns = available


class SchemaMutationError(MorphDBError):
    """The backend rejected a DDL statement."""

    def __init__(
        self,
        message: str,
        statement: str | None = None,
        diagnostic: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        full_context = {"statement": statement, "diagnostic": diagnostic}
        full_context.update(context or {})
        super().__init__(message, full_context)
        self.statement = statement
        self.diagnostic = diagnostic


class IntegrityViolationError(MorphDBError):
    """A mutation reported success but its result is not visible in the catalog."""

    def __init__(self, table_name: str, operation: str) -> None:
        message = (
            f"{operation} on '{table_name}' reported success but the table cannot be "
            "found in the database catalog. Re-read the schema before retrying."
        )
        super().__init__(message, {"table_name": table_name, "operation": operation})
        self.table_name = table_name
        self.operation = operation


class UnsupportedAlterationError(MorphDBError):
    """A column edit asks for a change the engine cannot express."""

    SUPPORTED = ["name", "type", "constraints.notNull", "constraints.default"]

    def __init__(
        self,
        column_name: str,
        table_name: str,
        requested: list[str],
        reason: str | None = None,
    ) -> None:
        message = (
            f"Cannot alter {', '.join(requested) or 'nothing'} on column "
            f"'{table_name}.{column_name}'. "
        )
        if reason:
            message += reason
        else:
            message += f"Supported changes: {', '.join(self.SUPPORTED)}"
        super().__init__(
            message,
            {
                "column_name": column_name,
                "table_name": table_name,
                "requested": requested,
                "supported": self.SUPPORTED,
            },
        )
        self.column_name = column_name
        self.table_name = table_name
        self.requested = requested


class ValidationError(MorphDBError):
    """Input validation failed."""

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message, {"field_errors": field_errors or {}})
        self.field_errors = field_errors or {}


class RecordNotFoundError(MorphDBError):
    """Record with given ID does not exist."""

    def __init__(self, record_id: int, table_name: str) -> None:
        message = f"Record '{record_id}' not found in '{table_name}'."
        super().__init__(message, {"record_id": record_id, "table_name": table_name})
        self.record_id = record_id
        self.table_name = table_name


class QueryError(MorphDBError):
    """Record query or write failed."""

    pass
