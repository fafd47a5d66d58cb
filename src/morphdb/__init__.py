"""MorphDB - runtime-defined tables over HTTP.

Callers describe tables as JSON (columns, types, constraints, foreign keys);
MorphDB turns the description into DDL, reads the live schema back from the
database catalog, and offers generic record CRUD on whatever tables exist.

Example:
    from morphdb import MorphDB

    db = MorphDB("sqlite:///:memory:")

    db.create_table(
        "users",
        columns=[
            {"name": "email", "type": "text", "constraints": {"notNull": True, "unique": True}},
        ],
    )
    db.create_table(
        "posts",
        columns=[
            {
                "name": "user_id",
                "type": "integer",
                "constraints": {"references": {"table": "users", "column": "id", "onDelete": "cascade"}},
            },
            {"name": "title", "type": "text"},
        ],
    )

    user = db.table("users").insert({"email": "ada@example.com"})
    db.table("posts").insert({"user_id": user["id"], "title": "Hello"})

    # Schema is read back from the database, never cached
    snapshot = db.describe_table("posts")
"""

from morphdb.core.engine import MorphDB, TableHandle
from morphdb.core.types import (
    AlterResult,
    ColumnConstraints,
    ColumnEdit,
    ColumnSnapshot,
    ColumnSpec,
    ColumnType,
    ColumnUpdate,
    DefaultExpression,
    EditAction,
    EditOutcome,
    ForeignKeyRef,
    ForeignKeySnapshot,
    ReferentialAction,
    TableSnapshot,
    TableSpec,
)
from morphdb.exceptions import (
    BackendUnavailableError,
    ColumnNotFoundError,
    DuplicateTableError,
    IntegrityViolationError,
    MorphDBError,
    QueryError,
    RecordNotFoundError,
    SchemaMutationError,
    TableNotFoundError,
    UnsupportedAlterationError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "MorphDB",
    "TableHandle",
    # Types
    "ColumnType",
    "ReferentialAction",
    "ForeignKeyRef",
    "DefaultExpression",
    "ColumnConstraints",
    "ColumnSpec",
    "TableSpec",
    "ColumnUpdate",
    "ColumnEdit",
    "ColumnSnapshot",
    "ForeignKeySnapshot",
    "TableSnapshot",
    "EditAction",
    "EditOutcome",
    "AlterResult",
    # Exceptions
    "MorphDBError",
    "BackendUnavailableError",
    "DuplicateTableError",
    "TableNotFoundError",
    "ColumnNotFoundError",
    "SchemaMutationError",
    "IntegrityViolationError",
    "UnsupportedAlterationError",
    "ValidationError",
    "RecordNotFoundError",
    "QueryError",
]
