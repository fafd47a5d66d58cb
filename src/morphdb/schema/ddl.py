"""DDL construction for MorphDB tables.

Translates table and column descriptions into SQLAlchemy DDL constructs.
Identifiers always go through the dialect's identifier preparer and literal
defaults through the dialect's literal processor, so no caller-supplied name
or value is spliced into SQL unquoted. ``check`` expressions and
``{"expression": ...}`` defaults are raw SQL by definition; they are screened
for statement separators when the request is validated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    Column,
    ForeignKeyConstraint,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    func,
    literal_column,
    text,
)
from sqlalchemy.schema import CreateTable, DropTable
from sqlalchemy.types import REAL

from morphdb.core.types import ColumnSpec, DefaultExpression, TableSpec

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.sql.elements import TextClause
    from sqlalchemy.types import TypeEngine


# Mapping from MorphDB column types to SQLAlchemy column types
COLUMN_TYPE_MAP = {
    "integer": lambda: Integer(),
    "text": lambda: Text(),
    "real": lambda: REAL(),
    "blob": lambda: LargeBinary(),
}


def column_type(type_name: str) -> TypeEngine[Any]:
    """Build the SQLAlchemy type for a MorphDB column type."""
    return COLUMN_TYPE_MAP[type_name]()


def foreign_key_name(table_name: str, column_name: str) -> str:
    """Deterministic foreign key constraint name: ``{table}_{column}_fk_key``."""
    return f"{table_name}_{column_name}_fk_key"


def check_constraint_name(table_name: str, column_name: str) -> str:
    """Deterministic check constraint name: ``{table}_{column}_check``."""
    return f"{table_name}_{column_name}_check"


def render_default(value: Any, dialect: Dialect) -> str:
    """Render a default value as a SQL literal or raw expression.

    Args:
        value: A scalar literal or a DefaultExpression
        dialect: Dialect used for quoting string literals

    Returns:
        SQL text suitable for a DEFAULT clause
    """
    if isinstance(value, DefaultExpression):
        return value.expression
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int | float):
        return repr(value)
    processor = String().literal_processor(dialect=dialect)
    return processor(str(value)) if processor else str(value)


def _system_columns() -> list[Column[Any]]:
    return [
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column(
            "created_at",
            TIMESTAMP(),
            nullable=False,
            server_default=func.current_timestamp(),
        ),
        Column(
            "updated_at",
            TIMESTAMP(),
            nullable=False,
            server_default=func.current_timestamp(),
        ),
    ]


def _user_column(spec: ColumnSpec, dialect: Dialect) -> Column[Any]:
    kwargs: dict[str, Any] = {}
    constraints = spec.constraints
    if constraints is not None:
        # Fixed order keeps the generated DDL reproducible
        if constraints.not_null:
            kwargs["nullable"] = False
        if constraints.primary_key:
            # Joins id in a composite key; SQLite refuses AUTOINCREMENT on one
            kwargs["primary_key"] = True
        if constraints.unique:
            kwargs["unique"] = True
        if constraints.default is not None:
            kwargs["server_default"] = literal_column(render_default(constraints.default, dialect))
    return Column(spec.name, column_type(spec.type), **kwargs)


def build_table(spec: TableSpec, dialect: Dialect) -> Table:
    """Build the SQLAlchemy Table for a create request.

    The engine-owned columns ``id``, ``created_at`` and ``updated_at`` come
    first, followed by user columns in request order, then check and foreign
    key constraints named after their table and column.

    Args:
        spec: Validated table specification
        dialect: Target dialect

    Returns:
        An unbound Table on a fresh MetaData
    """
    columns: list[Column[Any]] = _system_columns()
    constraints: list[Any] = []

    for column in spec.columns:
        columns.append(_user_column(column, dialect))

        if column.constraints is None:
            continue
        if column.constraints.check:
            constraints.append(
                CheckConstraint(
                    literal_column(column.constraints.check),
                    name=check_constraint_name(spec.name, column.name),
                )
            )
        references = column.constraints.references
        if references is not None:
            fk_options: dict[str, str] = {}
            if references.on_delete:
                fk_options["ondelete"] = str(references.on_delete).upper()
            if references.on_update:
                fk_options["onupdate"] = str(references.on_update).upper()
            constraints.append(
                ForeignKeyConstraint(
                    [column.name],
                    [f"{references.table}.{references.column}"],
                    name=foreign_key_name(spec.name, column.name),
                    **fk_options,
                )
            )

    metadata = MetaData()
    _add_referenced_stubs(spec, metadata)
    return Table(spec.name, metadata, *columns, *constraints, sqlite_autoincrement=True)


def _add_referenced_stubs(spec: TableSpec, metadata: MetaData) -> None:
    # REFERENCES renders through the target Column object, so the target must be
    # known to the metadata. Stubs are never created, only named.
    referenced: dict[str, list[str]] = {}
    for column in spec.columns:
        references = column.constraints.references if column.constraints else None
        if references is None or references.table == spec.name:
            continue
        targets = referenced.setdefault(references.table, [])
        if references.column not in targets:
            targets.append(references.column)
    for table_name, column_names in referenced.items():
        Table(table_name, metadata, *(Column(name, Integer) for name in column_names))


def create_table(spec: TableSpec, dialect: Dialect) -> CreateTable:
    """CREATE TABLE statement for a table specification."""
    return CreateTable(build_table(spec, dialect))


def drop_table(table_name: str) -> DropTable:
    """DROP TABLE statement; no IF EXISTS so a missing table is reported."""
    return DropTable(Table(table_name, MetaData()))


class AlterStatements:
    """Builds ALTER TABLE statements with quoted identifiers for one dialect."""

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect
        self._quote = dialect.identifier_preparer.quote

    def _alter(self, table_name: str, clause: str) -> TextClause:
        sql = f"ALTER TABLE {self._quote(table_name)} {clause}"
        # text() would read ":word" inside names or literals as a bind parameter
        return text(sql.replace(":", r"\:"))

    def rename_table(self, table_name: str, new_name: str) -> TextClause:
        return self._alter(table_name, f"RENAME TO {self._quote(new_name)}")

    def rename_column(self, table_name: str, column_name: str, new_name: str) -> TextClause:
        return self._alter(
            table_name,
            f"RENAME COLUMN {self._quote(column_name)} TO {self._quote(new_name)}",
        )

    def set_type(self, table_name: str, column_name: str, type_name: str) -> TextClause:
        type_sql = column_type(type_name).compile(dialect=self._dialect)
        return self._alter(table_name, f"ALTER COLUMN {self._quote(column_name)} TYPE {type_sql}")

    def drop_not_null(self, table_name: str, column_name: str) -> TextClause:
        return self._alter(table_name, f"ALTER COLUMN {self._quote(column_name)} DROP NOT NULL")

    def set_not_null(self, table_name: str, column_name: str) -> TextClause:
        return self._alter(table_name, f"ALTER COLUMN {self._quote(column_name)} SET NOT NULL")

    def set_default(self, table_name: str, column_name: str, value: Any) -> TextClause:
        default_sql = render_default(value, self._dialect)
        return self._alter(
            table_name, f"ALTER COLUMN {self._quote(column_name)} SET DEFAULT {default_sql}"
        )
