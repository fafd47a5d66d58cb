"""Live schema introspection.

Every call builds a new SQLAlchemy Inspector, so results always reflect the
current database catalog; nothing is cached between calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Integer, exc, inspect

from morphdb.core.types import (
    CheckConstraintSnapshot,
    ColumnSnapshot,
    ForeignKeySnapshot,
    TableSnapshot,
)
from morphdb.exceptions import BackendUnavailableError, MorphDBError

if TYPE_CHECKING:
    from sqlalchemy.engine.reflection import Inspector

    from morphdb.core.connection import DatabaseConnection


def _single_column_uniques(inspector: Inspector, table_name: str) -> set[str]:
    unique: set[str] = set()
    for constraint in inspector.get_unique_constraints(table_name):
        if len(constraint["column_names"]) == 1:
            unique.add(constraint["column_names"][0])
    for index in inspector.get_indexes(table_name):
        if index.get("unique") and len(index["column_names"]) == 1:
            column = index["column_names"][0]
            if column is not None:
                unique.add(column)
    return unique


def _column_snapshot(
    column: dict[str, Any], primary_keys: list[str], unique: set[str]
) -> ColumnSnapshot:
    name = column["name"]
    is_pk = name in primary_keys
    # A sole integer primary key is the rowid alias on SQLite and serial on PostgreSQL
    autoincrement = column.get("autoincrement") is True or (
        is_pk and len(primary_keys) == 1 and isinstance(column["type"], Integer)
    )
    default = column.get("default")
    return ColumnSnapshot(
        name=name,
        data_type=str(column["type"]).lower(),
        nullable=bool(column["nullable"]) and not is_pk,
        default=str(default) if default is not None else None,
        primary_key=is_pk,
        autoincrement=autoincrement,
        unique=name in unique,
    )


def _foreign_key_snapshot(fk: dict[str, Any]) -> ForeignKeySnapshot:
    options = fk.get("options") or {}
    on_delete = options.get("ondelete")
    on_update = options.get("onupdate")
    return ForeignKeySnapshot(
        name=fk.get("name"),
        columns=list(fk["constrained_columns"]),
        referred_table=fk["referred_table"],
        referred_columns=list(fk["referred_columns"]),
        on_delete=on_delete.lower() if on_delete else None,
        on_update=on_update.lower() if on_update else None,
    )


def _check_constraints(inspector: Inspector, table_name: str) -> list[CheckConstraintSnapshot]:
    try:
        checks = inspector.get_check_constraints(table_name)
    except NotImplementedError:
        return []
    return [CheckConstraintSnapshot(name=c.get("name"), sqltext=c["sqltext"]) for c in checks]


class SchemaInspector:
    """Reads TableSnapshots from the database catalog."""

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize the inspector.

        Args:
            connection: Database connection to read from
        """
        self._connection = connection

    def _snapshot(self, inspector: Inspector, table_name: str) -> TableSnapshot:
        primary_keys = inspector.get_pk_constraint(table_name).get("constrained_columns") or []
        unique = _single_column_uniques(inspector, table_name)
        columns = [
            _column_snapshot(column, primary_keys, unique)
            for column in inspector.get_columns(table_name)
        ]
        return TableSnapshot(
            name=table_name,
            columns=columns,
            foreign_keys=[_foreign_key_snapshot(fk) for fk in inspector.get_foreign_keys(table_name)],
            check_constraints=_check_constraints(inspector, table_name),
        )

    def list_tables(self) -> list[TableSnapshot]:
        """Read every table in the database.

        Returns:
            Snapshots ordered by table name

        Raises:
            BackendUnavailableError: If the catalog cannot be read
        """
        try:
            with self._connection.connect() as conn:
                inspector = inspect(conn)
                return [self._snapshot(inspector, name) for name in sorted(inspector.get_table_names())]
        except MorphDBError:
            raise
        except exc.SQLAlchemyError as e:
            raise BackendUnavailableError(f"Failed to read database catalog: {e}") from e

    def table_names(self) -> list[str]:
        """Read the names of every table, ordered by name."""
        try:
            with self._connection.connect() as conn:
                return sorted(inspect(conn).get_table_names())
        except MorphDBError:
            raise
        except exc.SQLAlchemyError as e:
            raise BackendUnavailableError(f"Failed to read database catalog: {e}") from e

    def get_table(self, name: str) -> TableSnapshot | None:
        """Read one table by exact name.

        Returns:
            The snapshot, or None if no table has that name
        """
        try:
            with self._connection.connect() as conn:
                inspector = inspect(conn)
                if name not in inspector.get_table_names():
                    return None
                return self._snapshot(inspector, name)
        except MorphDBError:
            raise
        except exc.SQLAlchemyError as e:
            raise BackendUnavailableError(f"Failed to read database catalog: {e}") from e
