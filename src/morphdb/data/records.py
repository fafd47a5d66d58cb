"""Generic record CRUD against runtime-defined tables.

Tables are reflected on every call, so the record engine always works against
the schema that exists right now, including renames and drops made by other
requests.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    LargeBinary,
    MetaData,
    Table,
    delete,
    exc,
    func,
    insert,
    inspect,
    select,
    update,
)

from morphdb.exceptions import (
    BackendUnavailableError,
    ColumnNotFoundError,
    MorphDBError,
    QueryError,
    RecordNotFoundError,
    TableNotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from morphdb.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 500
MAX_LIMIT = 10_000


class RecordEngine:
    """Parameterized insert/select/update/delete keyed by table name and id.

    Blob columns travel as base64 strings in both directions so records stay
    JSON-serializable.
    """

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize the record engine.

        Args:
            connection: Database connection to use
        """
        self._connection = connection

    def _reflect(self, conn: Connection, table_name: str) -> Table:
        try:
            return Table(table_name, MetaData(), autoload_with=conn)
        except exc.NoSuchTableError as e:
            raise TableNotFoundError(table_name, sorted(inspect(conn).get_table_names())) from e

    def _validate_columns(self, table: Table, names: list[str] | Any) -> None:
        """Validate that all columns exist on the table."""
        for name in names:
            if name not in table.c:
                raise ColumnNotFoundError(name, table.name, list(table.c.keys()))

    def _encode_values(self, table: Table, data: dict[str, Any]) -> dict[str, Any]:
        values = dict(data)
        for name, value in data.items():
            if isinstance(value, str) and isinstance(table.c[name].type, LargeBinary):
                try:
                    values[name] = base64.b64decode(value, validate=True)
                except binascii.Error as e:
                    raise ValidationError(
                        f"Column '{name}' is a blob; send its value base64-encoded",
                        {name: "invalid base64"},
                    ) from e
        return values

    def _row_to_dict(self, row: Any) -> dict[str, Any]:
        record = dict(row._mapping)
        for name, value in record.items():
            if isinstance(value, bytes | memoryview):
                record[name] = base64.b64encode(bytes(value)).decode("ascii")
        return record

    def _fetch_by_id(self, conn: Connection, table: Table, record_id: int) -> dict[str, Any] | None:
        row = conn.execute(select(table).where(table.c.id == record_id)).first()
        return self._row_to_dict(row) if row is not None else None

    def insert(self, table_name: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record.

        Args:
            table_name: Target table
            data: Column values

        Returns:
            The stored record, including generated id and timestamps

        Raises:
            TableNotFoundError: If the table does not exist
            ColumnNotFoundError: If data names an unknown column
            QueryError: If the database rejects the row
        """
        try:
            with self._connection.connect() as conn:
                table = self._reflect(conn, table_name)
                self._validate_columns(table, data)
                values = self._encode_values(table, data)
                statement = insert(table).values(**values) if values else insert(table)
                result = conn.execute(statement)
                record_id = result.inserted_primary_key[0]
                conn.commit()
                record = self._fetch_by_id(conn, table, record_id)
        except MorphDBError:
            raise
        except exc.StatementError as e:
            raise self._wrap(e, f"Failed to insert into '{table_name}'") from e

        logger.debug(f"Inserted record {record_id} into '{table_name}'")
        return record or {}

    def find(
        self,
        table_name: str,
        columns: list[str] | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[dict[str, Any]]:
        """Read records.

        Args:
            table_name: Table to read
            columns: Columns to return; all columns when empty
            limit: Maximum number of rows (1..10000)

        Returns:
            Records ordered by id
        """
        if limit < 1 or limit > MAX_LIMIT:
            raise QueryError(f"limit must be between 1 and {MAX_LIMIT}, got {limit}")

        try:
            with self._connection.connect() as conn:
                table = self._reflect(conn, table_name)
                if columns:
                    self._validate_columns(table, columns)
                    query = select(*(table.c[name] for name in columns))
                else:
                    query = select(table)
                query = query.order_by(table.c.id).limit(limit)
                return [self._row_to_dict(row) for row in conn.execute(query)]
        except MorphDBError:
            raise
        except exc.StatementError as e:
            raise self._wrap(e, f"Failed to read from '{table_name}'") from e

    def find_by_id(self, table_name: str, record_id: int) -> dict[str, Any] | None:
        """Find a record by id.

        Returns:
            Record dict or None if not found
        """
        try:
            with self._connection.connect() as conn:
                table = self._reflect(conn, table_name)
                return self._fetch_by_id(conn, table, record_id)
        except MorphDBError:
            raise
        except exc.StatementError as e:
            raise self._wrap(e, f"Failed to read from '{table_name}'") from e

    def update(self, table_name: str, record_id: int, data: dict[str, Any]) -> dict[str, Any]:
        """Update a record.

        ``updated_at`` is set to the current timestamp unless data sets it.

        Returns:
            The updated record

        Raises:
            RecordNotFoundError: If no record has that id
        """
        try:
            with self._connection.connect() as conn:
                table = self._reflect(conn, table_name)
                self._validate_columns(table, data)
                values = self._encode_values(table, data)
                if "updated_at" in table.c and "updated_at" not in values:
                    values["updated_at"] = func.current_timestamp()
                result = conn.execute(update(table).where(table.c.id == record_id).values(**values))
                if result.rowcount == 0:
                    conn.rollback()
                    raise RecordNotFoundError(record_id, table_name)
                conn.commit()
                record = self._fetch_by_id(conn, table, record_id)
        except MorphDBError:
            raise
        except exc.StatementError as e:
            raise self._wrap(e, f"Failed to update '{table_name}' record {record_id}") from e

        return record or {}

    def delete(self, table_name: str, record_id: int) -> None:
        """Delete a record.

        Foreign keys declared with ``on delete cascade`` remove dependent rows.

        Raises:
            RecordNotFoundError: If no record has that id
        """
        try:
            with self._connection.connect() as conn:
                table = self._reflect(conn, table_name)
                result = conn.execute(delete(table).where(table.c.id == record_id))
                if result.rowcount == 0:
                    conn.rollback()
                    raise RecordNotFoundError(record_id, table_name)
                conn.commit()
        except MorphDBError:
            raise
        except exc.StatementError as e:
            raise self._wrap(e, f"Failed to delete '{table_name}' record {record_id}") from e

        logger.debug(f"Deleted record {record_id} from '{table_name}'")

    def _wrap(self, error: exc.StatementError, message: str) -> MorphDBError:
        if isinstance(error, exc.DBAPIError) and error.connection_invalidated:
            return BackendUnavailableError(f"{message}: connection lost ({error.orig})")
        return QueryError(f"{message}: {error.orig}", {"diagnostic": str(error.orig)})
