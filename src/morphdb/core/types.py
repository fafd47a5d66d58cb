"""Core types and specifications for MorphDB.

Table and column descriptions are runtime data, so they are modelled as
pydantic models validated once at the boundary. Input accepts snake_case or
camelCase field names; JSON output uses camelCase.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

# Columns every table gets, in this order, ahead of user columns
RESERVED_COLUMNS = ("id", "created_at", "updated_at")

MAX_IDENTIFIER_LENGTH = 63

# Fragments that would let a raw SQL expression escape its clause
FORBIDDEN_SQL_TOKENS = (";", "--", "/*")


class ColumnType(StrEnum):
    """Supported column types."""

    INTEGER = "integer"
    TEXT = "text"
    REAL = "real"
    BLOB = "blob"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid column type values."""
        return [t.value for t in cls]


class ReferentialAction(StrEnum):
    """Actions applied to referencing rows when the referenced row changes."""

    NO_ACTION = "no action"
    RESTRICT = "restrict"
    CASCADE = "cascade"
    SET_NULL = "set null"
    SET_DEFAULT = "set default"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid referential action values."""
        return [a.value for a in cls]


class EditAction(StrEnum):
    """What happened to a single column edit during an alter request."""

    RENAMED = "renamed"
    TYPE_CHANGED = "type_changed"
    NOT_NULL_DROPPED = "not_null_dropped"
    NOT_NULL_SET = "not_null_set"
    DEFAULT_SET = "default_set"
    SKIPPED = "skipped"
    NOOP = "noop"
    UNSUPPORTED = "unsupported"


def _check_identifier(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("name must not be empty")
    if len(value) > MAX_IDENTIFIER_LENGTH:
        raise ValueError(f"name must be at most {MAX_IDENTIFIER_LENGTH} characters")
    if "\x00" in value:
        raise ValueError("name must not contain NUL characters")
    return value


def _check_sql_fragment(value: str) -> str:
    if not value.strip():
        raise ValueError("SQL expression must not be empty")
    for token in FORBIDDEN_SQL_TOKENS:
        if token in value:
            raise ValueError(f"SQL expression must not contain '{token}'")
    return value


Identifier = Annotated[str, AfterValidator(_check_identifier)]
SqlFragment = Annotated[str, AfterValidator(_check_sql_fragment)]


def _check_not_reserved(name: str) -> None:
    if name in RESERVED_COLUMNS:
        raise ValueError(
            f"column name '{name}' is reserved; every table already has "
            f"{', '.join(RESERVED_COLUMNS)}"
        )


class MorphModel(BaseModel):
    """Base model: camelCase aliases, snake_case attribute names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class DefaultExpression(MorphModel):
    """A raw SQL default, e.g. ``{"expression": "current_timestamp"}``."""

    expression: SqlFragment


DefaultValue = DefaultExpression | bool | int | float | str


class ForeignKeyRef(MorphModel):
    """Reference from a column to a column of another table."""

    table: Identifier = Field(..., description="Referenced table name")
    column: Identifier = Field(..., description="Referenced column name")
    on_delete: ReferentialAction | None = Field(default=None)
    on_update: ReferentialAction | None = Field(default=None)

    @field_validator("on_delete", "on_update", mode="before")
    @classmethod
    def _normalize_action(cls, value: Any) -> Any:
        # Accept "set-null", "SET_NULL" and "set null" alike
        if isinstance(value, str):
            return " ".join(value.replace("-", " ").replace("_", " ").lower().split())
        return value


class ColumnConstraints(MorphModel):
    """Optional constraints attached to a user column."""

    primary_key: bool | None = None
    unique: bool | None = None
    not_null: bool | None = None
    default: DefaultValue | None = None
    check: SqlFragment | None = None
    references: ForeignKeyRef | None = None


class ColumnSpec(MorphModel):
    """Specification for a user column.

    This is the input format for creating columns. Callers pass this as a dict.
    """

    name: Identifier = Field(..., description="Column name, unique within its table")
    type: ColumnType = Field(..., description="Column data type")
    constraints: ColumnConstraints | None = Field(default=None)

    @model_validator(mode="after")
    def _check_column(self) -> ColumnSpec:
        _check_not_reserved(self.name)
        if self.constraints is not None:
            check_default_matches_type(self.constraints.default, self.type)
        return self


def check_default_matches_type(default: Any, column_type: str) -> None:
    """Reject literal defaults whose Python type cannot be stored in the column.

    Raises:
        ValueError: If the default does not fit the column type
    """
    if default is None or isinstance(default, DefaultExpression):
        return
    if column_type == ColumnType.INTEGER:
        ok = isinstance(default, int)
    elif column_type == ColumnType.REAL:
        ok = isinstance(default, int | float) and not isinstance(default, bool)
    else:
        ok = isinstance(default, str)
    if not ok:
        raise ValueError(
            f"default {default!r} is not a valid {column_type} value; "
            'use {"expression": "..."} for a raw SQL default'
        )


class TableSpec(MorphModel):
    """Specification for creating a table."""

    name: Identifier = Field(..., description="Table name, unique in the database")
    columns: list[ColumnSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_columns(self) -> TableSpec:
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                raise ValueError(f"column '{column.name}' is declared more than once")
            seen.add(column.name)
        return self


class RenameRequest(MorphModel):
    """Body of a table rename request."""

    new_name: Identifier


class ColumnConstraintChanges(MorphModel):
    """Constraint changes requested for an existing column."""

    primary_key: bool | None = None
    unique: bool | None = None
    not_null: bool | None = None
    default: DefaultValue | None = None
    check: SqlFragment | None = None

    def requested(self) -> list[str]:
        """Names of the constraint fields that carry a value."""
        return sorted(self.model_dump(exclude_none=True, by_alias=True))


class ColumnUpdate(MorphModel):
    """Partial update for an existing column."""

    name: Identifier | None = None
    type: ColumnType | None = None
    constraints: ColumnConstraintChanges | None = None

    @field_validator("name")
    @classmethod
    def _check_new_name(cls, value: str | None) -> str | None:
        if value is not None:
            _check_not_reserved(value)
        return value


class ColumnEdit(MorphModel):
    """One edit of an alter request, addressing a column by its current name."""

    col_name: str
    updated_values: ColumnUpdate = Field(default_factory=ColumnUpdate)


class AlterRequest(MorphModel):
    """Body of an alter table request."""

    columns: list[ColumnEdit] = Field(default_factory=list)


class ColumnSnapshot(MorphModel):
    """A column as observed in the database catalog."""

    name: str
    data_type: str
    nullable: bool
    default: str | None = None
    primary_key: bool = False
    autoincrement: bool = False
    unique: bool = False


class ForeignKeySnapshot(MorphModel):
    """A foreign key as observed in the database catalog."""

    name: str | None
    columns: list[str]
    referred_table: str
    referred_columns: list[str]
    on_delete: str | None = None
    on_update: str | None = None


class CheckConstraintSnapshot(MorphModel):
    """A check constraint as observed in the database catalog."""

    name: str | None
    sqltext: str


class TableSnapshot(MorphModel):
    """Authoritative description of a table, read back from the database."""

    name: str
    columns: list[ColumnSnapshot]
    foreign_keys: list[ForeignKeySnapshot] = Field(default_factory=list)
    check_constraints: list[CheckConstraintSnapshot] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        """Column names in table order."""
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> ColumnSnapshot | None:
        """Find a column by exact name."""
        return next((c for c in self.columns if c.name == name), None)


class EditOutcome(MorphModel):
    """Result of one column edit."""

    column: str
    action: EditAction
    error: dict[str, Any] | None = None


class AlterResult(MorphModel):
    """Result of an alter request: per-edit outcomes plus the re-read table."""

    table: TableSnapshot
    edits: list[EditOutcome] = Field(default_factory=list)

    @computed_field(alias="stoppedEarly")  # type: ignore[prop-decorator]
    @property
    def stopped_early(self) -> bool:
        """True when a rename ended the request before all edits were seen."""
        return bool(self.edits) and self.edits[-1].action == EditAction.RENAMED
