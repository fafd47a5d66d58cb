"""Tests for table and column description models."""

import pydantic
import pytest

from morphdb.core.types import (
    AlterRequest,
    AlterResult,
    ColumnConstraintChanges,
    ColumnEdit,
    ColumnSpec,
    ColumnType,
    DefaultExpression,
    EditAction,
    EditOutcome,
    ForeignKeyRef,
    ReferentialAction,
    TableSnapshot,
    TableSpec,
)


class TestColumnType:
    """Tests for ColumnType enum."""

    def test_values(self):
        assert ColumnType.values() == ["integer", "text", "real", "blob"]

    def test_unknown_type_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            ColumnSpec(name="x", type="varchar")


class TestColumnSpec:
    """Tests for ColumnSpec validation."""

    def test_camel_case_constraints(self):
        """Constraints accept the camelCase names used over HTTP."""
        spec = ColumnSpec.model_validate(
            {"name": "email", "type": "text", "constraints": {"notNull": True, "unique": True}}
        )
        assert spec.constraints is not None
        assert spec.constraints.not_null is True
        assert spec.constraints.unique is True

    def test_snake_case_constraints(self):
        spec = ColumnSpec.model_validate(
            {"name": "email", "type": "text", "constraints": {"not_null": True}}
        )
        assert spec.constraints.not_null is True

    @pytest.mark.parametrize("name", ["id", "created_at", "updated_at"])
    def test_reserved_names_rejected(self, name: str):
        with pytest.raises(pydantic.ValidationError, match="reserved"):
            ColumnSpec(name=name, type="text")

    def test_primary_key_accepted(self):
        """A user primary key is left for the backend to accept or refuse."""
        spec = ColumnSpec.model_validate(
            {"name": "code", "type": "text", "constraints": {"primaryKey": True}}
        )
        assert spec.constraints.primary_key is True

    def test_empty_name_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            ColumnSpec(name="  ", type="text")

    def test_long_name_rejected(self):
        with pytest.raises(pydantic.ValidationError, match="at most 63"):
            ColumnSpec(name="c" * 64, type="text")

    def test_default_must_match_type(self):
        with pytest.raises(pydantic.ValidationError, match="not a valid integer"):
            ColumnSpec.model_validate(
                {"name": "age", "type": "integer", "constraints": {"default": "ten"}}
            )

    def test_real_accepts_integer_default(self):
        spec = ColumnSpec.model_validate(
            {"name": "price", "type": "real", "constraints": {"default": 0}}
        )
        assert spec.constraints.default == 0

    def test_expression_default(self):
        spec = ColumnSpec.model_validate(
            {
                "name": "seen_at",
                "type": "text",
                "constraints": {"default": {"expression": "current_timestamp"}},
            }
        )
        assert isinstance(spec.constraints.default, DefaultExpression)
        assert spec.constraints.default.expression == "current_timestamp"

    @pytest.mark.parametrize(
        "check",
        ["length(name) > 2; DROP TABLE users", "1 = 1 -- comment", "1 = 1 /* x */"],
    )
    def test_check_with_statement_escape_rejected(self, check: str):
        with pytest.raises(pydantic.ValidationError, match="must not contain"):
            ColumnSpec.model_validate(
                {"name": "name", "type": "text", "constraints": {"check": check}}
            )


class TestForeignKeyRef:
    """Tests for ForeignKeyRef."""

    @pytest.mark.parametrize("spelling", ["set null", "set-null", "SET_NULL", "Set Null"])
    def test_action_spellings_normalized(self, spelling: str):
        ref = ForeignKeyRef.model_validate(
            {"table": "users", "column": "id", "onDelete": spelling}
        )
        assert ref.on_delete == ReferentialAction.SET_NULL

    def test_unknown_action_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            ForeignKeyRef.model_validate({"table": "users", "column": "id", "onDelete": "explode"})


class TestTableSpec:
    """Tests for TableSpec."""

    def test_columns_keep_request_order(self):
        spec = TableSpec.model_validate(
            {
                "name": "users",
                "columns": [{"name": "b", "type": "text"}, {"name": "a", "type": "integer"}],
            }
        )
        assert [c.name for c in spec.columns] == ["b", "a"]

    def test_duplicate_columns_rejected(self):
        with pytest.raises(pydantic.ValidationError, match="more than once"):
            TableSpec.model_validate(
                {
                    "name": "users",
                    "columns": [{"name": "a", "type": "text"}, {"name": "a", "type": "text"}],
                }
            )

    def test_no_columns(self):
        assert TableSpec(name="empty").columns == []


class TestAlterModels:
    """Tests for alter request models."""

    def test_alter_request_camel_case(self):
        request = AlterRequest.model_validate(
            {"columns": [{"colName": "email", "updatedValues": {"name": "mail"}}]}
        )
        assert request.columns[0].col_name == "email"
        assert request.columns[0].updated_values.name == "mail"

    @pytest.mark.parametrize("name", ["id", "created_at", "updated_at"])
    def test_rename_to_reserved_name_rejected(self, name: str):
        with pytest.raises(pydantic.ValidationError, match="reserved"):
            ColumnEdit.model_validate({"colName": "email", "updatedValues": {"name": name}})

    def test_missing_updated_values_is_empty(self):
        request = AlterRequest.model_validate({"columns": [{"colName": "email"}]})
        assert request.columns[0].updated_values.name is None
        assert request.columns[0].updated_values.constraints is None

    def test_requested_constraints(self):
        changes = ColumnConstraintChanges.model_validate(
            {"unique": True, "primaryKey": False, "check": "x > 0"}
        )
        assert changes.requested() == ["check", "primaryKey", "unique"]

    def test_alter_result_serializes_stopped_early(self):
        result = AlterResult(
            table=TableSnapshot(name="users", columns=[]),
            edits=[EditOutcome(column="email", action=EditAction.RENAMED)],
        )
        dumped = result.model_dump(by_alias=True)
        assert dumped["stoppedEarly"] is True
        assert AlterResult(table=result.table).model_dump(by_alias=True)["stoppedEarly"] is False

    def test_edit_outcome_serializes_camel_case(self):
        outcome = EditOutcome(column="email", action=EditAction.RENAMED)
        assert outcome.model_dump(by_alias=True) == {
            "column": "email",
            "action": "renamed",
            "error": None,
        }
