"""CLI command tests for MorphDB."""

import json
import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from morphdb.cli.main import app
from morphdb.cli.parsing import parse_column_spec

runner = CliRunner()


@pytest.fixture
def temp_db() -> Generator[str, None, None]:
    """Create a temporary SQLite database file."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield f"sqlite:///{db_path}"
    if os.path.exists(db_path):
        os.remove(db_path)


def _create_users(temp_db: str) -> None:
    result = runner.invoke(
        app,
        [
            "-d",
            temp_db,
            "--json",
            "table",
            "create",
            "users",
            "--column",
            "email:text:notnull:unique",
            "--column",
            "age:integer:default=18",
        ],
    )
    assert result.exit_code == 0, result.stdout


class TestVersionCommand:
    """Test the version command."""

    def test_version_output(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "MorphDB v" in result.stdout


class TestTableCommands:
    """Test table management commands."""

    def test_list_json_empty(self, temp_db: str) -> None:
        result = runner.invoke(app, ["-d", temp_db, "--json", "table", "list"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == []

    def test_list_rich(self, temp_db: str) -> None:
        _create_users(temp_db)
        result = runner.invoke(app, ["-d", temp_db, "table", "list"])
        assert result.exit_code == 0
        assert "users" in result.stdout

    def test_create_inline(self, temp_db: str) -> None:
        result = runner.invoke(
            app,
            ["-d", temp_db, "--json", "table", "create", "users", "--column", "email:text"],
        )
        assert result.exit_code == 0, result.stdout
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["columns"] == ["id", "created_at", "updated_at", "email"]

    def test_create_from_file(self, temp_db: str, tmp_path: Path) -> None:
        spec_file = tmp_path / "people.json"
        spec_file.write_text(
            json.dumps(
                {
                    "name": "people",
                    "columns": [
                        {"name": "name", "type": "text", "constraints": {"check": "length(name) > 2"}}
                    ],
                }
            )
        )

        result = runner.invoke(
            app,
            ["-d", temp_db, "--json", "table", "create", "ignored", "--from-file", str(spec_file)],
        )
        assert result.exit_code == 0, result.stdout
        assert json.loads(result.stdout)["name"] == "people"

    def test_create_duplicate_fails(self, temp_db: str) -> None:
        _create_users(temp_db)
        result = runner.invoke(
            app, ["-d", temp_db, "--json", "table", "create", "users", "--column", "a:text"]
        )
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"] == "DuplicateTableError"

    def test_create_invalid_column_spec(self, temp_db: str) -> None:
        result = runner.invoke(
            app, ["-d", temp_db, "--json", "table", "create", "users", "--column", "email"]
        )
        assert result.exit_code == 1

    def test_describe(self, temp_db: str) -> None:
        _create_users(temp_db)
        result = runner.invoke(app, ["-d", temp_db, "--json", "table", "describe", "users"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == "users"
        assert [c["name"] for c in data["columns"]][-2:] == ["email", "age"]

    def test_describe_missing(self, temp_db: str) -> None:
        result = runner.invoke(app, ["-d", temp_db, "--json", "table", "describe", "nope"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"] == "TableNotFoundError"

    def test_rename(self, temp_db: str) -> None:
        _create_users(temp_db)
        result = runner.invoke(
            app, ["-d", temp_db, "--json", "table", "rename", "users", "members"]
        )
        assert result.exit_code == 0, result.stdout

        result = runner.invoke(app, ["-d", temp_db, "--json", "table", "list"])
        assert [t["name"] for t in json.loads(result.stdout)] == ["members"]

    def test_alter_from_file(self, temp_db: str, tmp_path: Path) -> None:
        _create_users(temp_db)
        edits_file = tmp_path / "edits.json"
        edits_file.write_text(
            json.dumps({"columns": [{"colName": "email", "updatedValues": {"name": "mail"}}]})
        )

        result = runner.invoke(
            app,
            ["-d", temp_db, "--json", "table", "alter", "users", "--from-file", str(edits_file)],
        )
        assert result.exit_code == 0, result.stdout
        data = json.loads(result.stdout)
        assert data["edits"] == [{"column": "email", "action": "renamed", "error": None}]

    def test_drop_with_force(self, temp_db: str) -> None:
        _create_users(temp_db)
        result = runner.invoke(app, ["-d", temp_db, "table", "drop", "users", "--force"])
        assert result.exit_code == 0

        result = runner.invoke(app, ["-d", temp_db, "--json", "table", "list"])
        assert json.loads(result.stdout) == []

    def test_drop_cancelled(self, temp_db: str) -> None:
        _create_users(temp_db)
        result = runner.invoke(app, ["-d", temp_db, "table", "drop", "users"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.stdout

    def test_drop_missing(self, temp_db: str) -> None:
        result = runner.invoke(app, ["-d", temp_db, "--json", "table", "drop", "nope"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"] == "SchemaMutationError"


class TestParseColumnSpec:
    """Test column spec parsing."""

    def test_name_and_type(self) -> None:
        assert parse_column_spec("email:TEXT") == {"name": "email", "type": "text"}

    def test_flags(self) -> None:
        assert parse_column_spec("email:text:notnull:unique") == {
            "name": "email",
            "type": "text",
            "constraints": {"notNull": True, "unique": True},
        }

    def test_default_keeps_json_type(self) -> None:
        assert parse_column_spec("age:integer:default=0")["constraints"] == {"default": 0}
        assert parse_column_spec("nick:text:default=anon")["constraints"] == {"default": "anon"}

    def test_references(self) -> None:
        column = parse_column_spec("user_id:integer:references=users.id:ondelete=cascade")
        assert column["constraints"]["references"] == {
            "table": "users",
            "column": "id",
            "onDelete": "cascade",
        }

    @pytest.mark.parametrize(
        "spec",
        ["email", "email:text:bogus", "user_id:integer:references=users", "a:integer:ondelete=cascade"],
    )
    def test_invalid(self, spec: str) -> None:
        with pytest.raises(ValueError):
            parse_column_spec(spec)
