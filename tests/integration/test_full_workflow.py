"""Integration tests for full MorphDB workflow."""

import pytest
from fastapi.testclient import TestClient

from morphdb import MorphDB
from morphdb.core.types import EditAction
from morphdb.exceptions import DuplicateTableError, QueryError, TableNotFoundError


class TestFullWorkflow:
    """End-to-end tests over HTTP against SQLite."""

    def test_complete_workflow(self, client: TestClient):
        """Create related tables, write records, reshape and drop them."""
        # 1. Start from an empty catalog
        assert client.get("/table").json() == []

        # 2. Create a parent and a child table
        response = client.post(
            "/table",
            json={
                "name": "authors",
                "columns": [
                    {"name": "name", "type": "text", "constraints": {"notNull": True}},
                ],
            },
        )
        assert response.status_code == 201
        response = client.post(
            "/table",
            json={
                "name": "books",
                "columns": [
                    {
                        "name": "author_id",
                        "type": "integer",
                        "constraints": {
                            "references": {
                                "table": "authors",
                                "column": "id",
                                "onDelete": "cascade",
                            }
                        },
                    },
                    {"name": "title", "type": "text"},
                    {"name": "price", "type": "real", "constraints": {"default": 9.99}},
                ],
            },
        )
        assert response.status_code == 201
        foreign_keys = response.json()["foreignKeys"]
        assert foreign_keys[0]["referredTable"] == "authors"
        assert foreign_keys[0]["onDelete"] == "cascade"

        # 3. Write records
        author = client.post("/record/authors", json={"name": "Le Guin"}).json()
        client.post("/record/books", json={"author_id": author["id"], "title": "The Dispossessed"})
        client.post("/record/books", json={"author_id": author["id"], "title": "Lathe of Heaven"})

        books = client.get("/record/books").json()
        assert [b["title"] for b in books] == ["The Dispossessed", "Lathe of Heaven"]
        assert books[0]["price"] == pytest.approx(9.99)

        # 4. Rename a column, then the table
        response = client.put(
            "/table/books",
            json={"columns": [{"colName": "title", "updatedValues": {"name": "book_title"}}]},
        )
        assert response.json()["edits"][0]["action"] == "renamed"
        response = client.patch("/table/rename/books", json={"newName": "novels"})
        assert response.status_code == 201

        novels = client.get("/record/novels", params={"columns": ["book_title"]}).json()
        assert novels == [{"book_title": "The Dispossessed"}, {"book_title": "Lathe of Heaven"}]

        # 5. Deleting the author cascades to the books
        assert client.delete(f"/record/authors/{author['id']}").status_code == 200
        assert client.get("/record/novels").json() == []

        # 6. Drop everything
        assert client.delete("/table/novels").status_code == 200
        assert client.delete("/table/authors").status_code == 200
        assert client.get("/table").json() == []


class TestPostgreSQLWorkflow:
    """Column alterations SQLite cannot express, run against PostgreSQL."""

    def test_alter_type_not_null_and_default(self, pg_db: MorphDB):
        pg_db.create_table(
            "items",
            [
                {"name": "qty", "type": "integer"},
                {"name": "label", "type": "text"},
            ],
        )

        result = pg_db.alter_table(
            "items",
            [
                {"colName": "qty", "updatedValues": {"type": "text"}},
                {"colName": "label", "updatedValues": {"constraints": {"notNull": True}}},
            ],
        )
        assert [e.action for e in result.edits] == [EditAction.TYPE_CHANGED, EditAction.NOT_NULL_SET]
        assert result.table.get_column("qty").data_type == "text"
        assert result.table.get_column("label").nullable is False

        result = pg_db.alter_table(
            "items",
            [
                {"colName": "label", "updatedValues": {"constraints": {"notNull": False}}},
            ],
        )
        assert result.table.get_column("label").nullable is True

        result = pg_db.alter_table(
            "items",
            [{"colName": "label", "updatedValues": {"constraints": {"default": "none"}}}],
        )
        assert result.edits[0].action == EditAction.DEFAULT_SET
        assert "none" in result.table.get_column("label").default

        record = pg_db.table("items").insert({"qty": "12"})
        assert record["label"] == "none"
        assert record["qty"] == "12"

    def test_snapshot_types(self, pg_db: MorphDB):
        snapshot = pg_db.create_table(
            "mixed",
            [
                {"name": "a", "type": "integer"},
                {"name": "b", "type": "text"},
                {"name": "c", "type": "real"},
                {"name": "d", "type": "blob"},
            ],
        )
        types = {c.name: c.data_type for c in snapshot.columns}
        assert types["a"] == "integer"
        assert types["b"] == "text"
        assert types["c"] == "real"
        assert types["d"] == "bytea"
        assert snapshot.get_column("id").autoincrement is True

    def test_duplicate_and_rename(self, pg_db: MorphDB):
        pg_db.create_table("users", [{"name": "email", "type": "text"}])
        with pytest.raises(DuplicateTableError):
            pg_db.create_table("users", [{"name": "email", "type": "text"}])

        pg_db.rename_table("users", "members")
        with pytest.raises(TableNotFoundError):
            pg_db.describe_table("users")

    def test_cascade_and_check(self, pg_db: MorphDB):
        pg_db.create_table(
            "users",
            [{"name": "name", "type": "text", "constraints": {"check": "length(name) > 2"}}],
        )
        pg_db.create_table(
            "posts",
            [
                {
                    "name": "user_id",
                    "type": "integer",
                    "constraints": {
                        "references": {"table": "users", "column": "id", "onDelete": "cascade"}
                    },
                }
            ],
        )

        with pytest.raises(QueryError):
            pg_db.table("users").insert({"name": "ab"})

        user = pg_db.table("users").insert({"name": "abc"})
        pg_db.table("posts").insert({"user_id": user["id"]})
        pg_db.table("users").delete(user["id"])

        assert pg_db.table("posts").find() == []
        assert pg_db.describe_table("posts").foreign_keys[0].on_delete == "cascade"
