"""Shared test fixtures for MorphDB."""

import os
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from morphdb import MorphDB
from morphdb.api import create_app
from morphdb.config import Settings


def _psycopg_available() -> bool:
    """Check if psycopg is installed."""
    try:
        import psycopg  # noqa: F401

        return True
    except ImportError:
        return False


def _postgresql_connectable(url: str) -> bool:
    """Check if we can connect to PostgreSQL."""
    if not _psycopg_available():
        return False
    try:
        from morphdb.core.connection import DatabaseConnection

        conn = DatabaseConnection(url)
        result = conn.test_connection()
        conn.close()
        return result
    except Exception:
        return False


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from environment or use default.

    Skips when psycopg is missing or no server answers at the URL.
    """
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        url = "postgresql://localhost/morphdb_test"

    if not _psycopg_available():
        pytest.skip("psycopg not installed")

    if not _postgresql_connectable(url):
        pytest.skip(f"Cannot connect to PostgreSQL at {url}")

    return url


@pytest.fixture
def memory_db() -> Generator[MorphDB, None, None]:
    """Create a MorphDB instance with SQLite in-memory."""
    database = MorphDB("sqlite:///:memory:")
    yield database
    database.close()


@pytest.fixture
def pg_db(postgresql_url: str) -> Generator[MorphDB, None, None]:
    """Create a MorphDB instance with PostgreSQL.

    Every table in the public schema is dropped afterwards.
    """
    from sqlalchemy import text

    database = MorphDB(postgresql_url)
    yield database
    with database.connection.engine.connect() as conn:
        result = conn.execute(text("SELECT tablename FROM pg_tables WHERE schemaname = 'public'"))
        for row in result:
            conn.execute(text(f'DROP TABLE IF EXISTS "{row[0]}" CASCADE'))
        conn.commit()
    database.close()


@pytest.fixture
def client(memory_db: MorphDB) -> Generator[TestClient, None, None]:
    """HTTP client against an app serving the in-memory database."""
    settings = Settings(DATABASE_URL="sqlite:///:memory:", DEFAULT_RECORD_LIMIT=500)
    with TestClient(create_app(db=memory_db, settings=settings)) as test_client:
        yield test_client

