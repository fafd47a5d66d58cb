"""CLI context management for database connections and shared state."""

from dataclasses import dataclass, field

from morphdb import MorphDB
from morphdb.config import get_settings


def get_database_url(url: str | None) -> str:
    """Resolve database URL from CLI arg or settings.

    Priority:
    1. Explicit URL argument
    2. MORPHDB_DATABASE_URL environment variable or .env entry
    3. Default: sqlite:///./morphdb.db
    """
    if url:
        return url
    return get_settings().DATABASE_URL


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Manages database connection lifecycle and output preferences.
    """

    database_url: str
    echo: bool
    json_output: bool
    _db: MorphDB | None = field(default=None, init=False, repr=False)

    def get_db(self) -> MorphDB:
        """Get or create database connection (lazy initialization)."""
        if self._db is None:
            self._db = MorphDB(self.database_url, echo=self.echo)
        return self._db

    def close(self) -> None:
        """Close database connection if open."""
        if self._db is not None:
            self._db.close()
            self._db = None
