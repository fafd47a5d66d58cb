"""Core components for MorphDB."""

from morphdb.core.connection import DatabaseConnection
from morphdb.core.types import (
    AlterResult,
    ColumnEdit,
    ColumnSnapshot,
    ColumnSpec,
    ColumnType,
    ReferentialAction,
    TableSnapshot,
    TableSpec,
)

__all__ = [
    "DatabaseConnection",
    "ColumnType",
    "ReferentialAction",
    "ColumnSpec",
    "TableSpec",
    "ColumnEdit",
    "ColumnSnapshot",
    "TableSnapshot",
    "AlterResult",
]
