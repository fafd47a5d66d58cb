"""Record operations for MorphDB."""

from morphdb.data.records import RecordEngine

__all__ = ["RecordEngine"]
