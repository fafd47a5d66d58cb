"""Schema management for MorphDB."""

from morphdb.schema.engine import SchemaEngine
from morphdb.schema.introspection import SchemaInspector

__all__ = ["SchemaEngine", "SchemaInspector"]
