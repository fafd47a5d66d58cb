"""HTTP surface for MorphDB."""

from morphdb.api.app import create_app

__all__ = ["create_app"]
