"""Request dependencies shared by the routers."""

from fastapi import Request

from morphdb.config import Settings
from morphdb.core.engine import MorphDB


def get_db(request: Request) -> MorphDB:
    """Return the MorphDB instance the application was created with."""
    return request.app.state.db


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""
    return request.app.state.settings
