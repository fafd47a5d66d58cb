"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import morphdb
from morphdb.api.errors import register_error_handlers
from morphdb.api.routes import health, records, tables
from morphdb.config import Settings, get_settings
from morphdb.core.engine import MorphDB

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging with a timestamped format at the given level name."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def create_app(db: MorphDB | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the HTTP application.

    Args:
        db: Database to serve; created from settings.DATABASE_URL when omitted.
            A database passed in is left open on shutdown.
        settings: Application settings; loaded from the environment when omitted
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    owns_db = db is None
    database = db or MorphDB(settings.DATABASE_URL, echo=settings.ECHO_SQL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"MorphDB starting up ({database.connection.url.split('://', 1)[0]})")
        yield
        if owns_db:
            database.close()
        logger.info("MorphDB shutting down.")

    app = FastAPI(
        title="MorphDB",
        description="Define tables at runtime and work with their records over HTTP.",
        version=morphdb.__version__,
        lifespan=lifespan,
    )
    app.state.db = database
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(tables.router)
    app.include_router(records.router)
    return app
