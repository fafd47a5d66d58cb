"""Mapping from MorphDB errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from morphdb.exceptions import (
    BackendUnavailableError,
    IntegrityViolationError,
    MorphDBError,
    RecordNotFoundError,
    TableNotFoundError,
)

logger = logging.getLogger(__name__)

# Anything not listed is a client error (400)
STATUS_BY_ERROR: dict[type[MorphDBError], int] = {
    TableNotFoundError: 404,
    RecordNotFoundError: 404,
    IntegrityViolationError: 500,
    BackendUnavailableError: 503,
}


def status_for(error: MorphDBError) -> int:
    for error_type, status in STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return status
    return 400


async def morphdb_error_handler(request: Request, exc: MorphDBError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status}): {exc.message}")
    return JSONResponse(status_code=status, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MorphDBError, morphdb_error_handler)  # type: ignore[arg-type]
