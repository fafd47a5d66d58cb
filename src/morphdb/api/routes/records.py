"""/record — generic CRUD on rows of runtime-defined tables."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from morphdb.api.deps import get_app_settings, get_db
from morphdb.config import Settings
from morphdb.core.engine import MorphDB
from morphdb.data.records import MAX_LIMIT
from morphdb.exceptions import RecordNotFoundError

router = APIRouter(prefix="/record", tags=["record"])


@router.post("/{name}", status_code=201)
def create_record(
    name: str,
    payload: dict[str, Any] = Body(...),
    db: MorphDB = Depends(get_db),
):
    return db.table(name).insert(payload)


@router.get("/{name}")
def list_records(
    name: str,
    limit: int | None = Query(default=None, ge=1, le=MAX_LIMIT),
    columns: list[str] = Query(default=[]),
    db: MorphDB = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return db.table(name).find(columns=columns, limit=limit or settings.DEFAULT_RECORD_LIMIT)


@router.get("/{name}/{record_id}")
def get_record(name: str, record_id: int, db: MorphDB = Depends(get_db)):
    record = db.table(name).find_by_id(record_id)
    if record is None:
        raise RecordNotFoundError(record_id, name)
    return record


@router.patch("/{name}/{record_id}")
def update_record(
    name: str,
    record_id: int,
    payload: dict[str, Any] = Body(...),
    db: MorphDB = Depends(get_db),
):
    return db.table(name).update(record_id, payload)


@router.delete("/{name}/{record_id}")
def delete_record(name: str, record_id: int, db: MorphDB = Depends(get_db)):
    db.table(name).delete(record_id)
    return {"message": f"Record '{record_id}' deleted from '{name}'."}
