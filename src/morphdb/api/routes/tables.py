"""/table — create, inspect, rename, alter and drop runtime-defined tables."""

from fastapi import APIRouter, Depends

from morphdb.api.deps import get_db
from morphdb.core.engine import MorphDB
from morphdb.core.types import AlterRequest, AlterResult, RenameRequest, TableSnapshot, TableSpec

router = APIRouter(prefix="/table", tags=["table"])


@router.post("", status_code=201, response_model=TableSnapshot)
def create_table(spec: TableSpec, db: MorphDB = Depends(get_db)):
    return db.create_table_from_spec(spec)


@router.get("", response_model=list[TableSnapshot])
def list_tables(db: MorphDB = Depends(get_db)):
    return db.list_tables()


@router.get("/{name}", response_model=TableSnapshot)
def get_table(name: str, db: MorphDB = Depends(get_db)):
    return db.describe_table(name)


@router.patch("/rename/{name}", status_code=201, response_model=TableSnapshot)
def rename_table(name: str, body: RenameRequest, db: MorphDB = Depends(get_db)):
    return db.rename_table(name, body.new_name)


@router.put("/{name}", response_model=AlterResult)
def alter_table(name: str, body: AlterRequest, db: MorphDB = Depends(get_db)):
    return db.alter_table(name, body.columns)


@router.delete("/{name}")
def drop_table(name: str, db: MorphDB = Depends(get_db)):
    db.drop_table(name)
    return {"message": f"Table '{name}' removed successfully."}
