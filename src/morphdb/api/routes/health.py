"""GET /health — database reachability check."""

from fastapi import APIRouter, Depends

from morphdb.api.deps import get_db
from morphdb.core.engine import MorphDB
from morphdb.exceptions import BackendUnavailableError

router = APIRouter()


@router.get("/health")
def health_check(db: MorphDB = Depends(get_db)):
    try:
        db.connection.test_connection()
        database = {"status": "up", "dialect": db.dialect}
    except BackendUnavailableError as e:
        database = {"status": "down", "error": e.message}
    overall = "ok" if database["status"] == "up" else "degraded"
    return {"status": overall, "services": {"database": database}}
