"""
Health endpoints.

Lightweight checks for operational monitoring without exposing secrets.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from diaryquest.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@router.get("/readyz")
def readyz():
    """Readiness check: storage reachable."""
    storage = "memory"
    ok = True
    if settings.DATABASE_URL:
        from diaryquest.core.database import check_connection

        storage = "database"
        ok = check_connection()

    body = {
        "ok": ok,
        "storage": storage,
        "computed_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    return JSONResponse(status_code=200 if ok else 503, content=body)
