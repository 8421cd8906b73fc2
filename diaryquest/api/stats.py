from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from diaryquest.features.activity.service import ActivityService, get_activity_service

router = APIRouter(tags=["stats"])


@router.get("/v1/stats")
def get_stats(
    today: Optional[dt.date] = Query(None, description="Reference day for deterministic results"),
    service: ActivityService = Depends(get_activity_service),
):
    """Current streak, longest streak and achievements."""
    return service.stats(today).model_dump()


@router.get("/v1/achievements/catalog")
def get_catalog(service: ActivityService = Depends(get_activity_service)):
    return service.catalog.model_dump()


@router.get("/v1/snapshot")
def export_snapshot(service: ActivityService = Depends(get_activity_service)):
    return service.export_snapshot()


@router.post("/v1/snapshot/import")
def import_snapshot(
    payload: Dict[str, Any] = Body(...),
    service: ActivityService = Depends(get_activity_service),
):
    """Replace all data with a stored snapshot (any supported schema version)."""
    return service.import_snapshot(payload).model_dump()
