from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from diaryquest.features.activity.service import ActivityService, get_activity_service
from diaryquest.models.entry import SkipReason

router = APIRouter(prefix="/v1/skips", tags=["skips"])


class SkipCreate(BaseModel):
    date: dt.date
    reason: SkipReason


@router.get("")
def list_skips(service: ActivityService = Depends(get_activity_service)):
    skips = service.list_skips()
    return {"skips": [skips[day].model_dump(mode="json") for day in sorted(skips)]}


@router.post("", status_code=201)
def create_skip(body: SkipCreate, service: ActivityService = Depends(get_activity_service)):
    """Protect a day; a second skip for the same day replaces the first."""
    record = service.add_skip(body.date, body.reason)
    return {"skip": record.model_dump(mode="json"), "stats": service.stats().model_dump()}


@router.delete("/{day}")
def delete_skip(day: dt.date, service: ActivityService = Depends(get_activity_service)):
    service.remove_skip(day)
    return {"deleted": day.isoformat(), "stats": service.stats().model_dump()}
