from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from diaryquest.features.activity.service import ActivityService, get_activity_service

router = APIRouter(prefix="/v1/entries", tags=["entries"])


class EntryCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    tags: List[str] = Field(default_factory=list)
    date: Optional[dt.date] = None


class EntryUpdate(BaseModel):
    content: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    tags: Optional[List[str]] = None
    date: Optional[dt.date] = None


@router.get("")
def list_entries(
    start: Optional[dt.date] = Query(None, description="First day (inclusive)"),
    end: Optional[dt.date] = Query(None, description="Last day (inclusive)"),
    service: ActivityService = Depends(get_activity_service),
):
    """List entries; with a date range, newest first."""
    if start is not None or end is not None:
        entries = service.entries_between(start or dt.date.min, end or dt.date.max)
    else:
        entries = service.list_entries()
    return {"entries": [entry.model_dump() for entry in entries]}


@router.post("", status_code=201)
def create_entry(body: EntryCreate, service: ActivityService = Depends(get_activity_service)):
    entry = service.add_entry(body.content, body.tags, body.date)
    return {"entry": entry.model_dump(), "stats": service.stats().model_dump()}


@router.patch("/{entry_id}")
def update_entry(entry_id: str, body: EntryUpdate, service: ActivityService = Depends(get_activity_service)):
    entry = service.update_entry(entry_id, content=body.content, tags=body.tags, date=body.date)
    return {"entry": entry.model_dump(), "stats": service.stats().model_dump()}


@router.delete("/{entry_id}")
def delete_entry(entry_id: str, service: ActivityService = Depends(get_activity_service)):
    service.delete_entry(entry_id)
    return {"deleted": entry_id, "stats": service.stats().model_dump()}
