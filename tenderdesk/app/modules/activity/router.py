"""REST endpoint for the activity feed."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tenderdesk.app.core import dependencies

from . import schemas, service

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=schemas.ActivityLogList)
def list_activity(
    tender_id: Optional[int] = Query(None, description="Only entries for this tender"),
    limit: int = Query(50, ge=1, le=200),
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    entries = service.list_activity(db, current_user.id, tender_id=tender_id, limit=limit)
    return schemas.ActivityLogList(items=[schemas.ActivityLogRead.model_validate(e) for e in entries])
