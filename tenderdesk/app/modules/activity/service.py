"""Writing and reading the activity feed."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import ActivityAction, ActivityLog

logger = logging.getLogger(__name__)


def record_activity(
    db: Session,
    *,
    owner_id: int,
    action: ActivityAction,
    title: str,
    description: str = "",
    user: Optional[Any] = None,
    tender: Optional[Any] = None,
    milestone: Optional[Any] = None,
    document: Optional[Any] = None,
) -> ActivityLog:
    """Stage an activity entry in ``db``; the caller's commit persists it with the change it describes."""

    entry = ActivityLog(
        owner_id=owner_id,
        action=action.value,
        title=title,
        description=description,
        user_id=getattr(user, "id", None),
        user_name=getattr(user, "display_name", None),
        tender_id=getattr(tender, "id", None),
        tender_title=getattr(tender, "title", None),
        milestone_id=getattr(milestone, "id", None),
        milestone_title=getattr(milestone, "title", None),
        document_id=getattr(document, "id", None),
        document_name=getattr(document, "name", None),
    )
    db.add(entry)
    logger.debug(f"Activity {action.value} staged for owner {owner_id}: {title}")
    return entry


def list_activity(
    db: Session,
    owner_id: int,
    *,
    tender_id: Optional[int] = None,
    limit: int = 50,
) -> List[ActivityLog]:
    """Newest entries first."""

    stmt = select(ActivityLog).where(ActivityLog.owner_id == owner_id)
    if tender_id is not None:
        stmt = stmt.where(ActivityLog.tender_id == tender_id)
    stmt = stmt.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).limit(limit)
    return list(db.scalars(stmt))
