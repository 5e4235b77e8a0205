"""Pydantic schemas for the activity feed."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .models import ActivityAction


class ActivityLogRead(BaseModel):
    id: int
    timestamp: datetime
    action: ActivityAction
    title: str
    description: str
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    tender_id: Optional[int] = None
    tender_title: Optional[str] = None
    milestone_id: Optional[int] = None
    milestone_title: Optional[str] = None
    document_id: Optional[int] = None
    document_name: Optional[str] = None

    class Config:
        from_attributes = True


class ActivityLogList(BaseModel):
    items: List[ActivityLogRead]
