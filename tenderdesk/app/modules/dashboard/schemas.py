"""Pydantic schemas for the dashboard."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from tenderdesk.app.modules.milestones.workflow import MilestoneStatus
from tenderdesk.app.modules.tenders.status import TenderStatus


class StatusStat(BaseModel):
    status: TenderStatus
    label: str
    count: int
    percentage: int


class MonthlyStat(BaseModel):
    month: str  # YYYY-MM
    created: int
    won: int
    lost: int


class UpcomingMilestone(BaseModel):
    id: int
    tender_id: int
    tender_title: str
    title: str
    status: MilestoneStatus
    due_date: datetime
    is_overdue: bool
    days_left: int


class DashboardData(BaseModel):
    total_tenders: int
    active_tenders: int
    submitted_tenders: int
    won_tenders: int
    lost_tenders: int
    success_rate: int
    status_stats: List[StatusStat]
    monthly_stats: List[MonthlyStat]
    upcoming_milestones: List[UpcomingMilestone]


class DashboardSettingsUpdate(BaseModel):
    favorite_metrics: List[str] = Field(default_factory=list)
    layout_config: Optional[Dict[str, Any]] = None


class DashboardSettingsRead(DashboardSettingsUpdate):
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
