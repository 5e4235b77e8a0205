"""Pydantic schemas for milestone APIs."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

from .workflow import MilestoneStatus


class MilestoneBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    sequence_number: Optional[int] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    assignees: List[str] = Field(default_factory=list)


class MilestoneCreate(MilestoneBase):
    status: MilestoneStatus = MilestoneStatus.PENDING


class MilestoneUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    sequence_number: Optional[int] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    assignees: Optional[List[str]] = None
    status: Optional[MilestoneStatus] = None


class MilestoneStatusUpdate(BaseModel):
    status: MilestoneStatus


class MilestoneRead(MilestoneBase):
    id: int
    tender_id: int
    status: MilestoneStatus
    completion_date: Optional[datetime] = None
    checklist: List[bool] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ChecklistItemUpdate(BaseModel):
    completed: bool = True


class ChecklistItem(BaseModel):
    index: int
    text: str
    completed: bool


class MilestoneChecklist(BaseModel):
    milestone_id: int
    template_id: int
    title: str
    description: Optional[str] = None
    items: List[ChecklistItem]

    @computed_field  # type: ignore[misc]
    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.items if item.completed)


class MilestoneConsistency(BaseModel):
    missing_title: bool
    missing_sequence: bool
    missing_status: bool

    @computed_field  # type: ignore[misc]
    @property
    def is_consistent(self) -> bool:
        return not (self.missing_title or self.missing_sequence or self.missing_status)
