"""Pydantic schemas for tender APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from tenderdesk.app.modules.milestones.schemas import MilestoneCreate, MilestoneRead
from tenderdesk.app.modules.milestones.workflow import milestone_progress, sort_milestones

from .status import TenderStatus, normalize_status


def format_reference(internal: Optional[str], external: Optional[str]) -> str:
    """Internal reference, else external reference, else ``-``."""

    return (internal or "").strip() or (external or "").strip() or "-"


class TenderBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    internal_reference: str = Field("", max_length=128)
    external_reference: Optional[str] = Field(None, max_length=128)
    client: str = Field("", max_length=255)
    status: TenderStatus = TenderStatus.DRAFT
    binding_period_date: Optional[datetime] = None
    budget: Optional[float] = Field(None, ge=0)
    submission_method: str = ""
    location: str = ""
    contact_person: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> TenderStatus:
        return normalize_status(value)


class TenderCreate(TenderBase):
    due_date: Optional[datetime] = None
    milestones: Optional[List[MilestoneCreate]] = None
    with_default_milestones: bool = True


class TenderUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    internal_reference: Optional[str] = Field(None, max_length=128)
    external_reference: Optional[str] = Field(None, max_length=128)
    client: Optional[str] = Field(None, max_length=255)
    status: Optional[TenderStatus] = None
    due_date: Optional[datetime] = None
    binding_period_date: Optional[datetime] = None
    budget: Optional[float] = Field(None, ge=0)
    submission_method: Optional[str] = None
    location: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Optional[TenderStatus]:
        if value is None:
            return None
        return normalize_status(value)


class TenderRead(TenderBase):
    id: int
    due_date: datetime
    created_at: datetime
    updated_at: datetime
    milestones: List[MilestoneRead] = Field(default_factory=list)

    class Config:
        from_attributes = True

    @field_validator("milestones", mode="before")
    @classmethod
    def _sorted(cls, value: Any) -> List[Any]:
        return sort_milestones(value or [])

    @computed_field  # type: ignore[misc]
    @property
    def status_label(self) -> str:
        return self.status.label()

    @computed_field  # type: ignore[misc]
    @property
    def progress(self) -> int:
        return milestone_progress(self.milestones)

    @computed_field  # type: ignore[misc]
    @property
    def display_reference(self) -> str:
        return format_reference(self.internal_reference, self.external_reference)


class TenderSummary(TenderBase):
    """Tender row without its milestones, used for list views."""

    id: int
    due_date: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @computed_field  # type: ignore[misc]
    @property
    def status_label(self) -> str:
        return self.status.label()

    @computed_field  # type: ignore[misc]
    @property
    def display_reference(self) -> str:
        return format_reference(self.internal_reference, self.external_reference)
