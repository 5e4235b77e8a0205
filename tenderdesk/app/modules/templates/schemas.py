"""Pydantic schemas for milestone templates."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _clean_items(items: Optional[List[str]]) -> Optional[List[str]]:
    if items is None:
        return None
    return [item.strip() for item in items if item and item.strip()]


class MilestoneTemplateBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    checklist_items: List[str] = Field(default_factory=list)

    @field_validator("checklist_items")
    @classmethod
    def _strip_items(cls, value: List[str]) -> List[str]:
        return _clean_items(value) or []


class MilestoneTemplateCreate(MilestoneTemplateBase):
    pass


class MilestoneTemplateUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    checklist_items: Optional[List[str]] = None

    @field_validator("checklist_items")
    @classmethod
    def _strip_items(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_items(value)


class MilestoneTemplateRead(MilestoneTemplateBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
