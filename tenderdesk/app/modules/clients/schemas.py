"""Pydantic schemas for the client register."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    quick_check_info: Optional[str] = None
    besichtigung_info: Optional[str] = None
    konzept_info: Optional[str] = None
    kalkulation_info: Optional[str] = None
    dokumente_pruefen_info: Optional[str] = None
    ausschreibung_einreichen_info: Optional[str] = None
    aufklaerung_info: Optional[str] = None
    implementierung_info: Optional[str] = None


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    quick_check_info: Optional[str] = None
    besichtigung_info: Optional[str] = None
    konzept_info: Optional[str] = None
    kalkulation_info: Optional[str] = None
    dokumente_pruefen_info: Optional[str] = None
    ausschreibung_einreichen_info: Optional[str] = None
    aufklaerung_info: Optional[str] = None
    implementierung_info: Optional[str] = None


class ClientRead(ClientBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MilestoneInfo(BaseModel):
    client_id: int
    milestone_title: str
    info: Optional[str] = None
