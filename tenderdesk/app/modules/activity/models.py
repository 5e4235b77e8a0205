"""Append-only activity feed."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tenderdesk.app.core.database import Base


class ActivityAction(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"
    MILESTONE_COMPLETE = "milestone_complete"
    MILESTONE_CREATE = "milestone_create"
    DOCUMENT_UPLOAD = "document_upload"
    DOCUMENT_DELETE = "document_delete"


class ActivityLog(Base):
    """One entry of the activity feed.

    Referenced ids are plain columns (no foreign keys) and titles are copied in,
    so entries outlive the tender, milestone or document they describe.
    """

    __tablename__ = "activity_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    action: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    user_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tender_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    tender_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    milestone_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    milestone_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    document_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    document_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
