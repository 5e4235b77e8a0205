"""SQLAlchemy models for tender milestones."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tenderdesk.app.common.models import TimestampMixin
from tenderdesk.app.core.database import Base

from .workflow import MilestoneStatus


class Milestone(TimestampMixin, Base):
    """One workflow stage of a tender."""

    __tablename__ = "milestones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    tender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=MilestoneStatus.PENDING.value, index=True)
    sequence_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completion_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    assignees: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    # checklist[i] is True once item i of the matching template is ticked off
    checklist: Mapped[List[bool]] = mapped_column(JSON, nullable=False, default=list)

    tender = relationship("Tender", back_populates="milestones")

    def __repr__(self) -> str:
        return f"<Milestone(id={self.id}, tender_id={self.tender_id}, title={self.title!r}, status={self.status})>"
