"""SQLAlchemy model for reusable milestone templates."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tenderdesk.app.common.models import TimestampMixin
from tenderdesk.app.core.database import Base


class MilestoneTemplate(TimestampMixin, Base):
    """Checklist shown for every milestone with the same title."""

    __tablename__ = "milestone_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # casefolded title, the key milestones are matched on
    title_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    checklist_items: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
