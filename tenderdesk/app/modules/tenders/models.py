"""SQLAlchemy models for tenders."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tenderdesk.app.common.models import TimestampMixin
from tenderdesk.app.core.database import Base
from tenderdesk.app.modules.milestones.models import Milestone

from .status import TenderStatus


class Tender(TimestampMixin, Base):
    """A bid / procurement opportunity tracked by one user."""

    __tablename__ = "tenders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    internal_reference: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    external_reference: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    client: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=TenderStatus.DRAFT.value, index=True)

    # Dates
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    binding_period_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    budget: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    submission_method: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Contact at the contracting authority
    contact_person: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    contact_email: Mapped[str] = mapped_column(String(254), nullable=False, default="")
    contact_phone: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    milestones: Mapped[List[Milestone]] = relationship(
        Milestone,
        back_populates="tender",
        cascade="all, delete-orphan",
        order_by=Milestone.sequence_number,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Tender(id={self.id}, title={self.title!r}, status={self.status})>"
