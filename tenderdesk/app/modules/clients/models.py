"""SQLAlchemy model for client (contracting authority) records."""

from __future__ import annotations

from typing import Dict, Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tenderdesk.app.common.models import TimestampMixin
from tenderdesk.app.core.database import Base

# milestone title -> client column holding the authority's notes for that stage
MILESTONE_INFO_FIELDS: Dict[str, str] = {
    "Quick Check": "quick_check_info",
    "Besichtigung": "besichtigung_info",
    "Konzept": "konzept_info",
    "Kalkulation": "kalkulation_info",
    "Dokumente prüfen": "dokumente_pruefen_info",
    "Ausschreibung einreichen": "ausschreibung_einreichen_info",
    "Aufklärung": "aufklaerung_info",
    "Implementierung": "implementierung_info",
}


class Client(TimestampMixin, Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_person: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(254), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    address: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Per-milestone notes
    quick_check_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    besichtigung_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    konzept_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    kalkulation_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dokumente_pruefen_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ausschreibung_einreichen_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    aufklaerung_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    implementierung_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name={self.name!r})>"
