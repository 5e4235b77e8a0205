"""Per-user dashboard preferences."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from tenderdesk.app.common.models import TimestampMixin
from tenderdesk.app.core.database import Base


class DashboardSettings(TimestampMixin, Base):
    __tablename__ = "dashboard_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    favorite_metrics: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    layout_config: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
