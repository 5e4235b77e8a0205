"""SQLAlchemy models for tender documents, their versions, comments, approvals and folders."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tenderdesk.app.common.models import TimestampMixin
from tenderdesk.app.core.database import Base


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Folder(TimestampMixin, Base):
    __tablename__ = "folders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    tender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("folders.id", ondelete="CASCADE"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    folder_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    folder_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class TenderDocument(Base):
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    tender_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("tenders.id", ondelete="CASCADE"), nullable=True, index=True
    )
    milestone_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("milestones.id", ondelete="SET NULL"), nullable=True, index=True
    )
    folder_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    file_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    storage_key: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    file_type: Mapped[str] = mapped_column(String(255), nullable=False, default="application/octet-stream")
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    upload_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    current_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    approval_status: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    versions: Mapped[List["DocumentVersion"]] = relationship(
        back_populates="document", cascade="all, delete-orphan", passive_deletes=True
    )
    comments: Mapped[List["DocumentComment"]] = relationship(
        back_populates="document", cascade="all, delete-orphan", passive_deletes=True
    )
    approvals: Mapped[List["DocumentApproval"]] = relationship(
        back_populates="document", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<TenderDocument(id={self.id}, name={self.name!r}, type={self.file_type})>"


class DocumentVersion(Base):
    __tablename__ = "document_versions"
    __table_args__ = (UniqueConstraint("document_id", "version_number", name="uq_document_version"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    file_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    storage_key: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    file_type: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    upload_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    changes_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    document: Mapped[TenderDocument] = relationship(back_populates="versions")


class DocumentComment(TimestampMixin, Base):
    __tablename__ = "document_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)

    document: Mapped[TenderDocument] = relationship(back_populates="comments")
    user = relationship("User", lazy="joined")

    @property
    def user_name(self) -> str:
        return self.user.display_name if self.user else str(self.user_id)


class DocumentApproval(TimestampMixin, Base):
    __tablename__ = "document_approvals"
    __table_args__ = (UniqueConstraint("document_id", "user_id", name="uq_document_approval_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ApprovalStatus.PENDING.value)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")

    document: Mapped[TenderDocument] = relationship(back_populates="approvals")
    user = relationship("User", lazy="joined")

    @property
    def user_name(self) -> str:
        return self.user.display_name if self.user else str(self.user_id)
