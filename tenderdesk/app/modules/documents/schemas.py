"""Pydantic schemas for documents, versions, comments, approvals and folders."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import ApprovalStatus


class DocumentRead(BaseModel):
    id: int
    tender_id: Optional[int] = None
    milestone_id: Optional[int] = None
    folder_id: Optional[int] = None
    name: str
    description: str = ""
    file_url: Optional[str] = None
    file_type: str
    file_size: Optional[int] = None
    upload_date: datetime
    current_version: int
    approval_status: Optional[ApprovalStatus] = None

    class Config:
        from_attributes = True


class UploadFailure(BaseModel):
    file_name: str
    error: str


class UploadResult(BaseModel):
    documents: List[DocumentRead]
    failed: List[UploadFailure] = Field(default_factory=list)


# ------------------------------------------------------------------ versions


class VersionRead(BaseModel):
    id: int
    document_id: int
    version_number: int
    file_url: Optional[str] = None
    file_type: str
    file_size: Optional[int] = None
    upload_date: datetime
    changes_description: str = ""
    user_id: int

    class Config:
        from_attributes = True


# ------------------------------------------------------------------ comments


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1)


class CommentUpdate(CommentCreate):
    pass


class CommentRead(BaseModel):
    id: int
    document_id: int
    user_id: int
    user_name: str
    comment: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ------------------------------------------------------------------ approvals


class ApprovalCreate(BaseModel):
    comment: str = ""


class ApprovalUpdate(BaseModel):
    status: ApprovalStatus
    comment: Optional[str] = None


class ApprovalRead(BaseModel):
    id: int
    document_id: int
    user_id: int
    user_name: str
    status: ApprovalStatus
    comment: str = ""
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ------------------------------------------------------------------ folders


class FolderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    parent_id: Optional[int] = None
    folder_order: int = 0
    is_default: bool = False


class FolderUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    folder_order: Optional[int] = None


class FolderRead(BaseModel):
    id: int
    tender_id: int
    parent_id: Optional[int] = None
    name: str
    folder_path: str
    folder_order: int
    is_default: bool

    class Config:
        from_attributes = True


class FolderNode(FolderRead):
    children: List["FolderNode"] = Field(default_factory=list)


# ------------------------------------------------------------------ viewer


class DocumentKind(str, enum.Enum):
    PDF = "pdf"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    SPREADSHEET = "spreadsheet"
    OTHER = "other"


class ViewerAction(BaseModel):
    kind: str  # "external-viewer" or "download"
    label: str
    url: str


class DocumentView(BaseModel):
    document_id: int
    name: str
    file_type: str
    kind: DocumentKind
    inline: bool = False
    preview_url: Optional[str] = None
    actions: List[ViewerAction] = Field(default_factory=list)
    error: Optional[str] = None
    download_url: Optional[str] = None


FolderNode.model_rebuild()
