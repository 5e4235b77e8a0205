"""Comments and approvals on documents.

Both are scoped to documents the caller owns; only the author of a comment or
approval may change or remove it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from tenderdesk.app.common.errors import NotFoundError, PermissionDeniedError

from . import schemas
from .models import ApprovalStatus, DocumentApproval, DocumentComment, TenderDocument

logger = logging.getLogger(__name__)


def _get_document(db: Session, owner_id: int, document_id: int) -> TenderDocument:
    document = db.get(TenderDocument, document_id)
    if not document or document.owner_id != owner_id:
        raise NotFoundError("Document not found")
    return document


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


# ------------------------------------------------------------------ comments


def list_comments(db: Session, owner_id: int, document_id: int) -> List[DocumentComment]:
    _get_document(db, owner_id, document_id)
    stmt = (
        select(DocumentComment)
        .where(DocumentComment.document_id == document_id)
        .order_by(DocumentComment.created_at.asc(), DocumentComment.id.asc())
    )
    return list(db.scalars(stmt))


def add_comment(db: Session, user_id: int, document_id: int, payload: schemas.CommentCreate) -> DocumentComment:
    _get_document(db, user_id, document_id)
    comment = DocumentComment(document_id=document_id, user_id=user_id, comment=payload.comment)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def _own_comment(db: Session, user_id: int, comment_id: int) -> DocumentComment:
    comment = db.get(DocumentComment, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    if comment.user_id != user_id:
        logger.warning(f"User {user_id} tried to change comment {comment_id} of user {comment.user_id}")
        raise PermissionDeniedError("Only the author can change this comment")
    return comment


def update_comment(db: Session, user_id: int, comment_id: int, payload: schemas.CommentUpdate) -> DocumentComment:
    comment = _own_comment(db, user_id, comment_id)
    comment.comment = payload.comment
    comment.updated_at = _now()
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, user_id: int, comment_id: int) -> None:
    comment = _own_comment(db, user_id, comment_id)
    db.delete(comment)
    db.commit()


# ------------------------------------------------------------------ approvals


def aggregate_approval_status(statuses: Iterable[str]) -> Optional[ApprovalStatus]:
    """Document-level approval status derived from the individual approvals.

    All approved gives approved, any rejection gives rejected, anything else is
    pending; no approvals at all gives None.
    """
    values = [ApprovalStatus(s) for s in statuses]
    if not values:
        return None
    if all(v is ApprovalStatus.APPROVED for v in values):
        return ApprovalStatus.APPROVED
    if any(v is ApprovalStatus.REJECTED for v in values):
        return ApprovalStatus.REJECTED
    return ApprovalStatus.PENDING


def _refresh_document_status(db: Session, document_id: int) -> None:
    db.flush()
    statuses = db.scalars(select(DocumentApproval.status).where(DocumentApproval.document_id == document_id))
    document = db.get(TenderDocument, document_id)
    aggregate = aggregate_approval_status(statuses)
    document.approval_status = aggregate.value if aggregate else None


def list_approvals(db: Session, owner_id: int, document_id: int) -> List[DocumentApproval]:
    _get_document(db, owner_id, document_id)
    stmt = (
        select(DocumentApproval)
        .where(DocumentApproval.document_id == document_id)
        .order_by(DocumentApproval.created_at.asc(), DocumentApproval.id.asc())
    )
    return list(db.scalars(stmt))


def request_approval(db: Session, user_id: int, document_id: int, payload: schemas.ApprovalCreate) -> DocumentApproval:
    """Open (or reopen) the caller's approval for a document and mark the document pending."""

    document = _get_document(db, user_id, document_id)
    stmt = select(DocumentApproval).where(
        DocumentApproval.document_id == document_id,
        DocumentApproval.user_id == user_id,
    )
    approval = db.scalars(stmt).first()
    if approval is None:
        approval = DocumentApproval(document_id=document_id, user_id=user_id)
        db.add(approval)
    approval.status = ApprovalStatus.PENDING.value
    approval.comment = payload.comment
    approval.updated_at = _now()
    document.approval_status = ApprovalStatus.PENDING.value
    db.commit()
    db.refresh(approval)
    logger.info(f"Approval requested on document {document_id} by user {user_id}")
    return approval


def _own_approval(db: Session, user_id: int, approval_id: int) -> DocumentApproval:
    approval = db.get(DocumentApproval, approval_id)
    if not approval:
        raise NotFoundError("Approval not found")
    if approval.user_id != user_id:
        logger.warning(f"User {user_id} tried to change approval {approval_id} of user {approval.user_id}")
        raise PermissionDeniedError("Only the author can change this approval")
    return approval


def update_approval(db: Session, user_id: int, approval_id: int, payload: schemas.ApprovalUpdate) -> DocumentApproval:
    approval = _own_approval(db, user_id, approval_id)
    approval.status = payload.status.value
    if payload.comment is not None:
        approval.comment = payload.comment
    approval.updated_at = _now()
    _refresh_document_status(db, approval.document_id)
    db.commit()
    db.refresh(approval)
    logger.info(f"Approval {approval_id} set to {approval.status}")
    return approval


def delete_approval(db: Session, user_id: int, approval_id: int) -> None:
    approval = _own_approval(db, user_id, approval_id)
    document_id = approval.document_id
    db.delete(approval)
    _refresh_document_status(db, document_id)
    db.commit()
