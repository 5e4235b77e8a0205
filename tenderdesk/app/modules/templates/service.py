"""CRUD helpers for milestone templates."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from tenderdesk.app.common.errors import NotFoundError, TenderDeskError

from . import schemas
from .models import MilestoneTemplate

logger = logging.getLogger(__name__)


class DuplicateTemplateError(TenderDeskError):
    """Raised when a template with the same title already exists."""

    status_code = 409


def list_templates(db: Session, owner_id: int) -> List[MilestoneTemplate]:
    stmt = (
        select(MilestoneTemplate)
        .where(MilestoneTemplate.owner_id == owner_id)
        .order_by(MilestoneTemplate.title.asc())
    )
    return list(db.scalars(stmt))


def get_template(db: Session, owner_id: int, template_id: int) -> MilestoneTemplate:
    template = db.get(MilestoneTemplate, template_id)
    if not template or template.owner_id != owner_id:
        raise NotFoundError("Milestone template not found")
    return template


def title_key(title: str) -> str:
    return (title or "").strip().casefold()


def get_template_by_title(db: Session, owner_id: int, title: str) -> Optional[MilestoneTemplate]:
    """Templates match milestones by title, ignoring case and surrounding whitespace."""

    stmt = select(MilestoneTemplate).where(
        MilestoneTemplate.owner_id == owner_id,
        MilestoneTemplate.title_key == title_key(title),
    )
    return db.scalars(stmt).first()


def create_template(db: Session, owner_id: int, payload: schemas.MilestoneTemplateCreate) -> MilestoneTemplate:
    title = payload.title.strip()
    if get_template_by_title(db, owner_id, title):
        raise DuplicateTemplateError(f"A template named '{title}' already exists")
    template = MilestoneTemplate(
        owner_id=owner_id,
        title=title,
        title_key=title_key(title),
        description=payload.description,
        checklist_items=list(payload.checklist_items),
    )
    db.add(template)
    db.commit()
    db.refresh(template)
    logger.info(f"Created milestone template {template.id} ({title}) for user {owner_id}")
    return template


def update_template(
    db: Session, owner_id: int, template_id: int, payload: schemas.MilestoneTemplateUpdate
) -> MilestoneTemplate:
    template = get_template(db, owner_id, template_id)
    data = payload.model_dump(exclude_unset=True)

    title = data.get("title")
    if title is not None:
        title = title.strip()
        existing = get_template_by_title(db, owner_id, title)
        if existing and existing.id != template.id:
            raise DuplicateTemplateError(f"A template named '{title}' already exists")
        template.title = title
        template.title_key = title_key(title)
    if "description" in data:
        template.description = data["description"]
    if data.get("checklist_items") is not None:
        template.checklist_items = list(data["checklist_items"])

    template.updated_at = datetime.now(tz=timezone.utc)
    db.commit()
    db.refresh(template)
    return template


def delete_template(db: Session, owner_id: int, template_id: int) -> None:
    template = get_template(db, owner_id, template_id)
    db.delete(template)
    db.commit()
    logger.info(f"Deleted milestone template {template_id} for user {owner_id}")
