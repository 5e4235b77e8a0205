"""Business logic for tender milestones."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from tenderdesk.app.common.errors import InvalidMilestoneTransitionError, NotFoundError
from tenderdesk.app.modules.activity.models import ActivityAction
from tenderdesk.app.modules.activity.service import record_activity
from tenderdesk.app.modules.templates.service import get_template_by_title
from tenderdesk.app.modules.tenders.models import Tender

from . import schemas
from .models import Milestone
from .workflow import (
    MilestoneStatus,
    can_update_milestone_status,
    find_inconsistencies,
    sequence_key,
    sort_milestones,
)

logger = logging.getLogger(__name__)


class MilestoneService:
    """Milestone operations for tenders owned by one user."""

    def __init__(self, db: Session) -> None:
        self._db = db

    # ------------------------------------------------------------------ read
    def list_for_tender(self, *, owner_id: int, tender_id: int) -> List[Milestone]:
        tender = self._get_tender(owner_id, tender_id)
        return sort_milestones(tender.milestones)

    def get_milestone(self, *, owner_id: int, milestone_id: int) -> Milestone:
        stmt = (
            select(Milestone)
            .join(Tender, Milestone.tender_id == Tender.id)
            .where(Milestone.id == milestone_id, Tender.owner_id == owner_id)
        )
        milestone = self._db.scalars(stmt).first()
        if not milestone:
            raise NotFoundError("Milestone not found")
        return milestone

    def consistency(self, *, owner_id: int, tender_id: int) -> schemas.MilestoneConsistency:
        tender = self._get_tender(owner_id, tender_id)
        return schemas.MilestoneConsistency(**find_inconsistencies(tender.milestones))

    def checklist(self, *, owner_id: int, milestone_id: int) -> schemas.MilestoneChecklist:
        """The template checklist matching the milestone title, with the milestone's progress."""

        milestone = self.get_milestone(owner_id=owner_id, milestone_id=milestone_id)
        template = get_template_by_title(self._db, owner_id, milestone.title)
        if not template:
            raise NotFoundError(f"No template for milestone '{milestone.title}'")
        done = list(milestone.checklist or [])
        items = [
            schemas.ChecklistItem(index=i, text=text, completed=bool(done[i]) if i < len(done) else False)
            for i, text in enumerate(template.checklist_items or [])
        ]
        return schemas.MilestoneChecklist(
            milestone_id=milestone.id,
            template_id=template.id,
            title=template.title,
            description=template.description,
            items=items,
        )

    # ------------------------------------------------------------------ create/update
    def create_milestone(self, *, owner: Any, tender_id: int, payload: schemas.MilestoneCreate) -> Milestone:
        tender = self._get_tender(owner.id, tender_id)
        data = payload.model_dump()
        data["status"] = payload.status.value
        if data["sequence_number"] is None:
            data["sequence_number"] = int(max((sequence_key(m) for m in tender.milestones), default=0)) + 1
        if payload.status is MilestoneStatus.COMPLETED:
            data["completion_date"] = self._now()

        milestone = Milestone(tender_id=tender.id, **data)
        self._db.add(milestone)
        self._db.flush()
        record_activity(
            self._db,
            owner_id=owner.id,
            action=ActivityAction.MILESTONE_CREATE,
            title="Milestone added",
            description=f"'{milestone.title}' added to '{tender.title}'",
            user=owner,
            tender=tender,
            milestone=milestone,
        )
        tender.updated_at = self._now()
        self._db.commit()
        self._db.refresh(milestone)
        logger.info(f"Created milestone {milestone.id} on tender {tender.id}")
        return milestone

    def update_milestone(self, *, owner: Any, milestone_id: int, payload: schemas.MilestoneUpdate) -> Milestone:
        milestone = self.get_milestone(owner_id=owner.id, milestone_id=milestone_id)
        data = payload.model_dump(exclude_unset=True)
        requested = data.pop("status", None)
        if requested is not None and requested.value != milestone.status:
            self._check_transition(milestone, requested)

        for field, value in data.items():
            if value is None and field in {"title", "description", "assignees"}:
                continue
            setattr(milestone, field, value)
        if requested is not None and requested.value != milestone.status:
            self._apply_status(owner, milestone, requested)

        return self._save(milestone)

    def set_status(self, *, owner: Any, milestone_id: int, status: MilestoneStatus | str) -> Milestone:
        milestone = self.get_milestone(owner_id=owner.id, milestone_id=milestone_id)
        requested = MilestoneStatus(status)
        self._check_transition(milestone, requested)
        self._apply_status(owner, milestone, requested)
        return self._save(milestone)

    def toggle_checklist_item(self, *, owner: Any, milestone_id: int, index: int, completed: bool) -> Milestone:
        checklist = self.checklist(owner_id=owner.id, milestone_id=milestone_id)
        if index < 0 or index >= len(checklist.items):
            raise NotFoundError(f"Checklist item {index} not found")
        milestone = self.get_milestone(owner_id=owner.id, milestone_id=milestone_id)
        progress = [item.completed for item in checklist.items]
        progress[index] = completed
        # JSON columns only persist on reassignment
        milestone.checklist = progress
        return self._save(milestone)

    def delete_milestone(self, *, owner: Any, milestone_id: int) -> None:
        milestone = self.get_milestone(owner_id=owner.id, milestone_id=milestone_id)
        tender_id = milestone.tender_id
        self._db.delete(milestone)
        self._db.commit()
        logger.info(f"Deleted milestone {milestone_id} from tender {tender_id}")

    # ------------------------------------------------------------------ internal
    def _get_tender(self, owner_id: int, tender_id: int) -> Tender:
        tender = self._db.get(Tender, tender_id)
        if not tender or tender.owner_id != owner_id:
            raise NotFoundError("Tender not found")
        return tender

    @staticmethod
    def _check_transition(milestone: Milestone, requested: MilestoneStatus) -> None:
        if not can_update_milestone_status(milestone.status, requested):
            logger.warning(f"Rejected milestone {milestone.id} transition {milestone.status} -> {requested.value}")
            raise InvalidMilestoneTransitionError(milestone.status, requested.value)

    def _apply_status(self, owner: Any, milestone: Milestone, requested: MilestoneStatus) -> None:
        previous = milestone.status
        milestone.status = requested.value
        if requested is MilestoneStatus.COMPLETED:
            milestone.completion_date = self._now()
            record_activity(
                self._db,
                owner_id=owner.id,
                action=ActivityAction.MILESTONE_COMPLETE,
                title="Milestone completed",
                description=f"'{milestone.title}' of '{milestone.tender.title}' was completed",
                user=owner,
                tender=milestone.tender,
                milestone=milestone,
            )
        elif previous == MilestoneStatus.COMPLETED.value:
            milestone.completion_date = None
        logger.info(f"Milestone {milestone.id} moved from {previous} to {requested.value}")

    def _save(self, milestone: Milestone) -> Milestone:
        milestone.updated_at = self._now()
        self._db.commit()
        self._db.refresh(milestone)
        return milestone

    @staticmethod
    def _now() -> datetime:
        return datetime.now(tz=timezone.utc)
