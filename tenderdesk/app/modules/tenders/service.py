"""Business logic for tenders."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from tenderdesk.app.common.errors import NotFoundError, StorageError
from tenderdesk.app.common.storage import StorageClient, key_from_url
from tenderdesk.app.modules.activity.models import ActivityAction
from tenderdesk.app.modules.activity.service import record_activity
from tenderdesk.app.modules.documents.models import TenderDocument
from tenderdesk.app.modules.milestones.models import Milestone
from tenderdesk.app.modules.milestones.workflow import MilestoneStatus, default_milestones

from . import schemas
from .models import Tender
from .status import STATUS_GROUPS, SUBMISSION_STATUSES, TenderStatus, normalize_status

logger = logging.getLogger(__name__)

# Columns that may be cleared through an update; for all others an explicit null is ignored.
_NULLABLE_FIELDS = {"external_reference", "binding_period_date", "budget"}


class TenderService:
    """Tender CRUD scoped to the owning user; every mutation is written to the activity feed."""

    def __init__(self, db: Session) -> None:
        self._db = db

    # ------------------------------------------------------------------ read
    def list_tenders(
        self,
        *,
        owner_id: int,
        status: Optional[TenderStatus | str] = None,
        group: Optional[str] = None,
    ) -> List[Tender]:
        stmt = select(Tender).where(Tender.owner_id == owner_id)
        if status:
            stmt = stmt.where(Tender.status == normalize_status(status).value)
        if group:
            if group not in STATUS_GROUPS:
                raise ValueError(f"Unknown status group: {group}")
            stmt = stmt.where(Tender.status.in_([s.value for s in STATUS_GROUPS[group]]))
        stmt = stmt.order_by(Tender.due_date.asc(), Tender.id.asc())
        return list(self._db.scalars(stmt))

    def list_submissions(
        self,
        *,
        owner_id: int,
        status: Optional[TenderStatus | str] = None,
    ) -> List[Tender]:
        """Submitted tenders, most recently changed first."""

        if status:
            wanted = normalize_status(status)
            statuses = [wanted.value] if wanted in SUBMISSION_STATUSES else []
        else:
            statuses = [s.value for s in SUBMISSION_STATUSES]
        stmt = (
            select(Tender)
            .where(Tender.owner_id == owner_id, Tender.status.in_(statuses))
            .order_by(Tender.updated_at.desc(), Tender.id.desc())
        )
        return list(self._db.scalars(stmt))

    def get_tender(self, *, owner_id: int, tender_id: int) -> Tender:
        tender = self._db.get(Tender, tender_id)
        if not tender or tender.owner_id != owner_id:
            raise NotFoundError("Tender not found")
        return tender

    # ------------------------------------------------------------------ create/update
    def create_tender(self, *, owner: Any, payload: schemas.TenderCreate) -> Tender:
        data = payload.model_dump(exclude={"milestones", "with_default_milestones", "due_date"})
        data["status"] = payload.status.value
        tender = Tender(owner_id=owner.id, due_date=payload.due_date or self._now(), **data)

        if payload.milestones:
            rows = [self._milestone_fields(m.model_dump()) for m in payload.milestones]
            for index, row in enumerate(rows, start=1):
                if row.get("sequence_number") is None:
                    row["sequence_number"] = index
        elif payload.with_default_milestones:
            rows = default_milestones()
        else:
            rows = []
        tender.milestones = [Milestone(**row) for row in rows]

        self._db.add(tender)
        self._db.flush()
        record_activity(
            self._db,
            owner_id=owner.id,
            action=ActivityAction.CREATE,
            title="Tender created",
            description=f"'{tender.title}' was created",
            user=owner,
            tender=tender,
        )
        self._db.commit()
        self._db.refresh(tender)
        logger.info(f"Created tender {tender.id} with {len(rows)} milestones for user {owner.id}")
        return tender

    def update_tender(self, *, owner: Any, tender_id: int, payload: schemas.TenderUpdate) -> Tender:
        tender = self.get_tender(owner_id=owner.id, tender_id=tender_id)
        data = payload.model_dump(exclude_unset=True)

        old_status = normalize_status(tender.status)
        new_status = data.pop("status", None)
        changed: List[str] = []
        for field, value in data.items():
            if value is None and field not in _NULLABLE_FIELDS:
                continue
            if getattr(tender, field) != value:
                setattr(tender, field, value)
                changed.append(field)

        if new_status is not None and new_status != old_status:
            tender.status = new_status.value
            record_activity(
                self._db,
                owner_id=owner.id,
                action=ActivityAction.STATUS_CHANGE,
                title=f"Status changed to {new_status.label()}",
                description=f"'{tender.title}' moved from {old_status.label()} to {new_status.label()}",
                user=owner,
                tender=tender,
            )
        if changed:
            record_activity(
                self._db,
                owner_id=owner.id,
                action=ActivityAction.UPDATE,
                title="Tender updated",
                description=f"Changed: {', '.join(changed)}",
                user=owner,
                tender=tender,
            )

        tender.updated_at = self._now()
        self._db.commit()
        self._db.refresh(tender)
        logger.info(f"Updated tender {tender.id} (fields={changed}, status={tender.status})")
        return tender

    def delete_tender(self, *, owner: Any, tender_id: int, storage: Optional[StorageClient] = None) -> None:
        tender = self.get_tender(owner_id=owner.id, tender_id=tender_id)
        keys = self._stored_keys(tender.id)

        record_activity(
            self._db,
            owner_id=owner.id,
            action=ActivityAction.DELETE,
            title="Tender deleted",
            description=f"'{tender.title}' was deleted",
            user=owner,
            tender=tender,
        )
        self._db.delete(tender)
        self._db.commit()
        logger.info(f"Deleted tender {tender_id} for user {owner.id}")

        if storage is None:
            return
        for key in keys:
            try:
                storage.delete(key)
            except StorageError as exc:
                logger.warning(f"Could not remove stored file {key} of deleted tender {tender_id}: {exc}")

    # ------------------------------------------------------------------ internal
    def _stored_keys(self, tender_id: int) -> List[str]:
        documents = self._db.scalars(select(TenderDocument).where(TenderDocument.tender_id == tender_id))
        keys = set()
        for document in documents:
            for version in document.versions:
                keys.add(version.storage_key or key_from_url(version.file_url or ""))
            keys.add(document.storage_key or key_from_url(document.file_url or ""))
        return sorted(k for k in keys if k)

    def _milestone_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        data["status"] = MilestoneStatus(data["status"]).value
        if data["status"] == MilestoneStatus.COMPLETED.value:
            data["completion_date"] = self._now()
        return data

    @staticmethod
    def _now() -> datetime:
        return datetime.now(tz=timezone.utc)
