"""Document uploads, versions and deletion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tenderdesk.app.common.errors import NotFoundError, StorageError
from tenderdesk.app.common.storage import StorageClient, build_object_key, key_from_url
from tenderdesk.app.modules.activity.models import ActivityAction
from tenderdesk.app.modules.activity.service import record_activity
from tenderdesk.app.modules.milestones.models import Milestone
from tenderdesk.app.modules.tenders.models import Tender

from . import schemas
from .models import DocumentVersion, Folder, TenderDocument

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class UploadedFile:
    """File content received from a client, detached from the web framework."""

    file_name: str
    data: bytes
    content_type: Optional[str] = None


class DocumentService:
    """Document operations for one user against one file store."""

    def __init__(self, db: Session, storage: StorageClient) -> None:
        self._db = db
        self._storage = storage

    # ------------------------------------------------------------------ read
    def list_for_tender(self, *, owner_id: int, tender_id: int) -> List[TenderDocument]:
        self._get_tender(owner_id, tender_id)
        return self._list(TenderDocument.tender_id == tender_id)

    def list_for_milestone(self, *, owner_id: int, milestone_id: int) -> List[TenderDocument]:
        self._get_milestone(owner_id, milestone_id)
        return self._list(TenderDocument.milestone_id == milestone_id)

    def list_for_folder(self, *, owner_id: int, folder_id: int) -> List[TenderDocument]:
        folder = self._db.get(Folder, folder_id)
        if not folder or folder.owner_id != owner_id:
            raise NotFoundError("Folder not found")
        return self._list(TenderDocument.folder_id == folder_id)

    def get_document(self, *, owner_id: int, document_id: int) -> TenderDocument:
        document = self._db.get(TenderDocument, document_id)
        if not document or document.owner_id != owner_id:
            raise NotFoundError("Document not found")
        return document

    # ------------------------------------------------------------------ upload
    def upload_document(
        self,
        *,
        owner: Any,
        tender_id: int,
        upload: UploadedFile,
        milestone_id: Optional[int] = None,
        folder_id: Optional[int] = None,
        description: str = "",
    ) -> TenderDocument:
        tender = self._get_tender(owner.id, tender_id)
        self._check_placement(tender, milestone_id, folder_id)

        key, url, content_type = self._store(upload)
        document = TenderDocument(
            owner_id=owner.id,
            tender_id=tender.id,
            milestone_id=milestone_id,
            folder_id=folder_id,
            name=upload.file_name,
            description=description,
            file_url=url,
            storage_key=key,
            file_type=content_type,
            file_size=len(upload.data),
            current_version=1,
        )
        document.versions.append(
            DocumentVersion(
                version_number=1,
                file_url=url,
                storage_key=key,
                file_type=content_type,
                file_size=len(upload.data),
                changes_description="Initial upload",
                user_id=owner.id,
            )
        )
        try:
            self._db.add(document)
            self._db.flush()
            record_activity(
                self._db,
                owner_id=owner.id,
                action=ActivityAction.DOCUMENT_UPLOAD,
                title="Document uploaded",
                description=f"'{document.name}' added to '{tender.title}'",
                user=owner,
                tender=tender,
                document=document,
            )
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            self._discard(key)
            raise
        self._db.refresh(document)
        logger.info(f"Uploaded document {document.id} ({document.name}, {document.file_size} bytes) to tender {tender.id}")
        return document

    def upload_many(
        self,
        *,
        owner: Any,
        tender_id: int,
        uploads: Iterable[UploadedFile],
        milestone_id: Optional[int] = None,
        folder_id: Optional[int] = None,
    ) -> Tuple[List[TenderDocument], List[schemas.UploadFailure]]:
        """Upload each file in turn; a failing file is reported and the rest continue."""

        tender = self._get_tender(owner.id, tender_id)
        self._check_placement(tender, milestone_id, folder_id)

        documents: List[TenderDocument] = []
        failed: List[schemas.UploadFailure] = []
        for upload in uploads:
            try:
                documents.append(
                    self.upload_document(
                        owner=owner,
                        tender_id=tender_id,
                        upload=upload,
                        milestone_id=milestone_id,
                        folder_id=folder_id,
                    )
                )
            except StorageError as exc:
                self._db.rollback()
                logger.error(f"Upload of {upload.file_name} to tender {tender_id} failed: {exc}")
                failed.append(schemas.UploadFailure(file_name=upload.file_name, error=str(exc)))
        return documents, failed

    # ------------------------------------------------------------------ versions
    def list_versions(self, *, owner_id: int, document_id: int) -> List[DocumentVersion]:
        """Newest version first."""

        self.get_document(owner_id=owner_id, document_id=document_id)
        stmt = (
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version_number.desc())
        )
        return list(self._db.scalars(stmt))

    def get_version(self, *, owner_id: int, document_id: int, version_number: int) -> DocumentVersion:
        self.get_document(owner_id=owner_id, document_id=document_id)
        stmt = select(DocumentVersion).where(
            DocumentVersion.document_id == document_id,
            DocumentVersion.version_number == version_number,
        )
        version = self._db.scalars(stmt).first()
        if not version:
            raise NotFoundError(f"Version {version_number} not found")
        return version

    def add_version(
        self,
        *,
        owner: Any,
        document_id: int,
        upload: UploadedFile,
        changes_description: str = "",
    ) -> DocumentVersion:
        """Store a new file for the document as version ``current_version + 1``."""

        document = self.get_document(owner_id=owner.id, document_id=document_id)
        key, url, content_type = self._store(upload)

        version = DocumentVersion(
            document_id=document.id,
            version_number=document.current_version + 1,
            file_url=url,
            storage_key=key,
            file_type=content_type,
            file_size=len(upload.data),
            changes_description=changes_description,
            user_id=owner.id,
        )
        self._db.add(version)
        document.current_version = version.version_number
        self._point_at(document, version)
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            self._discard(key)
            raise
        self._db.refresh(version)
        logger.info(f"Document {document.id} is now at version {version.version_number}")
        return version

    def restore_version(self, *, owner_id: int, document_id: int, version_number: int) -> TenderDocument:
        """Point the document back at the file of an earlier version; the version counter is kept."""

        version = self.get_version(owner_id=owner_id, document_id=document_id, version_number=version_number)
        document = version.document
        self._point_at(document, version)
        self._db.commit()
        self._db.refresh(document)
        logger.info(f"Document {document.id} restored to the file of version {version_number}")
        return document

    # ------------------------------------------------------------------ delete
    def delete_document(self, *, owner: Any, document_id: int) -> None:
        document = self.get_document(owner_id=owner.id, document_id=document_id)
        keys = {v.storage_key for v in document.versions if v.storage_key}
        keys.add(document.storage_key or key_from_url(document.file_url or ""))

        for key in sorted(k for k in keys if k):
            try:
                self._storage.delete(key)
            except StorageError as exc:
                logger.warning(f"Could not remove stored file {key} of document {document.id}: {exc}")

        tender = self._db.get(Tender, document.tender_id) if document.tender_id else None
        record_activity(
            self._db,
            owner_id=owner.id,
            action=ActivityAction.DOCUMENT_DELETE,
            title="Document deleted",
            description=f"'{document.name}' was deleted",
            user=owner,
            tender=tender,
            document=document,
        )
        self._db.delete(document)
        self._db.commit()
        logger.info(f"Deleted document {document_id}")

    # ------------------------------------------------------------------ internal
    def _list(self, condition) -> List[TenderDocument]:
        stmt = select(TenderDocument).where(condition).order_by(TenderDocument.upload_date.desc(), TenderDocument.id.desc())
        return list(self._db.scalars(stmt))

    def _store(self, upload: UploadedFile) -> Tuple[str, str, str]:
        content_type = upload.content_type or DEFAULT_CONTENT_TYPE
        key = build_object_key(upload.file_name)
        self._storage.upload(key, upload.data, content_type)
        try:
            url = self._storage.public_url(key)
        except StorageError:
            self._discard(key)
            raise
        return key, url, content_type

    def _discard(self, key: str) -> None:
        """Remove an object no row will point at; failures are only logged."""
        try:
            self._storage.delete(key)
        except StorageError as exc:
            logger.warning(f"Could not remove orphaned file {key}: {exc}")

    @staticmethod
    def _point_at(document: TenderDocument, version: DocumentVersion) -> None:
        document.file_url = version.file_url
        document.storage_key = version.storage_key
        document.file_type = version.file_type
        document.file_size = version.file_size

    def _get_tender(self, owner_id: int, tender_id: int) -> Tender:
        tender = self._db.get(Tender, tender_id)
        if not tender or tender.owner_id != owner_id:
            raise NotFoundError("Tender not found")
        return tender

    def _get_milestone(self, owner_id: int, milestone_id: int) -> Milestone:
        milestone = self._db.get(Milestone, milestone_id)
        if not milestone or milestone.tender.owner_id != owner_id:
            raise NotFoundError("Milestone not found")
        return milestone

    def _check_placement(self, tender: Tender, milestone_id: Optional[int], folder_id: Optional[int]) -> None:
        if milestone_id is not None:
            milestone = self._db.get(Milestone, milestone_id)
            if not milestone or milestone.tender_id != tender.id:
                raise NotFoundError("Milestone not found on this tender")
        if folder_id is not None:
            folder = self._db.get(Folder, folder_id)
            if not folder or folder.tender_id != tender.id:
                raise NotFoundError("Folder not found on this tender")
