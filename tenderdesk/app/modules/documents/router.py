"""REST endpoints for documents, versions, comments, approvals and folders."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from tenderdesk.app.common.storage import StorageClient
from tenderdesk.app.core import dependencies

from . import folders, review, schemas, service, viewer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])


def _documents(db: Session, storage: StorageClient) -> service.DocumentService:
    return service.DocumentService(db, storage)


# ============================= Documents =============================


@router.get("/tenders/{tender_id}/documents", response_model=List[schemas.DocumentRead])
def list_tender_documents(
    tender_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    return _documents(db, storage).list_for_tender(owner_id=current_user.id, tender_id=tender_id)


@router.post(
    "/tenders/{tender_id}/documents",
    response_model=schemas.UploadResult,
    status_code=status.HTTP_201_CREATED,
)
async def upload_tender_documents(
    tender_id: int,
    files: List[UploadFile] = File(...),
    milestone_id: Optional[int] = Form(None),
    folder_id: Optional[int] = Form(None),
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    """Upload one or more files; files that fail are listed in ``failed``."""
    uploads = []
    for file in files:
        data = await file.read()
        uploads.append(
            service.UploadedFile(
                file_name=file.filename or "file",
                data=data,
                content_type=file.content_type,
            )
        )

    documents, failed = _documents(db, storage).upload_many(
        owner=current_user,
        tender_id=tender_id,
        uploads=uploads,
        milestone_id=milestone_id,
        folder_id=folder_id,
    )
    logger.info(f"User {current_user.id} uploaded {len(documents)} of {len(uploads)} files to tender {tender_id}")
    if failed and not documents:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=[f.model_dump() for f in failed],
        )
    return schemas.UploadResult(
        documents=[schemas.DocumentRead.model_validate(d) for d in documents],
        failed=failed,
    )


@router.get("/milestones/{milestone_id}/documents", response_model=List[schemas.DocumentRead])
def list_milestone_documents(
    milestone_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    return _documents(db, storage).list_for_milestone(owner_id=current_user.id, milestone_id=milestone_id)


@router.get("/folders/{folder_id}/documents", response_model=List[schemas.DocumentRead])
def list_folder_documents(
    folder_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    return _documents(db, storage).list_for_folder(owner_id=current_user.id, folder_id=folder_id)


@router.get("/documents/{document_id}", response_model=schemas.DocumentRead)
def get_document(
    document_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    return _documents(db, storage).get_document(owner_id=current_user.id, document_id=document_id)


@router.get("/documents/{document_id}/view", response_model=schemas.DocumentView)
def view_document(
    document_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    document = _documents(db, storage).get_document(owner_id=current_user.id, document_id=document_id)
    return viewer.build_document_view(document, storage)


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    _documents(db, storage).delete_document(owner=current_user, document_id=document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================= Versions =============================


@router.get("/documents/{document_id}/versions", response_model=List[schemas.VersionRead])
def list_versions(
    document_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    return _documents(db, storage).list_versions(owner_id=current_user.id, document_id=document_id)


@router.post(
    "/documents/{document_id}/versions",
    response_model=schemas.VersionRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_version(
    document_id: int,
    file: UploadFile = File(...),
    changes_description: str = Form(""),
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    upload = service.UploadedFile(
        file_name=file.filename or "file",
        data=await file.read(),
        content_type=file.content_type,
    )
    return _documents(db, storage).add_version(
        owner=current_user,
        document_id=document_id,
        upload=upload,
        changes_description=changes_description,
    )


@router.get("/documents/{document_id}/versions/{version_number}", response_model=schemas.VersionRead)
def get_version(
    document_id: int,
    version_number: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    return _documents(db, storage).get_version(
        owner_id=current_user.id, document_id=document_id, version_number=version_number
    )


@router.post("/documents/{document_id}/versions/{version_number}/restore", response_model=schemas.DocumentRead)
def restore_version(
    document_id: int,
    version_number: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    return _documents(db, storage).restore_version(
        owner_id=current_user.id, document_id=document_id, version_number=version_number
    )


# ============================= Comments =============================


@router.get("/documents/{document_id}/comments", response_model=List[schemas.CommentRead])
def list_comments(
    document_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return review.list_comments(db, current_user.id, document_id)


@router.post(
    "/documents/{document_id}/comments",
    response_model=schemas.CommentRead,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    document_id: int,
    payload: schemas.CommentCreate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return review.add_comment(db, current_user.id, document_id, payload)


@router.patch("/comments/{comment_id}", response_model=schemas.CommentRead)
def update_comment(
    comment_id: int,
    payload: schemas.CommentUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return review.update_comment(db, current_user.id, comment_id, payload)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    review.delete_comment(db, current_user.id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================= Approvals =============================


@router.get("/documents/{document_id}/approvals", response_model=List[schemas.ApprovalRead])
def list_approvals(
    document_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return review.list_approvals(db, current_user.id, document_id)


@router.post(
    "/documents/{document_id}/approvals",
    response_model=schemas.ApprovalRead,
    status_code=status.HTTP_201_CREATED,
)
def request_approval(
    document_id: int,
    payload: schemas.ApprovalCreate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return review.request_approval(db, current_user.id, document_id, payload)


@router.patch("/approvals/{approval_id}", response_model=schemas.ApprovalRead)
def update_approval(
    approval_id: int,
    payload: schemas.ApprovalUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return review.update_approval(db, current_user.id, approval_id, payload)


@router.delete("/approvals/{approval_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_approval(
    approval_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    review.delete_approval(db, current_user.id, approval_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================= Folders =============================


@router.get("/tenders/{tender_id}/folders", response_model=List[schemas.FolderNode])
def list_folders(
    tender_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    """Folders of a tender as a tree, siblings ordered by ``folder_order``."""
    return folders.folder_tree(folders.list_folders(db, current_user.id, tender_id))


@router.post(
    "/tenders/{tender_id}/folders",
    response_model=schemas.FolderRead,
    status_code=status.HTTP_201_CREATED,
)
def create_folder(
    tender_id: int,
    payload: schemas.FolderCreate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return folders.create_folder(db, current_user.id, tender_id, payload)


@router.patch("/folders/{folder_id}", response_model=schemas.FolderRead)
def update_folder(
    folder_id: int,
    payload: schemas.FolderUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return folders.update_folder(db, current_user.id, folder_id, payload)


@router.delete("/folders/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_folder(
    folder_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    folders.delete_folder(db, current_user.id, folder_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
