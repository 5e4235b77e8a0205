"""REST endpoints for tenders and submissions."""

from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from tenderdesk.app.common.storage import StorageClient
from tenderdesk.app.core import dependencies

from . import schemas, service

router = APIRouter(tags=["tenders"])

StatusGroup = Literal["active", "draft", "submitted", "completed", "submissions"]


@router.get("/tenders", response_model=List[schemas.TenderRead])
def list_tenders(
    status_filter: Optional[str] = Query(None, alias="status"),
    group: Optional[StatusGroup] = None,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.TenderService(db).list_tenders(owner_id=current_user.id, status=status_filter, group=group)


@router.post("/tenders", response_model=schemas.TenderRead, status_code=status.HTTP_201_CREATED)
def create_tender(
    payload: schemas.TenderCreate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.TenderService(db).create_tender(owner=current_user, payload=payload)


@router.get("/tenders/{tender_id}", response_model=schemas.TenderRead)
def get_tender(
    tender_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.TenderService(db).get_tender(owner_id=current_user.id, tender_id=tender_id)


@router.patch("/tenders/{tender_id}", response_model=schemas.TenderRead)
def update_tender(
    tender_id: int,
    payload: schemas.TenderUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.TenderService(db).update_tender(owner=current_user, tender_id=tender_id, payload=payload)


@router.delete("/tenders/{tender_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tender(
    tender_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
    storage: StorageClient = Depends(dependencies.get_storage),
):
    service.TenderService(db).delete_tender(owner=current_user, tender_id=tender_id, storage=storage)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/submissions", response_model=List[schemas.TenderSummary])
def list_submissions(
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.TenderService(db).list_submissions(owner_id=current_user.id, status=status_filter)
