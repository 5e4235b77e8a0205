"""REST endpoints for tender milestones and their checklists."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from tenderdesk.app.core import dependencies

from . import schemas, service

router = APIRouter(tags=["milestones"])


@router.get("/tenders/{tender_id}/milestones", response_model=List[schemas.MilestoneRead])
def list_milestones(
    tender_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.MilestoneService(db).list_for_tender(owner_id=current_user.id, tender_id=tender_id)


@router.post(
    "/tenders/{tender_id}/milestones",
    response_model=schemas.MilestoneRead,
    status_code=status.HTTP_201_CREATED,
)
def create_milestone(
    tender_id: int,
    payload: schemas.MilestoneCreate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.MilestoneService(db).create_milestone(owner=current_user, tender_id=tender_id, payload=payload)


@router.get("/tenders/{tender_id}/milestones/consistency", response_model=schemas.MilestoneConsistency)
def milestone_consistency(
    tender_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.MilestoneService(db).consistency(owner_id=current_user.id, tender_id=tender_id)


@router.patch("/milestones/{milestone_id}", response_model=schemas.MilestoneRead)
def update_milestone(
    milestone_id: int,
    payload: schemas.MilestoneUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.MilestoneService(db).update_milestone(
        owner=current_user, milestone_id=milestone_id, payload=payload
    )


@router.post("/milestones/{milestone_id}/status", response_model=schemas.MilestoneRead)
def change_milestone_status(
    milestone_id: int,
    payload: schemas.MilestoneStatusUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    """Move a milestone to another status; refused with 409 when the workflow forbids it."""
    return service.MilestoneService(db).set_status(
        owner=current_user, milestone_id=milestone_id, status=payload.status
    )


@router.delete("/milestones/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_milestone(
    milestone_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    service.MilestoneService(db).delete_milestone(owner=current_user, milestone_id=milestone_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/milestones/{milestone_id}/template", response_model=schemas.MilestoneChecklist)
def get_milestone_template(
    milestone_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.MilestoneService(db).checklist(owner_id=current_user.id, milestone_id=milestone_id)


@router.post("/milestones/{milestone_id}/checklist/{index}", response_model=schemas.MilestoneRead)
def toggle_checklist_item(
    milestone_id: int,
    index: int,
    payload: schemas.ChecklistItemUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.MilestoneService(db).toggle_checklist_item(
        owner=current_user, milestone_id=milestone_id, index=index, completed=payload.completed
    )
