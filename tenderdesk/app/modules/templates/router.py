"""REST endpoints for milestone templates."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from tenderdesk.app.core import dependencies

from . import schemas, service

router = APIRouter(prefix="/milestone-templates", tags=["milestone-templates"])


@router.get("", response_model=List[schemas.MilestoneTemplateRead])
def list_templates(
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.list_templates(db, current_user.id)


@router.post("", response_model=schemas.MilestoneTemplateRead, status_code=status.HTTP_201_CREATED)
def create_template(
    payload: schemas.MilestoneTemplateCreate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.create_template(db, current_user.id, payload)


@router.get("/{template_id}", response_model=schemas.MilestoneTemplateRead)
def get_template(
    template_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.get_template(db, current_user.id, template_id)


@router.patch("/{template_id}", response_model=schemas.MilestoneTemplateRead)
def update_template(
    template_id: int,
    payload: schemas.MilestoneTemplateUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.update_template(db, current_user.id, template_id, payload)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    service.delete_template(db, current_user.id, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
