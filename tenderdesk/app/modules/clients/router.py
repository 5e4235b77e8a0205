"""REST endpoints for the client register."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from tenderdesk.app.core import dependencies

from . import schemas, service

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=List[schemas.ClientRead])
def list_clients(
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.list_clients(db, current_user.id)


@router.post("", response_model=schemas.ClientRead, status_code=status.HTTP_201_CREATED)
def create_client(
    payload: schemas.ClientCreate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.create_client(db, current_user.id, payload)


@router.get("/{client_id}", response_model=schemas.ClientRead)
def get_client(
    client_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.get_client(db, current_user.id, client_id)


@router.patch("/{client_id}", response_model=schemas.ClientRead)
def update_client(
    client_id: int,
    payload: schemas.ClientUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.update_client(db, current_user.id, client_id, payload)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: int,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    service.delete_client(db, current_user.id, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{client_id}/milestone-info", response_model=schemas.MilestoneInfo)
def get_milestone_info(
    client_id: int,
    title: str = Query(..., description="Workflow milestone title, e.g. 'Kalkulation'"),
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    client = service.get_client(db, current_user.id, client_id)
    return schemas.MilestoneInfo(
        client_id=client.id,
        milestone_title=title,
        info=service.milestone_info(client, title),
    )
