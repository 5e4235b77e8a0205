"""REST endpoints for the dashboard."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tenderdesk.app.core import dependencies

from . import schemas, service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=schemas.DashboardData)
def get_dashboard(
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.get_dashboard(db, current_user.id)


@router.get("/settings", response_model=schemas.DashboardSettingsRead)
def get_dashboard_settings(
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    row = service.get_dashboard_settings(db, current_user.id)
    if row is None:
        return schemas.DashboardSettingsRead()
    return row


@router.put("/settings", response_model=schemas.DashboardSettingsRead)
def save_dashboard_settings(
    payload: schemas.DashboardSettingsUpdate,
    current_user=Depends(dependencies.get_current_user),
    db: Session = Depends(dependencies.get_db),
):
    return service.save_dashboard_settings(db, current_user.id, payload)
