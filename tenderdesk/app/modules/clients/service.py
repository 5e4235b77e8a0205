"""Client register and per-milestone client notes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from tenderdesk.app.common.errors import NotFoundError

from . import schemas
from .models import MILESTONE_INFO_FIELDS, Client

logger = logging.getLogger(__name__)

# Text columns that stay non-null; an explicit null in an update leaves them untouched.
_REQUIRED_TEXT = {"name", "contact_person", "email", "phone", "address"}


def list_clients(db: Session, owner_id: int) -> List[Client]:
    stmt = select(Client).where(Client.owner_id == owner_id).order_by(Client.name.asc())
    return list(db.scalars(stmt))


def get_client(db: Session, owner_id: int, client_id: int) -> Client:
    client = db.get(Client, client_id)
    if not client or client.owner_id != owner_id:
        raise NotFoundError("Client not found")
    return client


def create_client(db: Session, owner_id: int, payload: schemas.ClientCreate) -> Client:
    client = Client(owner_id=owner_id, **payload.model_dump())
    db.add(client)
    db.commit()
    db.refresh(client)
    logger.info(f"Created client {client.id} ({client.name}) for user {owner_id}")
    return client


def update_client(db: Session, owner_id: int, client_id: int, payload: schemas.ClientUpdate) -> Client:
    client = get_client(db, owner_id, client_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in _REQUIRED_TEXT:
            continue
        setattr(client, field, value)
    client.updated_at = datetime.now(tz=timezone.utc)
    db.commit()
    db.refresh(client)
    return client


def delete_client(db: Session, owner_id: int, client_id: int) -> None:
    client = get_client(db, owner_id, client_id)
    db.delete(client)
    db.commit()
    logger.info(f"Deleted client {client_id} for user {owner_id}")


def milestone_info(client: Optional[Client], milestone_title: str) -> Optional[str]:
    """The client's note for a workflow milestone, or None.

    Unknown titles, a missing client and blank notes all give None.
    """
    field = MILESTONE_INFO_FIELDS.get((milestone_title or "").strip())
    if client is None or field is None:
        return None
    value = getattr(client, field, None)
    if not value or not value.strip():
        return None
    return value
