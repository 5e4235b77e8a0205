"""Per-tender folder tree."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tenderdesk.app.common.errors import FolderNotEmptyError, NotFoundError
from tenderdesk.app.modules.tenders.models import Tender

from . import schemas
from .models import Folder, TenderDocument

logger = logging.getLogger(__name__)


def build_folder_path(name: str, parent: Optional[Folder]) -> str:
    """``parent/child`` path; a top-level folder's path is its name."""

    return f"{parent.folder_path}/{name}" if parent else name


def _get_tender(db: Session, owner_id: int, tender_id: int) -> Tender:
    tender = db.get(Tender, tender_id)
    if not tender or tender.owner_id != owner_id:
        raise NotFoundError("Tender not found")
    return tender


def _descendants(db: Session, folder: Folder) -> List[Folder]:
    """Every folder below ``folder``, parents before their children."""

    found: List[Folder] = []
    level = [folder.id]
    while level:
        children = list(db.scalars(select(Folder).where(Folder.parent_id.in_(level)).order_by(Folder.id.asc())))
        found.extend(children)
        level = [child.id for child in children]
    return found


def get_folder(db: Session, owner_id: int, folder_id: int) -> Folder:
    folder = db.get(Folder, folder_id)
    if not folder or folder.owner_id != owner_id:
        raise NotFoundError("Folder not found")
    return folder


def list_folders(db: Session, owner_id: int, tender_id: int) -> List[Folder]:
    _get_tender(db, owner_id, tender_id)
    stmt = (
        select(Folder)
        .where(Folder.tender_id == tender_id)
        .order_by(Folder.folder_order.asc(), Folder.name.asc(), Folder.id.asc())
    )
    return list(db.scalars(stmt))


def folder_tree(folders: List[Folder]) -> List[schemas.FolderNode]:
    """Nest a flat folder list under its parents, keeping the given order."""

    nodes: Dict[int, schemas.FolderNode] = {f.id: schemas.FolderNode.model_validate(f) for f in folders}
    roots: List[schemas.FolderNode] = []
    for folder in folders:
        node = nodes[folder.id]
        parent = nodes.get(folder.parent_id) if folder.parent_id is not None else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots


def create_folder(db: Session, owner_id: int, tender_id: int, payload: schemas.FolderCreate) -> Folder:
    _get_tender(db, owner_id, tender_id)
    parent = None
    if payload.parent_id is not None:
        parent = get_folder(db, owner_id, payload.parent_id)
        if parent.tender_id != tender_id:
            raise NotFoundError("Parent folder not found on this tender")

    name = payload.name.strip()
    folder = Folder(
        owner_id=owner_id,
        tender_id=tender_id,
        parent_id=parent.id if parent else None,
        name=name,
        folder_path=build_folder_path(name, parent),
        folder_order=payload.folder_order,
        is_default=payload.is_default,
    )
    db.add(folder)
    db.commit()
    db.refresh(folder)
    logger.info(f"Created folder {folder.id} ({folder.folder_path}) on tender {tender_id}")
    return folder


def update_folder(db: Session, owner_id: int, folder_id: int, payload: schemas.FolderUpdate) -> Folder:
    """Rename or reorder a folder; a rename rewrites the paths of its subfolders."""

    folder = get_folder(db, owner_id, folder_id)
    if payload.folder_order is not None:
        folder.folder_order = payload.folder_order
    if payload.name is not None and payload.name.strip() != folder.name:
        parent = db.get(Folder, folder.parent_id) if folder.parent_id else None
        folder.name = payload.name.strip()
        folder.folder_path = build_folder_path(folder.name, parent)
        paths = {folder.id: folder.folder_path}
        for child in _descendants(db, folder):
            child.folder_path = f"{paths[child.parent_id]}/{child.name}"
            paths[child.id] = child.folder_path
    folder.updated_at = datetime.now(tz=timezone.utc)
    db.commit()
    db.refresh(folder)
    return folder


def delete_folder(db: Session, owner_id: int, folder_id: int) -> None:
    """Delete a folder with its subfolders; refused while any of them holds documents."""

    folder = get_folder(db, owner_id, folder_id)
    subtree = [folder.id] + [f.id for f in _descendants(db, folder)]
    count = db.scalar(select(func.count(TenderDocument.id)).where(TenderDocument.folder_id.in_(subtree)))
    if count:
        logger.warning(f"Refusing to delete folder {folder_id}: it still holds {count} documents")
        raise FolderNotEmptyError(f"Folder '{folder.name}' still contains {count} document(s)")
    db.delete(folder)
    db.commit()
    logger.info(f"Deleted folder {folder_id}")
