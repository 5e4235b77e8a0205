"""Decide how a stored document is shown: inline preview, external viewer or download."""

from __future__ import annotations

import logging
from typing import Any, List
from urllib.parse import quote

from tenderdesk.app.common.errors import StorageError
from tenderdesk.app.common.storage import StorageClient, key_from_url

from .schemas import DocumentKind, DocumentView, ViewerAction

logger = logging.getLogger(__name__)

OFFICE_VIEWER_URL = "https://view.officeapps.live.com/op/view.aspx?src={url}"
GOOGLE_VIEWER_URL = "https://docs.google.com/viewer?url={url}"

SPREADSHEET_TYPES = frozenset(
    {
        "application/vnd.ms-excel",
        "application/vnd.oasis.opendocument.spreadsheet",
        "text/csv",
    }
)

_INLINE_KINDS = {DocumentKind.PDF, DocumentKind.IMAGE, DocumentKind.VIDEO, DocumentKind.AUDIO}


def classify_mime(mime: str) -> DocumentKind:
    mime = (mime or "").strip().lower()
    if mime == "application/pdf":
        return DocumentKind.PDF
    if mime.startswith("image/"):
        return DocumentKind.IMAGE
    if mime.startswith("video/"):
        return DocumentKind.VIDEO
    if mime.startswith("audio/"):
        return DocumentKind.AUDIO
    if (
        mime in SPREADSHEET_TYPES
        or mime.startswith("application/vnd.openxmlformats-officedocument.spreadsheetml")
        or "spreadsheet" in mime
        or "excel" in mime
    ):
        return DocumentKind.SPREADSHEET
    return DocumentKind.OTHER


def external_viewer_actions(url: str) -> List[ViewerAction]:
    encoded = quote(url, safe="")
    return [
        ViewerAction(kind="external-viewer", label="Open in Microsoft Office Online", url=OFFICE_VIEWER_URL.format(url=encoded)),
        ViewerAction(kind="external-viewer", label="Open in Google Docs Viewer", url=GOOGLE_VIEWER_URL.format(url=encoded)),
        ViewerAction(kind="download", label="Download", url=url),
    ]


def build_document_view(document: Any, storage: StorageClient) -> DocumentView:
    """Resolve a fresh URL for ``document`` and describe how to render it.

    A failed lookup yields a fallback view carrying the stored URL for a manual
    download; it is not retried.
    """
    kind = classify_mime(document.file_type)
    view = DocumentView(document_id=document.id, name=document.name, file_type=document.file_type, kind=kind)

    key = document.storage_key or key_from_url(document.file_url or "")
    try:
        if not key:
            raise StorageError("Document has no stored file")
        url = storage.public_url(key)
    except StorageError as exc:
        logger.warning(f"Could not resolve file for document {document.id}: {exc}")
        view.error = "The document could not be loaded. Download it manually instead."
        view.download_url = document.file_url
        return view

    view.download_url = url
    if kind in _INLINE_KINDS:
        view.inline = True
        view.preview_url = url
    elif kind is DocumentKind.SPREADSHEET:
        view.actions = external_viewer_actions(url)
    else:
        view.actions = [ViewerAction(kind="download", label="Download", url=url)]
    return view
