from __future__ import annotations

from types import SimpleNamespace
from urllib.parse import quote

import pytest

from tenderdesk.app.common.errors import StorageError
from tenderdesk.app.common.storage import build_object_key, key_from_url
from tenderdesk.app.modules.documents.schemas import DocumentKind
from tenderdesk.app.modules.documents.viewer import build_document_view, classify_mime


class FakeStorage:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requested = []

    def upload(self, key, data, content_type):
        raise NotImplementedError

    def public_url(self, key):
        self.requested.append(key)
        if self.fail:
            raise StorageError(f"Object not found: {key}")
        return f"https://files.example.com/tender_documents/{key}"

    def delete(self, key):
        raise NotImplementedError


def document(file_type, storage_key="abc-Angebot.xlsx", file_url="https://old.example.com/tender_documents/abc-Angebot.xlsx"):
    return SimpleNamespace(id=7, name="Angebot", file_type=file_type, storage_key=storage_key, file_url=file_url)


@pytest.mark.parametrize(
    "mime, kind",
    [
        ("application/pdf", DocumentKind.PDF),
        ("image/png", DocumentKind.IMAGE),
        ("video/mp4", DocumentKind.VIDEO),
        ("audio/mpeg", DocumentKind.AUDIO),
        ("application/vnd.ms-excel", DocumentKind.SPREADSHEET),
        ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", DocumentKind.SPREADSHEET),
        ("application/vnd.oasis.opendocument.spreadsheet", DocumentKind.SPREADSHEET),
        ("text/csv", DocumentKind.SPREADSHEET),
        ("application/x-excel", DocumentKind.SPREADSHEET),
        ("application/msword", DocumentKind.OTHER),
        ("", DocumentKind.OTHER),
    ],
)
def test_classify_mime(mime, kind):
    assert classify_mime(mime) is kind


def test_spreadsheet_gets_external_viewers_not_inline_preview():
    storage = FakeStorage()
    view = build_document_view(
        document("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"), storage
    )

    url = "https://files.example.com/tender_documents/abc-Angebot.xlsx"
    assert view.kind is DocumentKind.SPREADSHEET
    assert view.inline is False
    assert view.preview_url is None
    viewer_urls = [a.url for a in view.actions if a.kind == "external-viewer"]
    assert viewer_urls == [
        f"https://view.officeapps.live.com/op/view.aspx?src={quote(url, safe='')}",
        f"https://docs.google.com/viewer?url={quote(url, safe='')}",
    ]


def test_pdf_renders_inline():
    view = build_document_view(document("application/pdf"), FakeStorage())
    assert view.inline is True
    assert view.preview_url == view.download_url
    assert view.actions == []


def test_other_types_offer_download_only():
    view = build_document_view(document("application/zip"), FakeStorage())
    assert view.inline is False
    assert [a.kind for a in view.actions] == ["download"]


def test_key_falls_back_to_stored_url():
    storage = FakeStorage()
    build_document_view(document("application/pdf", storage_key=None), storage)
    assert storage.requested == ["abc-Angebot.xlsx"]


def test_lookup_failure_renders_fallback_without_retry():
    storage = FakeStorage(fail=True)
    doc = document("application/pdf")
    view = build_document_view(doc, storage)

    assert len(storage.requested) == 1
    assert view.error
    assert view.inline is False
    assert view.download_url == doc.file_url


def test_object_keys_are_unique_and_sanitized():
    first = build_object_key("Leistungsverzeichnis (final) v2.xlsx")
    second = build_object_key("Leistungsverzeichnis (final) v2.xlsx")
    assert first != second
    assert first.endswith("-Leistungsverzeichnis_final_v2.xlsx")
    assert key_from_url(f"http://localhost:8000/files/tender_documents/{quote(first)}") == first
