from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.exc import SQLAlchemyError

from tenderdesk.app.common.errors import StorageError
from tenderdesk.app.common.storage import get_storage_client
from tenderdesk.app.core import dependencies
from tenderdesk.app.core.config import settings
from tenderdesk.app.modules.documents import service as documents_service

PDF = ("angebot.pdf", b"%PDF-1.4 test", "application/pdf")
XLSX = ("preisblatt.xlsx", b"PK\x03\x04 sheet", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")


def upload(client, headers, tender_id, *files, **form):
    response = client.post(
        f"/api/tenders/{tender_id}/documents",
        files=[("files", f) for f in files],
        data={k: str(v) for k, v in form.items()},
        headers=headers,
    )
    return response


def stored_path(document) -> Path:
    key = document["file_url"].rsplit("/", 1)[-1]
    return Path(settings.storage_dir) / settings.storage_bucket / key


def test_upload_multiple_files_and_list(client, auth_headers, tender):
    response = upload(client, auth_headers, tender["id"], PDF, XLSX)
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["failed"] == []
    assert sorted(d["name"] for d in body["documents"]) == ["angebot.pdf", "preisblatt.xlsx"]

    pdf = next(d for d in body["documents"] if d["name"] == "angebot.pdf")
    assert pdf["current_version"] == 1
    assert pdf["file_size"] == len(PDF[1])
    assert stored_path(pdf).read_bytes() == PDF[1]

    listed = client.get(f"/api/tenders/{tender['id']}/documents", headers=auth_headers).json()
    assert len(listed) == 2

    feed = client.get("/api/activity", params={"tender_id": tender["id"]}, headers=auth_headers).json()["items"]
    assert [e["action"] for e in feed].count("document_upload") == 2


def test_upload_continues_past_a_failing_file(client, auth_headers, tender):
    real = get_storage_client()

    class FlakyStorage:
        def upload(self, key, data, content_type):
            if "kaputt" in key:
                raise StorageError(f"Could not store {key}")
            real.upload(key, data, content_type)

        def public_url(self, key):
            return real.public_url(key)

        def delete(self, key):
            real.delete(key)

    client.app.dependency_overrides[dependencies.get_storage] = FlakyStorage
    try:
        response = upload(client, auth_headers, tender["id"], ("kaputt.pdf", b"x", "application/pdf"), PDF)
    finally:
        client.app.dependency_overrides.clear()

    assert response.status_code == 201
    body = response.json()
    assert [d["name"] for d in body["documents"]] == ["angebot.pdf"]
    assert [f["file_name"] for f in body["failed"]] == ["kaputt.pdf"]


def test_failed_upload_leaves_no_stored_file(client, auth_headers, tender):
    real = get_storage_client()
    stored = []

    class NoUrlStorage:
        def upload(self, key, data, content_type):
            stored.append(key)
            real.upload(key, data, content_type)

        def public_url(self, key):
            raise StorageError(f"No public URL for {key}")

        def delete(self, key):
            real.delete(key)

    client.app.dependency_overrides[dependencies.get_storage] = NoUrlStorage
    try:
        response = upload(client, auth_headers, tender["id"], PDF)
    finally:
        client.app.dependency_overrides.clear()

    assert response.status_code == 502
    assert len(stored) == 1
    assert not (Path(settings.storage_dir) / settings.storage_bucket / stored[0]).exists()
    assert client.get(f"/api/tenders/{tender['id']}/documents", headers=auth_headers).json() == []


def test_upload_removes_file_when_saving_the_row_fails(client, auth_headers, tender, monkeypatch):
    def broken_activity(*args, **kwargs):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(documents_service, "record_activity", broken_activity)
    bucket = Path(settings.storage_dir) / settings.storage_bucket
    before = set(bucket.iterdir()) if bucket.exists() else set()

    with pytest.raises(SQLAlchemyError):
        upload(client, auth_headers, tender["id"], PDF)

    assert set(bucket.iterdir()) == before


def test_upload_into_milestone_and_folder(client, auth_headers, tender):
    milestone_id = tender["milestones"][3]["id"]
    folder = client.post(f"/api/tenders/{tender['id']}/folders", json={"name": "Kalkulation"}, headers=auth_headers).json()

    response = upload(client, auth_headers, tender["id"], XLSX, milestone_id=milestone_id, folder_id=folder["id"])
    assert response.status_code == 201

    by_milestone = client.get(f"/api/milestones/{milestone_id}/documents", headers=auth_headers).json()
    by_folder = client.get(f"/api/folders/{folder['id']}/documents", headers=auth_headers).json()
    assert [d["name"] for d in by_milestone] == ["preisblatt.xlsx"]
    assert [d["name"] for d in by_folder] == ["preisblatt.xlsx"]

    response = upload(client, auth_headers, tender["id"], PDF, milestone_id=999999)
    assert response.status_code == 404


def test_view_routes_by_mime_type(client, auth_headers, tender):
    documents = upload(client, auth_headers, tender["id"], PDF, XLSX).json()["documents"]
    pdf = next(d for d in documents if d["name"] == "angebot.pdf")
    sheet = next(d for d in documents if d["name"] == "preisblatt.xlsx")

    pdf_view = client.get(f"/api/documents/{pdf['id']}/view", headers=auth_headers).json()
    assert pdf_view["kind"] == "pdf"
    assert pdf_view["inline"] is True
    served = client.get(pdf_view["preview_url"].replace("http://testserver", ""))
    assert served.status_code == 200
    assert served.content == PDF[1]

    sheet_view = client.get(f"/api/documents/{sheet['id']}/view", headers=auth_headers).json()
    assert sheet_view["kind"] == "spreadsheet"
    assert sheet_view["inline"] is False
    assert sheet_view["preview_url"] is None
    assert [a["kind"] for a in sheet_view["actions"]][:2] == ["external-viewer", "external-viewer"]


def test_view_falls_back_when_file_is_missing(client, auth_headers, tender):
    pdf = upload(client, auth_headers, tender["id"], PDF).json()["documents"][0]
    stored_path(pdf).unlink()

    view = client.get(f"/api/documents/{pdf['id']}/view", headers=auth_headers).json()
    assert view["error"]
    assert view["download_url"] == pdf["file_url"]


def test_versions_add_get_and_restore(client, auth_headers, tender):
    pdf = upload(client, auth_headers, tender["id"], PDF).json()["documents"][0]

    response = client.post(
        f"/api/documents/{pdf['id']}/versions",
        files={"file": ("angebot-v2.pdf", b"%PDF-1.4 v2", "application/pdf")},
        data={"changes_description": "Preise angepasst"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["version_number"] == 2

    versions = client.get(f"/api/documents/{pdf['id']}/versions", headers=auth_headers).json()
    assert [v["version_number"] for v in versions] == [2, 1]

    document = client.get(f"/api/documents/{pdf['id']}", headers=auth_headers).json()
    assert document["current_version"] == 2
    assert document["file_url"] == versions[0]["file_url"]

    first = client.get(f"/api/documents/{pdf['id']}/versions/1", headers=auth_headers).json()
    restored = client.post(f"/api/documents/{pdf['id']}/versions/1/restore", headers=auth_headers).json()
    assert restored["file_url"] == first["file_url"]
    assert restored["current_version"] == 2

    assert client.get(f"/api/documents/{pdf['id']}/versions/7", headers=auth_headers).status_code == 404


def test_comments_are_author_only(client, auth_headers, other_headers, tender):
    pdf = upload(client, auth_headers, tender["id"], PDF).json()["documents"][0]
    url = f"/api/documents/{pdf['id']}/comments"

    first = client.post(url, json={"comment": "Bitte Seite 3 prüfen"}, headers=auth_headers).json()
    client.post(url, json={"comment": "Erledigt"}, headers=auth_headers)
    comments = client.get(url, headers=auth_headers).json()
    assert [c["comment"] for c in comments] == ["Bitte Seite 3 prüfen", "Erledigt"]
    assert comments[0]["user_name"] == "Anna Berger"

    assert client.patch(f"/api/comments/{first['id']}", json={"comment": "x"}, headers=other_headers).status_code == 403
    assert client.delete(f"/api/comments/{first['id']}", headers=other_headers).status_code == 403

    edited = client.patch(f"/api/comments/{first['id']}", json={"comment": "Seite 4"}, headers=auth_headers)
    assert edited.json()["comment"] == "Seite 4"
    assert client.delete(f"/api/comments/{first['id']}", headers=auth_headers).status_code == 204
    assert len(client.get(url, headers=auth_headers).json()) == 1


def test_approval_status_follows_approvals(client, auth_headers, other_headers, tender):
    pdf = upload(client, auth_headers, tender["id"], PDF).json()["documents"][0]
    document_url = f"/api/documents/{pdf['id']}"
    assert pdf["approval_status"] is None

    approval = client.post(f"{document_url}/approvals", json={"comment": "Bitte freigeben"}, headers=auth_headers).json()
    assert approval["status"] == "pending"
    assert client.get(document_url, headers=auth_headers).json()["approval_status"] == "pending"

    again = client.post(f"{document_url}/approvals", json={}, headers=auth_headers).json()
    assert again["id"] == approval["id"]

    response = client.patch(f"/api/approvals/{approval['id']}", json={"status": "approved"}, headers=other_headers)
    assert response.status_code == 403

    client.patch(f"/api/approvals/{approval['id']}", json={"status": "approved"}, headers=auth_headers)
    assert client.get(document_url, headers=auth_headers).json()["approval_status"] == "approved"

    client.patch(f"/api/approvals/{approval['id']}", json={"status": "rejected"}, headers=auth_headers)
    assert client.get(document_url, headers=auth_headers).json()["approval_status"] == "rejected"

    assert client.delete(f"/api/approvals/{approval['id']}", headers=auth_headers).status_code == 204
    assert client.get(document_url, headers=auth_headers).json()["approval_status"] is None


def test_folder_tree_and_non_empty_delete(client, auth_headers, tender):
    url = f"/api/tenders/{tender['id']}/folders"
    parent = client.post(url, json={"name": "Angebot", "folder_order": 2}, headers=auth_headers).json()
    client.post(url, json={"name": "Allgemein", "folder_order": 1}, headers=auth_headers)
    child = client.post(url, json={"name": "Preise", "parent_id": parent["id"]}, headers=auth_headers).json()
    assert child["folder_path"] == "Angebot/Preise"

    tree = client.get(url, headers=auth_headers).json()
    assert [f["name"] for f in tree] == ["Allgemein", "Angebot"]
    assert [c["name"] for c in tree[1]["children"]] == ["Preise"]

    renamed = client.patch(f"/api/folders/{parent['id']}", json={"name": "Bieterunterlagen"}, headers=auth_headers).json()
    assert renamed["folder_path"] == "Bieterunterlagen"
    tree = client.get(url, headers=auth_headers).json()
    assert tree[1]["children"][0]["folder_path"] == "Bieterunterlagen/Preise"

    document = upload(client, auth_headers, tender["id"], PDF, folder_id=child["id"]).json()["documents"][0]
    assert client.delete(f"/api/folders/{parent['id']}", headers=auth_headers).status_code == 409

    client.delete(f"/api/documents/{document['id']}", headers=auth_headers)
    assert client.delete(f"/api/folders/{parent['id']}", headers=auth_headers).status_code == 204
    assert [f["name"] for f in client.get(url, headers=auth_headers).json()] == ["Allgemein"]


def test_same_named_sibling_folders_stay_independent(client, auth_headers, tender):
    url = f"/api/tenders/{tender['id']}/folders"
    first = client.post(url, json={"name": "Angebot"}, headers=auth_headers).json()
    second = client.post(url, json={"name": "Angebot"}, headers=auth_headers).json()
    child = client.post(url, json={"name": "Preise", "parent_id": second["id"]}, headers=auth_headers).json()
    upload(client, auth_headers, tender["id"], PDF, folder_id=child["id"])

    response = client.patch(f"/api/folders/{first['id']}", json={"name": "Alt"}, headers=auth_headers)
    assert response.status_code == 200
    tree = {node["id"]: node for node in client.get(url, headers=auth_headers).json()}
    assert tree[first["id"]]["children"] == []
    assert tree[second["id"]]["children"][0]["folder_path"] == "Angebot/Preise"

    client.patch(f"/api/folders/{first['id']}", json={"name": "Angebot"}, headers=auth_headers)
    assert client.delete(f"/api/folders/{first['id']}", headers=auth_headers).status_code == 204
    assert client.delete(f"/api/folders/{second['id']}", headers=auth_headers).status_code == 409


def test_rename_rewrites_only_its_own_subtree(client, auth_headers, tender):
    url = f"/api/tenders/{tender['id']}/folders"
    offer = client.post(url, json={"name": "Angebot", "folder_order": 1}, headers=auth_headers).json()
    general = client.post(url, json={"name": "Allgemein", "folder_order": 2}, headers=auth_headers).json()
    prices = client.post(url, json={"name": "Preise", "parent_id": offer["id"]}, headers=auth_headers).json()
    client.post(url, json={"name": "Los 1", "parent_id": prices["id"]}, headers=auth_headers)
    client.post(url, json={"name": "Preise", "parent_id": general["id"]}, headers=auth_headers)

    client.patch(f"/api/folders/{offer['id']}", json={"name": "Bieterunterlagen"}, headers=auth_headers)
    offer_node, general_node = client.get(url, headers=auth_headers).json()
    assert offer_node["children"][0]["folder_path"] == "Bieterunterlagen/Preise"
    assert offer_node["children"][0]["children"][0]["folder_path"] == "Bieterunterlagen/Preise/Los 1"
    assert general_node["children"][0]["folder_path"] == "Allgemein/Preise"

    client.patch(f"/api/folders/{prices['id']}", json={"name": "Kalkulation"}, headers=auth_headers)
    offer_node, general_node = client.get(url, headers=auth_headers).json()
    assert offer_node["children"][0]["children"][0]["folder_path"] == "Bieterunterlagen/Kalkulation/Los 1"
    assert general_node["children"][0]["folder_path"] == "Allgemein/Preise"


def test_delete_document_removes_file_and_logs(client, auth_headers, other_headers, tender):
    pdf = upload(client, auth_headers, tender["id"], PDF).json()["documents"][0]
    path = stored_path(pdf)
    assert path.exists()

    assert client.delete(f"/api/documents/{pdf['id']}", headers=other_headers).status_code == 404
    assert client.delete(f"/api/documents/{pdf['id']}", headers=auth_headers).status_code == 204
    assert not path.exists()
    assert client.get(f"/api/documents/{pdf['id']}", headers=auth_headers).status_code == 404

    feed = client.get("/api/activity", headers=auth_headers).json()["items"]
    assert feed[0]["action"] == "document_delete"
    assert feed[0]["document_name"] == "angebot.pdf"
