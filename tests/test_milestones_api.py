from __future__ import annotations


def milestones_of(client, headers, tender_id):
    response = client.get(f"/api/tenders/{tender_id}/milestones", headers=headers)
    assert response.status_code == 200
    return response.json()


def set_status(client, headers, milestone_id, status):
    return client.post(f"/api/milestones/{milestone_id}/status", json={"status": status}, headers=headers)


def test_invalid_transition_is_rejected_without_writing(client, auth_headers, tender):
    first = milestones_of(client, auth_headers, tender["id"])[0]

    response = set_status(client, auth_headers, first["id"], "completed")
    assert response.status_code == 409

    after = milestones_of(client, auth_headers, tender["id"])[0]
    assert after["status"] == "pending"
    assert after["updated_at"] == first["updated_at"]


def test_completing_stamps_and_reopening_clears_completion_date(client, auth_headers, tender):
    milestone_id = milestones_of(client, auth_headers, tender["id"])[0]["id"]

    assert set_status(client, auth_headers, milestone_id, "in-progress").status_code == 200
    completed = set_status(client, auth_headers, milestone_id, "completed").json()
    assert completed["status"] == "completed"
    assert completed["completion_date"] is not None

    assert set_status(client, auth_headers, milestone_id, "skipped").status_code == 409
    reopened = set_status(client, auth_headers, milestone_id, "pending").json()
    assert reopened["completion_date"] is None

    feed = client.get("/api/activity", params={"tender_id": tender["id"]}, headers=auth_headers).json()["items"]
    assert any(e["action"] == "milestone_complete" and e["milestone_id"] == milestone_id for e in feed)


def test_skip_only_from_pending(client, auth_headers, tender):
    first, second = milestones_of(client, auth_headers, tender["id"])[:2]
    assert set_status(client, auth_headers, first["id"], "skipped").status_code == 200

    set_status(client, auth_headers, second["id"], "in-progress")
    assert set_status(client, auth_headers, second["id"], "skipped").status_code == 409


def test_progress_follows_completed_milestones(client, auth_headers):
    tender = client.post(
        "/api/tenders",
        json={
            "title": "Winterdienst",
            "milestones": [{"title": t, "sequence_number": i} for i, t in enumerate("ABCD", start=1)],
        },
        headers=auth_headers,
    ).json()
    for milestone in tender["milestones"][:2]:
        set_status(client, auth_headers, milestone["id"], "in-progress")
        set_status(client, auth_headers, milestone["id"], "completed")

    body = client.get(f"/api/tenders/{tender['id']}", headers=auth_headers).json()
    assert body["progress"] == 50


def test_patch_updates_fields_and_checks_status(client, auth_headers, tender):
    milestone_id = milestones_of(client, auth_headers, tender["id"])[2]["id"]

    response = client.patch(
        f"/api/milestones/{milestone_id}",
        json={"notes": "Termin mit Hausmeister", "assignees": ["Anna", "Ben"], "due_date": "2030-02-01T00:00:00Z"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["notes"] == "Termin mit Hausmeister"
    assert body["assignees"] == ["Anna", "Ben"]

    response = client.patch(f"/api/milestones/{milestone_id}", json={"status": "completed", "notes": "x"}, headers=auth_headers)
    assert response.status_code == 409
    assert milestones_of(client, auth_headers, tender["id"])[2]["notes"] == "Termin mit Hausmeister"


def test_create_and_delete_milestone(client, auth_headers, tender):
    response = client.post(
        f"/api/tenders/{tender['id']}/milestones",
        json={"title": "Nachverhandlung"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    created = response.json()
    assert created["sequence_number"] == 9

    listed = milestones_of(client, auth_headers, tender["id"])
    assert listed[-1]["id"] == created["id"]

    assert client.delete(f"/api/milestones/{created['id']}", headers=auth_headers).status_code == 204
    assert len(milestones_of(client, auth_headers, tender["id"])) == 8


def test_consistency_report(client, auth_headers, tender):
    response = client.get(f"/api/tenders/{tender['id']}/milestones/consistency", headers=auth_headers)
    assert response.json() == {
        "missing_title": False,
        "missing_sequence": False,
        "missing_status": False,
        "is_consistent": True,
    }


def test_checklist_comes_from_template_with_same_title(client, auth_headers, tender):
    milestone_id = milestones_of(client, auth_headers, tender["id"])[0]["id"]
    assert client.get(f"/api/milestones/{milestone_id}/template", headers=auth_headers).status_code == 404

    response = client.post(
        "/api/milestone-templates",
        json={"title": "Quick Check", "checklist_items": ["Unterlagen lesen", " ", "Go/No-Go entscheiden"]},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["checklist_items"] == ["Unterlagen lesen", "Go/No-Go entscheiden"]

    checklist = client.get(f"/api/milestones/{milestone_id}/template", headers=auth_headers).json()
    assert [i["completed"] for i in checklist["items"]] == [False, False]

    response = client.post(
        f"/api/milestones/{milestone_id}/checklist/1",
        json={"completed": True},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["checklist"] == [False, True]

    checklist = client.get(f"/api/milestones/{milestone_id}/template", headers=auth_headers).json()
    assert checklist["completed_count"] == 1
    assert client.post(f"/api/milestones/{milestone_id}/checklist/5", json={}, headers=auth_headers).status_code == 404


def test_milestones_of_other_users_are_hidden(client, auth_headers, other_headers, tender):
    milestone_id = milestones_of(client, auth_headers, tender["id"])[0]["id"]
    assert set_status(client, other_headers, milestone_id, "in-progress").status_code == 404


def test_template_title_match_ignores_non_ascii_case(client, auth_headers, tender):
    milestone = next(m for m in milestones_of(client, auth_headers, tender["id"]) if m["title"] == "Dokumente prüfen")
    response = client.post(
        "/api/milestone-templates",
        json={"title": "DOKUMENTE PRÜFEN", "checklist_items": ["Eignungsnachweise"]},
        headers=auth_headers,
    )
    assert response.status_code == 201

    checklist = client.get(f"/api/milestones/{milestone['id']}/template", headers=auth_headers).json()
    assert checklist["template_id"] == response.json()["id"]
    assert [i["text"] for i in checklist["items"]] == ["Eignungsnachweise"]

    duplicate = client.post("/api/milestone-templates", json={"title": "Dokumente prüfen"}, headers=auth_headers)
    assert duplicate.status_code == 409
