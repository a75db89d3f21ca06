"""Tender listings and management; the public feedback channel."""

from __future__ import annotations


def _create(client, staff, **body):
    resp = client.post("/api/v1/admin/tenders", json=body, headers=staff["manager"])
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_public_listing_shows_active_tenders_only(client, staff):
    live = _create(client, staff, title="Bridge repair", has_form=True)
    hidden = _create(client, staff, title="Archived", is_active=False)
    resp = client.get("/api/v1/tenders")
    assert resp.status_code == 200
    ids = [t["tender_id"] for t in resp.json()["items"]]
    assert live["tender_id"] in ids
    assert hidden["tender_id"] not in ids


def test_admin_listing_can_filter_form_bearing_tenders(client, staff):
    with_form = _create(client, staff, title="With form", has_form=True)
    _create(client, staff, title="Notice only")
    everything = client.get("/api/v1/admin/tenders", headers=staff["manager"]).json()["items"]
    assert len(everything) == 2
    picker = client.get("/api/v1/admin/tenders", params={"with_form": "true"}, headers=staff["manager"]).json()["items"]
    assert [t["tender_id"] for t in picker] == [with_form["tender_id"]]


def test_toggle_active_and_edit(client, staff):
    tender = _create(client, staff, title="Parks", content="Details")
    resp = client.patch(
        f"/api/v1/admin/tenders/{tender['tender_id']}",
        json={"is_active": False, "title": "Parks and gardens"},
        headers=staff["manager"],
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_active"] is False
    assert body["title"] == "Parks and gardens"
    assert body["content"] == "Details"
    assert client.get("/api/v1/tenders").json()["items"] == []


def test_blank_title_is_rejected(client, staff):
    resp = client.post("/api/v1/admin/tenders", json={"title": "   "}, headers=staff["manager"])
    assert resp.status_code == 422
    assert resp.json()["code"] == "VALIDATION_FAILED"


def test_missing_tender_mutations_are_not_found(client, staff):
    assert client.patch("/api/v1/admin/tenders/nope", json={"title": "x"}, headers=staff["manager"]).status_code == 404
    assert client.delete("/api/v1/admin/tenders/nope", headers=staff["manager"]).status_code == 404


def test_deleting_tender_keeps_its_questions(client, staff):
    tender = _create(client, staff, title="Lighting", has_form=True)
    client.post(
        f"/api/v1/admin/tenders/{tender['tender_id']}/questions",
        json={"text": "Budget", "type": "short_text"},
        headers=staff["manager"],
    )
    client.delete(f"/api/v1/admin/tenders/{tender['tender_id']}", headers=staff["manager"])
    items = client.get(f"/api/v1/admin/tenders/{tender['tender_id']}/questions", headers=staff["manager"]).json()["items"]
    assert [q["text"] for q in items] == ["Budget"]


def test_feedback_is_public_and_starts_new(client):
    resp = client.post(
        "/api/v1/feedback",
        json={
            "name": "Ana",
            "email": "ana@example.org",
            "subject": "Opening hours",
            "message": "When is the reception open?",
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "new"
    assert body["message_type"] == "question"
    assert body["submitter_id"] is None


def test_feedback_rejects_malformed_email(client):
    resp = client.post(
        "/api/v1/feedback",
        json={"name": "Ana", "email": "not-an-email", "subject": "s", "message": "m"},
    )
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")


def test_any_role_holder_works_the_feedback_inbox(client, staff):
    created = client.post(
        "/api/v1/feedback",
        json={
            "name": "Ivo",
            "email": "ivo@example.org",
            "subject": "Complaint",
            "message": "The form was down",
            "message_type": "complaint",
        },
        headers=staff["visitor"],
    ).json()
    assert client.get("/api/v1/admin/feedback", headers=staff["visitor"]).status_code == 403

    listing = client.get("/api/v1/admin/feedback", headers=staff["legal"]).json()["items"]
    assert [f["feedback_id"] for f in listing] == [created["feedback_id"]]

    resp = client.patch(
        f"/api/v1/admin/feedback/{created['feedback_id']}",
        json={"status": "resolved", "admin_response": "Fixed, thanks."},
        headers=staff["legal"],
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "resolved"
    assert resp.json()["admin_response"] == "Fixed, thanks."

    # Unspecified fields keep their value
    again = client.patch(
        f"/api/v1/admin/feedback/{created['feedback_id']}",
        json={"status": "closed"},
        headers=staff["manager"],
    ).json()
    assert again["admin_response"] == "Fixed, thanks."

    cleared = client.patch(
        f"/api/v1/admin/feedback/{created['feedback_id']}",
        json={"admin_response": None},
        headers=staff["legal"],
    ).json()
    assert cleared["admin_response"] is None
    assert cleared["status"] == "closed"


def test_feedback_update_of_missing_item_is_not_found(client, staff):
    resp = client.patch("/api/v1/admin/feedback/none", json={"status": "closed"}, headers=staff["admin"])
    assert resp.status_code == 404


def test_health_reports_database(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "db": True}
    assert "x-request-id" in resp.headers
