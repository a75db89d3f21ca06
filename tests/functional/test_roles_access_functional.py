"""Role resolution, capability model and the API guards built on it."""

from __future__ import annotations

import itertools

import pytest
from sqlalchemy.exc import OperationalError

from portal.logic import repository_roles
from portal.logic.roles import ALL_ROLES, Capabilities, RoleResolution, capabilities_for, visible_panels

ADMIN_ID = "admin-0001"
MANAGER_ID = "manager-0001"
VISITOR_ID = "visitor-0001"


def _store_down(monkeypatch) -> None:
    def _raise(identity_id):
        raise OperationalError("SELECT role FROM role_assignment", {}, Exception("connection refused"))

    monkeypatch.setattr(repository_roles, "list_roles", _raise)


def _all_role_sets():
    roles = sorted(ALL_ROLES)
    for size in range(len(roles) + 1):
        for combo in itertools.combinations(roles, size):
            yield frozenset(combo)


def test_can_manage_tenders_iff_admin_or_tender_manager():
    for role_set in _all_role_sets():
        expected = "administrator" in role_set or "tender_manager" in role_set
        assert capabilities_for(role_set).can_manage_tenders is expected


def test_legal_and_admin_predicates():
    for role_set in _all_role_sets():
        caps = capabilities_for(role_set)
        assert caps.is_administrator is ("administrator" in role_set)
        assert caps.can_manage_legal_content is ("administrator" in role_set or "legal_manager" in role_set)


def test_empty_role_set_grants_nothing():
    caps = capabilities_for(())
    assert caps == Capabilities()
    assert not caps.has_console_access
    assert visible_panels(caps) == []


def test_panels_follow_capabilities():
    assert visible_panels(capabilities_for({"tender_manager"})) == [
        "statistics",
        "tenders",
        "tender_questions",
        "tender_responses",
        "enterprises",
        "feedback",
    ]
    legal = visible_panels(capabilities_for({"legal_manager"}))
    assert "laws" in legal and "tenders" not in legal and "users" not in legal
    admin = visible_panels(capabilities_for({"administrator"}))
    assert admin[-1] == "users"
    assert "tenders" in admin and "laws" in admin


def test_resolve_roles_without_identity_is_empty():
    resolution = repository_roles.resolve_roles(None)
    assert resolution.roles == frozenset()
    assert resolution.available is True


def test_resolve_roles_fails_closed(monkeypatch, grant):
    grant(ADMIN_ID, "administrator")
    _store_down(monkeypatch)
    resolution = repository_roles.resolve_roles(ADMIN_ID)
    assert resolution == RoleResolution.of(ADMIN_ID, (), available=False)
    assert not resolution.capabilities.has_console_access


def test_assign_role_rejects_duplicates_and_unknown_labels(grant):
    grant(MANAGER_ID, "tender_manager")
    with pytest.raises(repository_roles.DuplicateRoleAssignment):
        repository_roles.assign_role(MANAGER_ID, "tender_manager")
    with pytest.raises(repository_roles.UnknownRole):
        repository_roles.assign_role(MANAGER_ID, "superuser")
    assert repository_roles.list_roles(MANAGER_ID) == frozenset({"tender_manager"})


def test_me_capabilities_for_anonymous_caller(client):
    resp = client.get("/api/v1/me/capabilities")
    assert resp.status_code == 200
    body = resp.json()
    assert body["roles"] == []
    assert body["panels"] == []
    assert body["capabilities"]["can_manage_tenders"] is False


def test_me_capabilities_for_manager(client, staff):
    body = client.get("/api/v1/me/capabilities", headers=staff["manager"]).json()
    assert body["identity_id"] == MANAGER_ID
    assert body["roles"] == ["tender_manager"]
    assert body["capabilities"] == {
        "is_administrator": False,
        "can_manage_tenders": True,
        "can_manage_legal_content": False,
    }


def test_me_capabilities_when_store_is_down(client, monkeypatch):
    _store_down(monkeypatch)
    resp = client.get("/api/v1/me/capabilities", headers={"X-Identity-Id": ADMIN_ID})
    assert resp.status_code == 200
    assert resp.json()["available"] is False
    assert resp.json()["roles"] == []


@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/api/v1/admin/tenders"),
        ("GET", "/api/v1/admin/tenders/t-1/questions"),
        ("GET", "/api/v1/admin/tenders/t-1/responses"),
        ("DELETE", "/api/v1/admin/questions/q-1"),
        ("GET", "/api/v1/admin/roles"),
    ],
)
def test_caller_without_roles_is_denied(client, staff, method, path):
    resp = client.request(method, path, headers=staff["visitor"])
    assert resp.status_code == 403
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["code"] == "ACCESS_DENIED"


def test_legal_manager_cannot_manage_tenders(client, staff):
    resp = client.post("/api/v1/admin/tenders", json={"title": "T"}, headers=staff["legal"])
    assert resp.status_code == 403


def test_tender_manager_cannot_manage_roles(client, staff):
    resp = client.post(
        "/api/v1/admin/roles",
        json={"identity_id": VISITOR_ID, "role": "tender_manager"},
        headers=staff["manager"],
    )
    assert resp.status_code == 403


def test_unresolvable_roles_answer_access_unavailable(client, staff, monkeypatch):
    _store_down(monkeypatch)
    resp = client.get("/api/v1/admin/tenders", headers=staff["admin"])
    assert resp.status_code == 503
    assert resp.json()["code"] == "ACCESS_UNAVAILABLE"


def test_administrator_manages_role_assignments(client, staff):
    created = client.post(
        "/api/v1/admin/roles",
        json={"identity_id": VISITOR_ID, "role": "tender_manager"},
        headers=staff["admin"],
    )
    assert created.status_code == 201
    assert created.json() == {"identity_id": VISITOR_ID, "role": "tender_manager"}

    duplicate = client.post(
        "/api/v1/admin/roles",
        json={"identity_id": VISITOR_ID, "role": "tender_manager"},
        headers=staff["admin"],
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "CONFLICT"

    listing = client.get("/api/v1/admin/roles", headers=staff["admin"]).json()["items"]
    assert {"identity_id": VISITOR_ID, "roles": ["tender_manager"]} in listing

    # The new role takes effect on the next request
    assert client.get("/api/v1/admin/tenders", headers=staff["visitor"]).status_code == 200

    removed = client.delete(f"/api/v1/admin/roles/{VISITOR_ID}/tender_manager", headers=staff["admin"])
    assert removed.status_code == 204
    missing = client.delete(f"/api/v1/admin/roles/{VISITOR_ID}/tender_manager", headers=staff["admin"])
    assert missing.status_code == 404


def test_unknown_role_label_is_rejected(client, staff):
    resp = client.post(
        "/api/v1/admin/roles",
        json={"identity_id": VISITOR_ID, "role": "owner"},
        headers=staff["admin"],
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "VALIDATION_FAILED"


def test_assign_role_rejects_blank_identity():
    with pytest.raises(repository_roles.InvalidRoleAssignment):
        repository_roles.assign_role("   ", "administrator")
    assert repository_roles.list_assignments() == []


def test_blank_identity_cannot_be_granted_a_role(client, staff):
    resp = client.post(
        "/api/v1/admin/roles",
        json={"identity_id": "   ", "role": "administrator"},
        headers=staff["admin"],
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "VALIDATION_FAILED"
    listing = client.get("/api/v1/admin/roles", headers=staff["admin"]).json()["items"]
    assert all(item["identity_id"].strip() for item in listing)
