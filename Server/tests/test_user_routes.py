"""
Tests for the user management endpoints in OrgAdmin Server

Exercises the HTTP surface end to end: login, save, fetch, page,
delete, lock/unlock, error envelopes and cache invalidation.
"""

from unittest.mock import MagicMock

import pytest

from models.api import UserForm, PageRequest
from models.database import Org


def CreateUser(client, headers, body, confirm=None):
    params = {"confirmPassword": confirm} if confirm is not None else {}
    return client.post("/sys/user/", json=body, params=params, headers=headers)


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_then_duplicate_login(client, admin_headers):
    first = CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"}, "secret1")

    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert "alice" in body["message"]
    assert body["data"]["loginId"] == "alice"

    second = CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"}, "secret1")

    assert second.status_code == 400
    assert second.json()["success"] is False
    assert "already exists" in second.json()["message"]


def test_password_mismatch_writes_nothing(client, admin_headers, user_service):
    response = CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"}, "secret2")

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert not user_service.CheckByProperty("login_id", "alice")


def test_missing_confirmation_is_a_mismatch(client, admin_headers, user_service):
    response = CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"})

    assert response.status_code == 400
    assert not user_service.CheckByProperty("login_id", "alice")


def test_duplicate_email(client, admin_headers):
    CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1", "email": "a@example.com"}, "secret1")

    response = CreateUser(
        client, admin_headers, {"loginId": "bob", "password": "secret1", "email": "A@example.com"}, "secret1"
    )

    assert response.status_code == 400
    assert "Email" in response.json()["message"]


def test_short_password_rejected(client, admin_headers):
    response = CreateUser(client, admin_headers, {"loginId": "alice", "password": "abc"}, "abc")

    assert response.status_code == 422


def test_update_keeps_own_login_and_password(client, admin_headers, user_service):
    created = CreateUser(
        client, admin_headers, {"loginId": "alice", "password": "secret1", "email": "a@example.com"}, "secret1"
    ).json()
    user_id = created["data"]["id"]
    original_hash = user_service.FindOneById(user_id).password_hash

    response = CreateUser(
        client, admin_headers, {"id": user_id, "loginId": "alice", "email": "a@example.com", "name": "Alice"}
    )

    assert response.status_code == 200
    stored = user_service.FindOneById(user_id)
    assert stored.name == "Alice"
    assert stored.password_hash == original_hash


def test_update_unknown_id(client, admin_headers):
    response = CreateUser(client, admin_headers, {"id": "missing", "loginId": "ghost"})

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_get_user(client, admin_headers):
    created = CreateUser(
        client, admin_headers,
        {"loginId": "alice", "password": "secret1", "orgId": "root", "roleIdList": ["staff"]}, "secret1"
    ).json()

    response = client.get(f"/sys/user/{created['data']['id']}", headers=admin_headers)

    assert response.status_code == 200
    user = response.json()["data"]
    assert user["loginId"] == "alice"
    assert user["roleNames"] == "Staff"
    assert user["orgName"] == "Headquarters"
    assert "password" not in user
    assert "passwordHash" not in user


def test_get_unknown_user(client, admin_headers):
    response = client.get("/sys/user/nobody", headers=admin_headers)

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User with ID nobody not found", "data": None}


def test_page(client, admin_headers):
    for login_id in ("alice", "bob", "carol"):
        CreateUser(client, admin_headers, {"loginId": login_id, "password": "secret1"}, "secret1")

    response = client.get(
        "/sys/user/page",
        params={"page": 1, "size": 2, "sortName": "loginId", "sortOrder": "asc"},
        headers=admin_headers
    )

    assert response.status_code == 200
    page = response.json()["data"]
    assert page["total"] == 4
    assert page["size"] == 2
    assert len(page["items"]) == 2
    assert [item["loginId"] for item in page["items"]] == ["admin", "alice"]


def test_page_sorted_and_filtered(client, admin_headers):
    for login_id in ("alice", "bob", "carol"):
        CreateUser(client, admin_headers, {"loginId": login_id, "password": "secret1"}, "secret1")

    response = client.get(
        "/sys/user/page",
        params={"sortName": "login_id", "sortOrder": "asc", "loginId": "o"},
        headers=admin_headers
    )

    items = response.json()["data"]["items"]
    assert [item["loginId"] for item in items] == ["bob", "carol"]


def test_delete_with_unknown_ids(client, admin_headers):
    alice = CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"}, "secret1").json()
    bob = CreateUser(client, admin_headers, {"loginId": "bob", "password": "secret1"}, "secret1").json()
    alice_id = alice["data"]["id"]
    bob_id = bob["data"]["id"]

    response = client.delete(f"/sys/user/{alice_id},missing", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["data"]["removed"] == 1
    assert client.get(f"/sys/user/{alice_id}", headers=admin_headers).status_code == 404
    assert client.get(f"/sys/user/{bob_id}", headers=admin_headers).status_code == 200


def test_lock_then_unlock(client, admin_headers, user_service):
    created = CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"}, "secret1").json()
    user_id = created["data"]["id"]

    locked = client.post(f"/sys/user/lock/{user_id},missing", headers=admin_headers)
    assert locked.status_code == 200
    assert user_service.FindOneById(user_id).activated is False

    client.post(f"/sys/user/lock/{user_id}", headers=admin_headers)
    assert user_service.FindOneById(user_id).activated is True


def test_mutations_invalidate_caches(client, admin_headers, managers, monkeypatch):
    clear_all = MagicMock()
    monkeypatch.setattr(managers.cache, "ClearAll", clear_all)

    created = CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"}, "secret1").json()
    user_id = created["data"]["id"]
    client.post(f"/sys/user/lock/{user_id}", headers=admin_headers)
    client.delete(f"/sys/user/{user_id}", headers=admin_headers)

    assert clear_all.call_count == 3


def test_failed_save_does_not_invalidate(client, admin_headers, managers, monkeypatch):
    clear_all = MagicMock()
    monkeypatch.setattr(managers.cache, "ClearAll", clear_all)

    CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"}, "mismatch")

    clear_all.assert_not_called()


def test_requires_authentication(client):
    response = client.get("/sys/user/page")

    assert response.status_code in (401, 403)


def test_invalid_token(client):
    response = client.get("/sys/user/page", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_staff_cannot_edit(client, login, user_service):
    user_service.Save(UserForm(login_id="clerk", password="secret1", role_id_list=["staff"]))
    headers = login("clerk", "secret1")

    assert client.get("/sys/user/page", headers=headers).status_code == 200
    response = CreateUser(client, headers, {"loginId": "bob", "password": "secret1"}, "secret1")
    assert response.status_code == 403


def test_staff_sees_only_self(client, login, user_service):
    user_service.Save(UserForm(login_id="clerk", password="secret1", role_id_list=["staff"]))
    user_service.Save(UserForm(login_id="other", password="secret1", role_id_list=["staff"]))
    headers = login("clerk", "secret1")

    items = client.get("/sys/user/page", headers=headers).json()["data"]["items"]

    assert [item["loginId"] for item in items] == ["clerk"]


def test_locked_user_cannot_log_in_or_reuse_token(client, login, admin_headers, user_service):
    clerk = user_service.Save(UserForm(login_id="clerk", password="secret1", role_id_list=["staff"]))
    headers = login("clerk", "secret1")
    assert client.get("/sys/user/page", headers=headers).status_code == 200

    client.post(f"/sys/user/lock/{clerk.id}", headers=admin_headers)

    # Cache was invalidated, so the existing token sees the new flag
    assert client.get("/sys/user/page", headers=headers).status_code == 401
    response = client.post("/auth/login", json={"loginId": "clerk", "password": "secret1"})
    assert response.status_code == 401


def test_wrong_password_login(client):
    response = client.post("/auth/login", json={"loginId": "admin", "password": "wrong-password"})

    assert response.status_code == 401


def test_page_sorts_by_camel_case_column(client, admin_headers):
    for login_id in ("zed", "amy"):
        CreateUser(client, admin_headers, {"loginId": login_id, "password": "secret1"}, "secret1")

    response = client.get(
        "/sys/user/page", params={"sortName": "loginId", "sortOrder": "desc"}, headers=admin_headers
    )

    assert [item["loginId"] for item in response.json()["data"]["items"]] == ["zed", "amy", "admin"]


def test_update_without_role_list_keeps_roles(client, admin_headers, user_service):
    admin = user_service.FindPage(PageRequest(login_id="admin")).items[0]

    response = CreateUser(client, admin_headers, {"id": admin.id, "loginId": "admin", "name": "Root"})

    assert response.status_code == 200
    result = user_service.FindResultById(admin.id)
    assert result.name == "Root"
    assert result.role_id_list == ["admin"]
    # Still allowed to use the API afterwards
    assert client.get("/sys/user/page", headers=admin_headers).status_code == 200


def test_update_with_empty_role_list_clears_roles(client, admin_headers, user_service):
    created = CreateUser(
        client, admin_headers, {"loginId": "alice", "password": "secret1", "roleIdList": ["staff"]}, "secret1"
    ).json()
    user_id = created["data"]["id"]

    CreateUser(client, admin_headers, {"id": user_id, "loginId": "alice", "roleIdList": []})

    assert user_service.FindResultById(user_id).role_id_list == []


def test_multibyte_password_over_byte_limit_rejected(client, admin_headers, user_service):
    password = "日" * 24 + "aaaaaa"

    response = CreateUser(client, admin_headers, {"loginId": "alice", "password": password}, password)

    assert response.status_code == 422
    assert not user_service.CheckByProperty("login_id", "alice")


def test_whitespace_password_replaces_hash(client, admin_headers, user_service):
    created = CreateUser(client, admin_headers, {"loginId": "alice", "password": "secret1"}, "secret1").json()
    user_id = created["data"]["id"]
    original_hash = user_service.FindOneById(user_id).password_hash

    response = CreateUser(client, admin_headers, {"id": user_id, "loginId": "alice", "password": "      "}, "      ")

    assert response.status_code == 200
    assert user_service.FindOneById(user_id).password_hash != original_hash


@pytest.fixture
def eng_manager_headers(managers, login, user_service):
    session = managers.db.GetSession()
    try:
        session.add(Org(id="eng", name="Engineering", parent_id="root", parent_ids="root,"))
        session.commit()
    finally:
        session.close()

    user_service.Save(UserForm(login_id="boss", password="secret1", org_id="eng", role_id_list=["org_manager"]))
    return login("boss", "secret1")


def test_writes_outside_data_scope_are_refused(client, eng_manager_headers, admin_headers, user_service):
    admin = user_service.FindPage(PageRequest(login_id="admin")).items[0]
    dev = user_service.Save(UserForm(login_id="dev", password="secret1", org_id="eng"))

    update = CreateUser(client, eng_manager_headers, {"id": admin.id, "loginId": "admin", "password": "hijack1"}, "hijack1")
    assert update.status_code == 404

    locked = client.post(f"/sys/user/lock/{admin.id},{dev.id}", headers=eng_manager_headers)
    assert locked.json()["data"]["toggled"] == 1
    assert user_service.FindOneById(admin.id).activated is True
    assert user_service.FindOneById(dev.id).activated is False

    removed = client.delete(f"/sys/user/{admin.id}", headers=eng_manager_headers)
    assert removed.json()["data"]["removed"] == 0
    assert client.get("/sys/user/page", headers=admin_headers).status_code == 200
