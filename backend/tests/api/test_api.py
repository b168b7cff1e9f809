# ==============================
# HTTP API Tests
# ==============================
from __future__ import annotations

from uuid import uuid4

import pytest
from starlette.websockets import WebSocketDisconnect

from linkbio.infrastructure.auth.oauth import OAuthIdentity

pytestmark = pytest.mark.api

API = "/api/v1"


def _register(client, email="john@example.com", username="John Doe", password="secret123") -> str:
    response = client.post(f"{API}/auth/register", json={
        "email": email, "password": password, "username": username,
    })
    assert response.status_code == 201, response.text
    return response.json()["access_token"]


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ── Health / sitemap ─────────────────────────────────────────────────────────

def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_sitemap_lists_profiles(client) -> None:
    _register(client)
    response = client.get("/sitemap.xml")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert "<loc>https://123l.ink/john-doe</loc>" in response.text
    assert "<loc>https://123l.ink/auth/setup-profile</loc>" in response.text


def test_sitemap_survives_store_failure(client, store) -> None:
    store.profiles.fail_list_all = True
    response = client.get("/sitemap.xml")
    assert response.status_code == 200
    assert "<loc>https://123l.ink</loc>" in response.text


# ── Usernames ────────────────────────────────────────────────────────────────

def test_username_check_valid(client) -> None:
    response = client.get(f"{API}/usernames/check", params={"username": "John Doe"})
    assert response.status_code == 200
    assert response.json() == {
        "sanitized": "john-doe",
        "is_valid": True,
        "errors": [],
        "preview": "123l.ink/john-doe",
        "available": True,
        "message": "Automatically converted to lowercase, spaces replaced with dashes",
    }


def test_username_check_reserved(client) -> None:
    body = client.get(f"{API}/usernames/check", params={"username": "admin"}).json()
    assert body["is_valid"] is False
    assert body["errors"] == ["This username is reserved and cannot be used"]
    assert body["available"] is None


def test_username_check_empty(client) -> None:
    body = client.get(f"{API}/usernames/check").json()
    assert body["sanitized"] == ""
    assert body["errors"] == ["Username must be at least 3 characters long"]


def test_username_check_taken(client) -> None:
    _register(client)
    body = client.get(f"{API}/usernames/check", params={"username": "john_doe"}).json()
    assert body["is_valid"] is True
    assert body["available"] is False


# ── Auth ─────────────────────────────────────────────────────────────────────

def test_register_and_me(client) -> None:
    token = _register(client)
    response = client.get(f"{API}/auth/me", headers=_auth(token))
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "john@example.com"
    assert body["username"] == "john-doe"
    assert body["is_admin"] is False


def test_register_errors(client) -> None:
    _register(client)
    reserved = client.post(f"{API}/auth/register", json={
        "email": "x@example.com", "password": "secret123", "username": "settings",
    })
    assert reserved.status_code == 400
    assert reserved.json()["detail"] == "This username is reserved and cannot be used"

    taken = client.post(f"{API}/auth/register", json={
        "email": "x@example.com", "password": "secret123", "username": "JOHN-DOE",
    })
    assert taken.status_code == 409

    short = client.post(f"{API}/auth/register", json={
        "email": "x@example.com", "password": "123", "username": "someone",
    })
    assert short.status_code == 422


def test_login_and_logout(client) -> None:
    _register(client)
    login = client.post(f"{API}/auth/login", json={"username_or_email": "john-doe", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["access_token"]
    assert login.json()["username"] == "john-doe"

    assert client.post(f"{API}/auth/logout", headers=_auth(token)).status_code == 204
    assert client.get(f"{API}/auth/me", headers=_auth(token)).status_code == 401


def test_login_wrong_password(client) -> None:
    _register(client)
    response = client.post(f"{API}/auth/login", json={"username_or_email": "john@example.com", "password": "nope"})
    assert response.status_code == 401


def test_me_requires_auth(client) -> None:
    assert client.get(f"{API}/auth/me").status_code == 401
    assert client.get(f"{API}/auth/me", headers=_auth("garbage")).status_code == 401


def test_oauth_callback_new_user_sets_cookie(client, exchanger) -> None:
    exchanger.identities["good"] = OAuthIdentity(email="new@example.com")
    response = client.get(
        f"{API}/auth/callback", params={"code": "good", "flow": "signup"}, follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "https://123l.ink/auth/setup-profile"
    assert "linkbio_session" in response.cookies

    me = client.get(f"{API}/auth/me")
    assert me.status_code == 200
    assert me.json()["username"] is None


def test_oauth_callback_existing_user_goes_to_profile(client, exchanger) -> None:
    _register(client)
    exchanger.identities["good"] = OAuthIdentity(email="john@example.com")
    response = client.get(f"{API}/auth/callback", params={"code": "good"}, follow_redirects=False)
    assert response.headers["location"] == "https://123l.ink/john-doe"


def test_oauth_callback_bad_code(client) -> None:
    response = client.get(f"{API}/auth/callback", params={"code": "bad"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "https://123l.ink/auth/auth-error"
    assert "linkbio_session" not in response.cookies


def test_oauth_callback_without_code(client) -> None:
    response = client.get(f"{API}/auth/callback", params={"next": "//evil.com"}, follow_redirects=False)
    assert response.headers["location"] == "https://123l.ink/"


# ── Profiles ─────────────────────────────────────────────────────────────────

def test_setup_profile_after_oauth(client, exchanger) -> None:
    exchanger.identities["good"] = OAuthIdentity(email="new@example.com")
    client.get(f"{API}/auth/callback", params={"code": "good"}, follow_redirects=False)

    created = client.post(f"{API}/profiles", json={"username": "New Person"})
    assert created.status_code == 201
    assert created.json()["username"] == "new-person"
    assert created.json()["display_name"] == "new-person"

    again = client.post(f"{API}/profiles", json={"username": "another"})
    assert again.status_code == 409


def test_public_profile_and_ownership(client) -> None:
    token = _register(client)
    client.post(f"{API}/links", json={"title": "Site", "url": "example.com"}, headers=_auth(token))

    anonymous = client.get(f"{API}/profiles/John-Doe")
    assert anonymous.status_code == 200
    assert anonymous.json()["is_owner"] is False
    assert anonymous.json()["links"][0]["url"] == "https://example.com"

    owner = client.get(f"{API}/profiles/john-doe", headers=_auth(token))
    assert owner.json()["is_owner"] is True

    assert client.get(f"{API}/profiles/nobody-here").status_code == 404


def test_update_profile(client) -> None:
    token = _register(client)
    response = client.patch(
        f"{API}/profiles/me", json={"bio": "Hello", "username": "Johnny"}, headers=_auth(token),
    )
    assert response.status_code == 200
    assert response.json()["bio"] == "Hello"
    assert response.json()["username"] == "johnny"

    invalid = client.patch(f"{API}/profiles/me", json={"username": "api"}, headers=_auth(token))
    assert invalid.status_code == 400

    other = _register(client, email="jane@example.com", username="jane")
    taken = client.patch(f"{API}/profiles/me", json={"username": "johnny"}, headers=_auth(other))
    assert taken.status_code == 409


def test_update_profile_rejects_null_username(client) -> None:
    token = _register(client)
    response = client.patch(f"{API}/profiles/me", json={"username": None}, headers=_auth(token))
    assert response.status_code == 422
    assert client.get(f"{API}/profiles/me", headers=_auth(token)).json()["username"] == "john-doe"


def test_profile_qr_code_download(client) -> None:
    _register(client)
    response = client.get(f"{API}/profiles/John-Doe/qr.png")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["content-disposition"] == 'attachment; filename="john-doe-qr-code.png"'
    assert response.content.startswith(b"\x89PNG\r\n\x1a\n")

    assert client.get(f"{API}/profiles/nobody-here/qr.png").status_code == 404
    assert client.get(f"{API}/profiles/john-doe/qr.png?scale=0").status_code == 422


def test_avatar_upload(client, store) -> None:
    token = _register(client)
    response = client.post(
        f"{API}/profiles/me/avatar",
        files={"file": ("me.png", b"\x89PNG\r\n", "image/png")},
        headers=_auth(token),
    )
    assert response.status_code == 200
    assert response.json()["avatar_url"] in store.storage.files

    rejected = client.post(
        f"{API}/profiles/me/avatar",
        files={"file": ("me.txt", b"hello", "text/plain")},
        headers=_auth(token),
    )
    assert rejected.status_code == 415


# ── Live editing ─────────────────────────────────────────────────────────────

def test_live_edit_saves_after_idle(client, store) -> None:
    token = _register(client)
    with client.websocket_connect(f"{API}/profiles/me/edit?token={token}") as ws:
        ws.send_json({"type": "change", "field": "name", "value": "John"})
        ws.send_json({"type": "change", "field": "bio", "value": "Typing..."})
        message = ws.receive_json()
    assert message["type"] == "saved"
    assert message["profile"]["display_name"] == "John"
    assert message["profile"]["bio"] == "Typing..."


def test_live_edit_blur_saves_immediately(client) -> None:
    token = _register(client)
    with client.websocket_connect(f"{API}/profiles/me/edit?token={token}") as ws:
        ws.send_json({"type": "change", "field": "bio", "value": "Now"})
        ws.send_json({"type": "blur"})
        message = ws.receive_json()
    assert message["type"] == "saved"
    assert message["profile"]["bio"] == "Now"


def test_live_edit_reports_bad_field(client) -> None:
    token = _register(client)
    with client.websocket_connect(f"{API}/profiles/me/edit?token={token}") as ws:
        ws.send_json({"type": "change", "field": "email", "value": "x"})
        message = ws.receive_json()
    assert message == {"type": "error", "detail": "Unknown profile field: email"}


def test_live_edit_enforces_profile_limits(client) -> None:
    token = _register(client)
    with client.websocket_connect(f"{API}/profiles/me/edit?token={token}") as ws:
        ws.send_json({"type": "change", "field": "bio", "value": "x" * 600})
        rejected = ws.receive_json()
        ws.send_json({"type": "change", "field": "bio", "value": "short"})
        ws.send_json({"type": "blur"})
        saved = ws.receive_json()
    assert rejected == {"type": "error", "detail": "bio: String should have at most 500 characters"}
    assert saved["type"] == "saved"
    assert saved["profile"]["bio"] == "short"


def test_live_edit_rejects_non_string_username_and_stays_open(client) -> None:
    token = _register(client)
    with client.websocket_connect(f"{API}/profiles/me/edit?token={token}") as ws:
        ws.send_json({"type": "change", "field": "username", "value": 123})
        rejected = ws.receive_json()
        ws.send_json({"type": "change", "field": "username", "value": None})
        rejected_null = ws.receive_json()
        ws.send_json({"type": "change", "field": "bio", "value": "still here"})
        ws.send_json({"type": "blur"})
        saved = ws.receive_json()
    assert rejected["type"] == "error"
    assert rejected["detail"].startswith("username: ")
    assert rejected_null["type"] == "error"
    assert saved["profile"]["username"] == "john-doe"
    assert saved["profile"]["bio"] == "still here"


def test_live_edit_requires_auth(client) -> None:
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"{API}/profiles/me/edit?token=garbage") as ws:
            ws.receive_json()


# ── Links ────────────────────────────────────────────────────────────────────

def test_link_crud_and_reorder(client) -> None:
    token = _register(client)
    headers = _auth(token)
    ids = [
        client.post(f"{API}/links", json={"title": f"L{i}", "url": f"example.com/{i}"}, headers=headers).json()["id"]
        for i in range(3)
    ]

    reordered = client.post(f"{API}/links/reorder", json={"old_index": 0, "new_index": 2}, headers=headers)
    assert reordered.status_code == 200
    assert [link["id"] for link in reordered.json()] == [ids[1], ids[2], ids[0]]

    renamed = client.patch(f"{API}/links/{ids[1]}", json={"title": "Renamed"}, headers=headers)
    assert renamed.json()["title"] == "Renamed"

    assert client.delete(f"{API}/links/{ids[1]}", headers=headers).status_code == 204
    listed = client.get(f"{API}/links", headers=headers).json()
    assert [link["id"] for link in listed] == [ids[2], ids[0]]
    assert [link["position"] for link in listed] == [0, 1]


def test_link_errors(client) -> None:
    token = _register(client)
    headers = _auth(token)
    bad = client.post(f"{API}/links", json={"title": "Site", "url": "not a url"}, headers=headers)
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Please enter a valid URL (e.g., example.com or https://example.com)"

    out_of_range = client.post(f"{API}/links/reorder", json={"old_index": 0, "new_index": 1}, headers=headers)
    assert out_of_range.status_code == 400

    assert client.delete(f"{API}/links/{uuid4()}", headers=headers).status_code == 404


# ── Admin ────────────────────────────────────────────────────────────────────

def test_admin_requires_allow_listed_email(client) -> None:
    token = _register(client)
    assert client.get(f"{API}/admin/profiles", headers=_auth(token)).status_code == 403


def test_admin_lists_and_deletes_users(client) -> None:
    admin = _register(client, email="admin@example.com", username="site-owner")
    me = client.get(f"{API}/auth/me", headers=_auth(admin)).json()
    assert me["is_admin"] is True

    victim = _register(client, email="victim@example.com", username="victim")
    victim_id = client.get(f"{API}/auth/me", headers=_auth(victim)).json()["id"]

    profiles = client.get(f"{API}/admin/profiles", headers=_auth(admin)).json()
    assert {p["username"] for p in profiles} == {"site-owner", "victim"}

    assert client.delete(f"{API}/admin/users/{victim_id}", headers=_auth(admin)).status_code == 204
    assert client.get(f"{API}/profiles/victim").status_code == 404
    assert client.get(f"{API}/auth/me", headers=_auth(victim)).status_code == 401
    assert client.delete(f"{API}/admin/users/{uuid4()}", headers=_auth(admin)).status_code == 404
