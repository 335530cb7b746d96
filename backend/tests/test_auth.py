from flask_jwt_extended import decode_token

from strmanager.extensions import db


def _register(client, email, password="longenough"):
    return client.post("/api/auth/register", json={"email": email, "password": password, "full_name": "Pat Host"})


def test_first_account_becomes_owner(client):
    first = _register(client, "First@Example.com")
    assert first.status_code == 201
    body = first.get_json()
    assert body["user"]["email"] == "first@example.com"
    assert body["user"]["roles"] == ["owner"]
    assert decode_token(body["access_token"])["roles"] == ["owner"]

    second = _register(client, "second@example.com").get_json()
    assert second["user"]["roles"] == []


def test_register_validation(client):
    assert _register(client, "a@example.com", password="short").get_json()["error"] == "password_too_short"
    _register(client, "a@example.com")
    resp = _register(client, "A@example.com")
    assert resp.status_code == 409
    assert client.post("/api/auth/register", json={"email": "x@example.com"}).status_code == 400


def test_login_and_me(client, owner):
    resp = client.post("/api/auth/login", json={"email": "OWNER@example.com", "password": "password123"})
    assert resp.status_code == 200
    token = resp.get_json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.get_json()["full_name"] == "Olivia Owner"
    assert me.get_json()["roles"] == ["owner"]


def test_login_failures(client, manager):
    resp = client.post("/api/auth/login", json={"email": "manager@example.com", "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "invalid_credentials"}

    manager.is_active = False
    db.session.commit()
    resp = client.post("/api/auth/login", json={"email": "manager@example.com", "password": "password123"})
    assert resp.status_code == 403


def test_user_without_roles_is_forbidden(client):
    token = _register(client, "owner@example.com").get_json()["access_token"]
    roleless = _register(client, "guest@example.com").get_json()["access_token"]

    assert client.get("/api/properties", headers={"Authorization": f"Bearer {token}"}).status_code == 200
    assert client.get("/api/properties", headers={"Authorization": f"Bearer {roleless}"}).status_code == 403
