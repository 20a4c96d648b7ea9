"""
API tests for auth: first-admin setup, register, login (cookie + token), logout, /auth/me.
"""
from proximos.config import settings


def _register(client, email="ana@example.com", password="secret123", name="Ana"):
    return client.post("/auth/register", json={"name": name, "email": email, "password": password})


def test_setup_creates_admin_once(client):
    r = client.post("/auth/setup", json={"name": "Root", "email": "root@example.com", "password": "secret123"})
    assert r.status_code == 201
    assert r.json()["role"] == "admin"

    r = client.post("/auth/setup", json={"name": "Again", "email": "again@example.com", "password": "secret123"})
    assert r.status_code == 409
    assert r.json()["code"] == "SETUP_UNAVAILABLE"


def test_register_is_regular_and_email_unique(client):
    r = _register(client)
    assert r.status_code == 201
    assert r.json()["role"] == "regular"
    r = _register(client, email="ANA@example.com")
    assert r.status_code == 409
    assert r.json()["code"] == "USER_EMAIL_ALREADY_EXISTS"


def test_register_rejects_bad_email(client):
    r = _register(client, email="not-an-email")
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_REQUEST_BODY"


def test_login_sets_cookie_and_me_reads_it(client):
    _register(client)
    r = client.post("/auth/login", json={"email": "ana@example.com", "password": "secret123"})
    assert r.status_code == 200
    token = r.json()["access_token"]
    assert token
    assert r.cookies.get(settings.auth_cookie_name) == token

    # TestClient keeps the cookie
    r = client.get("/auth/me")
    assert r.status_code == 200
    assert r.json()["email"] == "ana@example.com"

    client.cookies.clear()
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


def test_login_wrong_password(client):
    _register(client)
    r = client.post("/auth/login", json={"email": "ana@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["code"] == "INVALID_CREDENTIALS"


def test_invalid_token_is_unauthorized(client):
    r = client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    assert r.json()["code"] == "UNAUTHORIZED"


def test_logout_clears_cookie(client):
    _register(client)
    client.post("/auth/login", json={"email": "ana@example.com", "password": "secret123"})
    r = client.post("/auth/logout")
    assert r.status_code == 204
    client.cookies.clear()
    assert client.get("/auth/me").status_code == 401


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
