from fastapi.testclient import TestClient

from adexchange.config import ACCOUNT_DEFAULTS


def test_create_user_grants_starting_credits_and_key(client: TestClient):
    r = client.post("/api/v1/users/", json={"email": "jane@example.com", "display_name": "Jane"})
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["credits"] == ACCOUNT_DEFAULTS["starting_credits"]
    assert body["role"] == "USER"
    assert body["api_key"].startswith("rk_")

    me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {body['api_key']}"})
    assert me.status_code == 200
    assert me.json()["id"] == body["id"]
    assert "api_key" not in me.json()


def test_duplicate_email_is_conflict(client: TestClient):
    payload = {"email": "dup@example.com"}
    assert client.post("/api/v1/users/", json=payload).status_code == 201
    assert client.post("/api/v1/users/", json=payload).status_code == 409


def test_invalid_email_is_422(client: TestClient):
    r = client.post("/api/v1/users/", json={"email": "not-an-email"})
    assert r.status_code == 422


def test_me_requires_valid_key(client: TestClient):
    assert client.get("/api/v1/users/me").status_code in (401, 403)
    r = client.get("/api/v1/users/me", headers={"Authorization": "Bearer rk_nope"})
    assert r.status_code == 401


def test_inactive_identity_is_rejected(client: TestClient, user_factory):
    user = user_factory(is_active=False)
    r = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {user.api_key}"})
    assert r.status_code == 401
