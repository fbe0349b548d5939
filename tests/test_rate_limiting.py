import pytest
from fastapi.testclient import TestClient
from adexchange.config import RATE_LIMIT_SETTINGS
from adexchange.utils.ratelimiter import rate_limiter


@pytest.fixture()
def fast_limits(monkeypatch):
    clock = {"now": 1_000_020}
    monkeypatch.setattr(rate_limiter, "_now", lambda: clock["now"])
    monkeypatch.setitem(RATE_LIMIT_SETTINGS, "default", {"limit": 5, "window_seconds": 60})
    monkeypatch.setitem(RATE_LIMIT_SETTINGS, "ads", {"limit": 3, "window_seconds": 60})
    monkeypatch.setitem(RATE_LIMIT_SETTINGS, "click", {"limit": 2, "window_seconds": 60})
    yield clock


def test_generic_rate_limit_enforced(client: TestClient, auth_header, fast_limits):
    headers, _user = auth_header

    for i in range(5):
        r = client.get("/", headers=headers)
        assert r.status_code == 200
        assert r.headers.get("X-RateLimit-Limit") == "5"
        remaining = int(r.headers.get("X-RateLimit-Remaining"))
        assert remaining == 5 - (i + 1)

    # Next request should exceed
    r = client.get("/", headers=headers)
    assert r.status_code == 429
    assert r.json()["message"].startswith("Rate limit exceeded")
    assert r.headers.get("X-RateLimit-Remaining") == "0"


def test_api_keys_have_separate_buckets(client: TestClient, user_factory, fast_limits):
    first = {"Authorization": f"Bearer {user_factory().api_key}"}
    second = {"Authorization": f"Bearer {user_factory().api_key}"}
    for _ in range(5):
        assert client.get("/", headers=first).status_code == 200
    assert client.get("/", headers=first).status_code == 429
    assert client.get("/", headers=second).status_code == 200


def test_ads_category_keyed_by_visitor(client: TestClient, user_factory, website_factory, fast_limits):
    publisher = website_factory(user_factory(credits=1))
    visitor = {"X-Forwarded-For": "203.0.113.50"}
    for _ in range(3):
        r = client.get("/ads", params={"publisherId": publisher.id}, headers=visitor)
        assert r.status_code == 200
    r = client.get("/ads", params={"publisherId": publisher.id}, headers=visitor)
    assert r.status_code == 429
    assert r.json()["category"] == "ads"

    # Another visitor is unaffected
    r = client.get("/ads", params={"publisherId": publisher.id}, headers={"X-Forwarded-For": "203.0.113.51"})
    assert r.status_code == 200


def test_click_category_limits(client: TestClient, user_factory, website_factory, fast_limits):
    publisher = website_factory(user_factory(credits=1))
    advertiser = website_factory(user_factory(credits=5))
    params = {"publisherId": publisher.id, "advertiserId": advertiser.id}
    visitor = {"X-Forwarded-For": "203.0.113.60"}
    for _ in range(2):
        assert client.get("/click", params=params, headers=visitor).status_code == 307
    r = client.get("/click", params=params, headers=visitor)
    assert r.status_code == 429
    assert r.json()["category"] == "click"


def test_window_reset_allows_requests_again(client: TestClient, auth_header, fast_limits):
    headers, _user = auth_header
    clock = fast_limits

    for _ in range(5):
        assert client.get("/", headers=headers).status_code == 200
    assert client.get("/", headers=headers).status_code == 429

    clock["now"] += 60
    r = client.get("/", headers=headers)
    assert r.status_code == 200
    assert r.headers.get("X-RateLimit-Remaining") == "4"  # after 1st of new window


def test_rate_limit_headers_exist_for_public_route(client: TestClient, fast_limits):
    # No auth header -> visitor bucket
    r = client.get("/health")
    assert r.status_code == 200
    assert "X-RateLimit-Limit" in r.headers
    assert "X-RateLimit-Remaining" in r.headers
    assert "X-RateLimit-Reset" in r.headers
