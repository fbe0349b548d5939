from fastapi.testclient import TestClient

from adexchange.models.db import User, Website
from adexchange.models.db.enums import WebsiteStatus


def test_plain_user_cannot_reach_admin_routes(client: TestClient, auth_header, user_factory, website_factory):
    headers, _user = auth_header
    site = website_factory(user_factory(credits=1), status=WebsiteStatus.PENDING, active=False)
    r = client.put(f"/api/v1/admin/websites/{site.id}/status", json={"status": "approved"}, headers=headers)
    assert r.status_code == 403


def test_approve_activates_and_suspend_deactivates(client: TestClient, db_session, admin_header, user_factory, website_factory):
    headers, _admin = admin_header
    site = website_factory(user_factory(credits=1), status=WebsiteStatus.PENDING, active=False)

    r = client.put(f"/api/v1/admin/websites/{site.id}/status", json={"status": "approved"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "approved"
    assert r.json()["active"] is True

    r = client.put(f"/api/v1/admin/websites/{site.id}/status", json={"status": "suspended"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["active"] is False


def test_pending_is_not_a_moderation_target(client: TestClient, admin_header, user_factory, website_factory):
    headers, _admin = admin_header
    site = website_factory(user_factory(credits=1))
    r = client.put(f"/api/v1/admin/websites/{site.id}/status", json={"status": "pending"}, headers=headers)
    assert r.status_code == 400


def test_admin_cannot_moderate_another_admins_site(client: TestClient, admin_header, user_factory, website_factory):
    headers, _admin = admin_header
    other_admin = user_factory(is_admin=True)
    site = website_factory(other_admin)
    r = client.put(f"/api/v1/admin/websites/{site.id}/status", json={"status": "denied"}, headers=headers)
    assert r.status_code == 403


def test_delete_website(client: TestClient, db_session, admin_header, user_factory, website_factory):
    headers, _admin = admin_header
    site = website_factory(user_factory(credits=1))
    r = client.delete(f"/api/v1/admin/websites/{site.id}", headers=headers)
    assert r.status_code == 204
    db_session.expire_all()
    assert db_session.get(Website, site.id) is None
    assert client.delete(f"/api/v1/admin/websites/{site.id}", headers=headers).status_code == 404


def test_credit_adjustment_reconciles_eligibility(client: TestClient, db_session, admin_header, user_factory, website_factory):
    headers, _admin = admin_header
    user = user_factory(credits=0)
    site = website_factory(user)
    assert site.has_credits is False

    r = client.post(f"/api/v1/admin/users/{user.id}/credits", json={"delta": 10, "reason": "promo"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json() == {"user_id": user.id, "before": 0, "after": 10}
    db_session.expire_all()
    assert db_session.get(Website, site.id).has_credits is True

    r = client.post(f"/api/v1/admin/users/{user.id}/credits", json={"delta": -10}, headers=headers)
    assert r.status_code == 200
    assert r.json()["after"] == 0
    db_session.expire_all()
    assert db_session.get(Website, site.id).has_credits is False


def test_credit_adjustment_never_goes_negative(client: TestClient, db_session, admin_header, user_factory):
    headers, _admin = admin_header
    user = user_factory(credits=3)
    r = client.post(f"/api/v1/admin/users/{user.id}/credits", json={"delta": -4}, headers=headers)
    assert r.status_code == 400
    db_session.expire_all()
    assert db_session.get(User, user.id).credits == 3


def test_admin_cannot_adjust_owner_or_admin(client: TestClient, admin_header, user_factory):
    headers, _admin = admin_header
    owner = user_factory(is_owner=True)
    other_admin = user_factory(is_admin=True)
    for target in (owner, other_admin):
        r = client.post(f"/api/v1/admin/users/{target.id}/credits", json={"delta": 5}, headers=headers)
        assert r.status_code == 403


def test_owner_can_ban_admin_but_not_self(client: TestClient, db_session, owner_header, user_factory):
    headers, owner = owner_header
    admin = user_factory(is_admin=True)

    r = client.post(f"/api/v1/admin/users/{admin.id}/ban", json={"permanent": True, "reason": "abuse"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["permanent_ban"] is True
    db_session.expire_all()
    assert db_session.get(User, admin.id).is_active is False

    r = client.post(f"/api/v1/admin/users/{owner.id}/ban", json={"permanent": True}, headers=headers)
    assert r.status_code == 403


def test_temporary_ban_and_unban(client: TestClient, db_session, admin_header, user_factory):
    headers, _admin = admin_header
    user = user_factory(credits=1)

    r = client.post(f"/api/v1/admin/users/{user.id}/ban", json={"hours": 12}, headers=headers)
    assert r.status_code == 200
    assert r.json()["banned_until"] is not None

    # Suspended accounts cannot submit websites
    r = client.post(
        "/api/v1/websites/",
        json={"domain": "during-ban.com", "category": "Technology"},
        headers={"Authorization": f"Bearer {user.api_key}"},
    )
    assert r.status_code == 403

    r = client.post(f"/api/v1/admin/users/{user.id}/unban", headers=headers)
    assert r.status_code == 200
    assert r.json()["banned_until"] is None
    assert r.json()["ban_reason"] is None


def test_temporary_ban_requires_hours(client: TestClient, admin_header, user_factory):
    headers, _admin = admin_header
    user = user_factory(credits=1)
    r = client.post(f"/api/v1/admin/users/{user.id}/ban", json={}, headers=headers)
    assert r.status_code == 422
