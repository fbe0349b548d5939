from datetime import date, timedelta

from fastapi.testclient import TestClient

from adexchange.models.db import DailyBreakdown, DailyStats
from adexchange.models.db.enums import BreakdownDimension, DeviceType
from adexchange.services.analytics import get_website_stats, record_click_stats, record_view
from adexchange.utils.visitor import VisitorContext

TODAY = date(2025, 3, 14)


def test_record_view_upserts_day_and_breakdowns(db_session, user_factory, website_factory):
    site = website_factory(user_factory(credits=1))
    mobile = VisitorContext(identity="203.0.113.1", device=DeviceType.MOBILE, browser="Mobile Safari", os="iOS", country="US")

    record_view(db_session, site.id, mobile, TODAY)
    record_view(db_session, site.id, mobile, TODAY)
    record_view(db_session, site.id, VisitorContext(identity="203.0.113.2", country="DE"), TODAY)

    row = db_session.query(DailyStats).filter_by(website_id=site.id, date=TODAY).one()
    assert row.views == 3
    assert row.views_mobile == 2
    assert row.views_desktop == 1

    countries = {
        b.value: b.views
        for b in db_session.query(DailyBreakdown).filter_by(website_id=site.id, dimension=BreakdownDimension.COUNTRY)
    }
    assert countries == {"US": 2, "DE": 1}

    db_session.refresh(site)
    assert site.views == 3


def test_stats_window_zero_fills_and_computes_ctr(db_session, user_factory, website_factory):
    site = website_factory(user_factory(credits=1))
    visitor = VisitorContext(identity="203.0.113.1", device=DeviceType.TABLET)
    for _ in range(4):
        record_view(db_session, site.id, visitor, TODAY)
    record_click_stats(db_session, site.id, visitor, TODAY)
    db_session.commit()
    # Outside the 7-day window
    record_view(db_session, site.id, visitor, TODAY - timedelta(days=10))

    stats = get_website_stats(db_session, site.id, days=7, today=TODAY)
    assert len(stats["daily"]) == 7
    assert stats["daily"][-1] == {"date": TODAY.isoformat(), "views": 4, "clicks": 1}
    assert all(d["views"] == 0 for d in stats["daily"][:-1])
    assert stats["views"] == 4
    assert stats["clicks"] == 1
    assert stats["ctr"] == 25.0
    assert stats["devices"] == {"desktop": 0, "mobile": 0, "tablet": 100}


def test_stats_default_device_share_without_data(db_session, user_factory, website_factory):
    site = website_factory(user_factory(credits=1))
    stats = get_website_stats(db_session, site.id, today=TODAY)
    assert stats["views"] == 0
    assert stats["ctr"] == 0
    assert stats["devices"] == {"desktop": 100, "mobile": 0, "tablet": 0}


def test_stats_endpoint_is_owner_only(client: TestClient, user_factory, website_factory):
    owner = user_factory(credits=1)
    site = website_factory(owner)
    r = client.get(f"/api/v1/websites/{site.id}/stats", headers={"Authorization": f"Bearer {owner.api_key}"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["website_id"] == site.id
    assert len(body["daily"]) == 7

    stranger = user_factory(credits=1)
    r = client.get(f"/api/v1/websites/{site.id}/stats", headers={"Authorization": f"Bearer {stranger.api_key}"})
    assert r.status_code == 404
