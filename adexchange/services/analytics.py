"""Analytics aggregates: write-path upserts and the per-site stats read.

Write-path
----------
``record_click_stats`` runs inside the settlement transaction (no commit).
``record_view`` commits on its own and uses plain atomic increments; it is
invoked fire-and-forget after an ad has been served, through
``record_view_in_background`` which owns its session and swallows errors.

Daily rows are keyed by (website_id, date) and only ever incremented, using
``INSERT ... ON CONFLICT DO UPDATE`` so concurrent first writes of a day do not
collide.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adexchange import database
from adexchange.models.db import DailyStats, DailyBreakdown, Website
from adexchange.models.db.enums import BreakdownDimension, DeviceType
from adexchange.utils import get_logger
from adexchange.utils.metrics import ctr_pct, share_pct
from adexchange.utils.time import last_n_days, utc_today
from adexchange.utils.visitor import VisitorContext

logger = get_logger(__name__)


def _dialect_insert(session: Session):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:  # pragma: no cover
        raise RuntimeError(f"Upserts not supported for dialect '{dialect}'")
    return insert


def _upsert_increment(session: Session, model, keys: Dict[str, Any], increments: Dict[str, int]) -> None:
    insert = _dialect_insert(session)
    table = model.__table__
    stmt = insert(table).values(**keys, **increments)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(keys.keys()),
        set_={name: table.c[name] + stmt.excluded[name] for name in increments},
    )
    session.execute(stmt)


def _bump_aggregates(session: Session, website_id: str, day: date, visitor: VisitorContext, metric: str) -> None:
    """metric is 'views' or 'clicks'."""
    device = visitor.device.value
    _upsert_increment(
        session,
        DailyStats,
        {"website_id": website_id, "date": day},
        {metric: 1, f"{metric}_{device}": 1},
    )
    for dimension, value in (
        (BreakdownDimension.COUNTRY, visitor.country),
        (BreakdownDimension.BROWSER, visitor.browser),
        (BreakdownDimension.OS, visitor.os),
    ):
        _upsert_increment(
            session,
            DailyBreakdown,
            {"website_id": website_id, "date": day, "dimension": dimension, "value": value},
            {metric: 1},
        )


def record_click_stats(session: Session, website_id: str, visitor: VisitorContext, day: date) -> None:
    """Per-day click aggregates for a publisher; caller owns the transaction."""
    _bump_aggregates(session, website_id, day, visitor, "clicks")


def record_view(session: Session, website_id: str, visitor: VisitorContext, day: date | None = None) -> None:
    """Lifetime view counter + per-day view aggregates for a publisher."""
    day = day or utc_today()
    session.execute(
        update(Website).where(Website.id == website_id).values(views=Website.views + 1)
    )
    _bump_aggregates(session, website_id, day, visitor, "views")
    session.commit()


def record_view_in_background(website_id: str, visitor: VisitorContext) -> None:
    """Background-task entry point; failures are logged and never reach the visitor."""
    session = database.SessionLocal()
    try:
        record_view(session, website_id, visitor)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("View recording failed", website_id=website_id, error=str(e), exc_info=True)
    finally:
        session.close()


def get_website_stats(session: Session, website_id: str, *, days: int = 7, today: date | None = None) -> Dict[str, Any]:
    """Zero-filled per-day views/clicks for the last ``days`` days plus totals, CTR and shares."""
    window = last_n_days(days, today)
    rows = (
        session.query(DailyStats)
        .filter(DailyStats.website_id == website_id, DailyStats.date >= window[0], DailyStats.date <= window[-1])
        .all()
    )
    by_day = {row.date: row for row in rows}

    daily = []
    devices = {device.value: 0 for device in DeviceType}
    for day in window:
        row = by_day.get(day)
        daily.append({
            "date": day.isoformat(),
            "views": row.views if row else 0,
            "clicks": row.clicks if row else 0,
        })
        if row:
            devices[DeviceType.DESKTOP.value] += row.views_desktop
            devices[DeviceType.MOBILE.value] += row.views_mobile
            devices[DeviceType.TABLET.value] += row.views_tablet

    total_views = sum(d["views"] for d in daily)
    total_clicks = sum(d["clicks"] for d in daily)

    device_share = share_pct(devices) or {
        DeviceType.DESKTOP.value: 100,
        DeviceType.MOBILE.value: 0,
        DeviceType.TABLET.value: 0,
    }

    countries: Dict[str, int] = {}
    breakdown_rows = (
        session.query(DailyBreakdown)
        .filter(
            DailyBreakdown.website_id == website_id,
            DailyBreakdown.dimension == BreakdownDimension.COUNTRY,
            DailyBreakdown.date >= window[0],
            DailyBreakdown.date <= window[-1],
        )
        .all()
    )
    for row in breakdown_rows:
        countries[row.value] = countries.get(row.value, 0) + row.views

    return {
        "website_id": website_id,
        "views": total_views,
        "clicks": total_clicks,
        "ctr": round(ctr_pct(total_clicks, total_views), 2),
        "daily": daily,
        "devices": device_share,
        "countries": countries,
    }


__all__ = [
    "record_click_stats",
    "record_view",
    "record_view_in_background",
    "get_website_stats",
]
