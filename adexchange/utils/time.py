"""Time utilities (UTC now, calendar day, tz normalization)."""
from __future__ import annotations
from datetime import date, datetime, timezone, timedelta

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def utc_today() -> date:
    """Calendar day used for click locks and daily aggregates."""
    return utc_now().date()

def ensure_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def last_n_days(n: int, today: date | None = None) -> list[date]:
    """Oldest-first list of the ``n`` days ending at ``today`` (inclusive)."""
    end = today or utc_today()
    return [end - timedelta(days=offset) for offset in range(n - 1, -1, -1)]

__all__ = ["utc_now", "utc_today", "ensure_utc", "last_n_days"]
