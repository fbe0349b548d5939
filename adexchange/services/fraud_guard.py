"""Fraud/Abuse Guard: decides whether a click may proceed to settlement.

Rules run in order and short-circuit. A rejected click is still redirected by
the caller; only money movement is refused.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from adexchange.config import SETTLEMENT, SYSTEM_PROMOTION
from adexchange.models.db import ClickLock
from adexchange.models.db.enums import ClickOutcome


def lock_exists(session: Session, publisher_id: str, visitor_id: str, day: date) -> bool:
    return session.get(ClickLock, ClickLock.key(publisher_id, visitor_id, day)) is not None


def evaluate_click(
    session: Session,
    *,
    publisher_id: str,
    publisher_owner_id: Optional[str],
    advertiser_id: str,
    advertiser_owner_id: Optional[str],
    visitor_id: str,
    day: date,
) -> Optional[ClickOutcome]:
    """Return the rejecting outcome, or None when the click may be settled.

    The lock lookup here is only a shortcut; settlement writes the lock in the
    same transaction as the transfer and is the real at-most-once guarantee.
    """
    if advertiser_id == SYSTEM_PROMOTION["id"]:
        return ClickOutcome.SYSTEM_PROMOTION
    if publisher_owner_id == advertiser_owner_id and not SETTLEMENT["allow_self_clicks"]:
        return ClickOutcome.SELF_CLICK
    if lock_exists(session, publisher_id, visitor_id, day):
        return ClickOutcome.RATE_LIMITED
    return None


__all__ = ["lock_exists", "evaluate_click"]
