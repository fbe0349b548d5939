"""Administrative mutations: website review, account bans, credit adjustments."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from adexchange.models.db import User, Website
from adexchange.models.db.enums import WebsiteStatus
from adexchange.services.eligibility import BalanceChange, adjust_balance, apply_transitions
from adexchange.services.errors import InvalidInputError, NotFoundError
from adexchange.services.identity import disable_auth_identity, enable_auth_identity
from adexchange.services.permissions import Action, ensure_can_perform
from adexchange.utils import get_logger, log_business_event
from adexchange.utils.time import utc_now

logger = get_logger(__name__)


def _get_website(session: Session, website_id: str) -> Website:
    website = session.get(Website, website_id)
    if website is None:
        raise NotFoundError(f"Website {website_id} not found")
    return website


def _get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


def set_website_status(session: Session, actor: User, website_id: str, status: WebsiteStatus) -> Website:
    """Approve, deny or suspend a website. Only approved sites are served."""
    if status == WebsiteStatus.PENDING:
        raise InvalidInputError("Status must be approved, denied or suspended")
    website = _get_website(session, website_id)
    ensure_can_perform(actor, website.owner, Action.MODERATE_WEBSITE)

    previous = website.status
    website.status = status
    website.active = status == WebsiteStatus.APPROVED
    session.commit()
    session.refresh(website)
    log_business_event(
        "website_status_changed",
        {"website_id": website_id, "from": previous.value, "to": status.value},
        user_id=actor.id,
    )
    return website


def delete_website(session: Session, actor: User, website_id: str) -> None:
    website = _get_website(session, website_id)
    ensure_can_perform(actor, website.owner, Action.DELETE_WEBSITE)
    domain = website.domain
    session.delete(website)
    session.commit()
    log_business_event("website_deleted", {"website_id": website_id, "domain": domain}, user_id=actor.id)


def adjust_credits(session: Session, actor: User, user_id: str, delta: int, reason: Optional[str] = None) -> BalanceChange:
    """Apply a signed credit delta; refuses to drive the balance below zero."""
    if delta == 0:
        raise InvalidInputError("Delta must be non-zero")
    target = _get_user(session, user_id)
    ensure_can_perform(actor, target, Action.ADJUST_CREDITS)

    try:
        change = adjust_balance(session, user_id, delta)
        session.commit()
    except (InvalidInputError, NotFoundError):
        session.rollback()
        raise

    apply_transitions(session, [change.transition()])
    log_business_event(
        "credits_adjusted",
        {"target_user_id": user_id, "delta": delta, "before": change.before, "after": change.after, "reason": reason},
        user_id=actor.id,
    )
    return change


def ban_user(
    session: Session,
    actor: User,
    user_id: str,
    *,
    permanent: bool = False,
    hours: Optional[int] = None,
    reason: Optional[str] = None,
) -> User:
    target = _get_user(session, user_id)
    ensure_can_perform(actor, target, Action.BAN_USER)

    until: Optional[datetime] = None
    if permanent:
        target.permanent_ban = True
        disable_auth_identity(session, user_id)
    else:
        if not hours or hours <= 0:
            raise InvalidInputError("A temporary ban needs a positive number of hours")
        until = utc_now() + timedelta(hours=hours)
        target.banned_until = until
    target.ban_reason = reason or "Banned by administrator"
    session.commit()
    session.refresh(target)
    log_business_event(
        "user_banned" if permanent else "user_suspended",
        {"target_user_id": user_id, "until": until.isoformat() if until else None, "reason": target.ban_reason},
        user_id=actor.id,
    )
    return target


def unban_user(session: Session, actor: User, user_id: str) -> User:
    target = _get_user(session, user_id)
    ensure_can_perform(actor, target, Action.UNBAN_USER)
    target.permanent_ban = False
    target.banned_until = None
    target.ban_reason = None
    enable_auth_identity(session, user_id)
    session.commit()
    session.refresh(target)
    log_business_event("user_unbanned", {"target_user_id": user_id}, user_id=actor.id)
    return target


__all__ = ["set_website_status", "delete_website", "adjust_credits", "ban_user", "unban_user"]
