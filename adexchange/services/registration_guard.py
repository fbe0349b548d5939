"""Domain Registration Guard.

A domain may be registered once network-wide. Claiming a domain that belongs
to another account is treated as multi-accounting: the first offense
suspends the account for ``REGISTRATION_GUARD["suspension_hours"]``, the
second bans it permanently and disables its auth identity.

The unique index on ``websites.domain`` backs up the lookup: a concurrent
insert that slips past it surfaces as a conflict, not a second registration.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from adexchange.config import REGISTRATION_GUARD
from adexchange.models.db import User, Website
from adexchange.models.db.enums import WebsiteStatus
from adexchange.services.errors import ConflictError, ForbiddenError, InvalidInputError
from adexchange.services.identity import disable_auth_identity
from adexchange.utils import get_logger, log_business_event, normalize_domain
from adexchange.utils.time import ensure_utc, utc_now

logger = get_logger(__name__)

CREATIVE_FIELDS = ("title", "description", "widget_color", "widget_bg_color", "refresh_interval")


def ensure_not_suspended(user: User) -> None:
    """Raise ForbiddenError while a permanent ban or timed suspension is in force."""
    if user.permanent_ban:
        raise ForbiddenError("Your account is permanently suspended.")
    until = ensure_utc(user.banned_until)
    if until is not None and until > utc_now():
        raise ForbiddenError(f"Your account is suspended until {until.isoformat()}", until=until)


def _punish_duplicate(session: Session, user: User, domain: str) -> None:
    # Increment in SQL so overlapping submissions each count
    session.execute(
        update(User)
        .where(User.id == user.id)
        .values(duplicate_domain_offenses=func.coalesce(User.duplicate_domain_offenses, 0) + 1)
        .execution_options(synchronize_session=False)
    )
    session.refresh(user)
    offenses = user.duplicate_domain_offenses

    if offenses >= REGISTRATION_GUARD["permanent_ban_offenses"]:
        user.permanent_ban = True
        user.ban_reason = REGISTRATION_GUARD["permanent_ban_reason"]
        session.commit()
        # The ban stands even if the identity switch fails
        try:
            disable_auth_identity(session, user.id)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Failed to disable auth identity", user_id=user.id, error=str(e))
        log_business_event("user_banned", {"domain": domain, "offenses": offenses, "reason": user.ban_reason}, user_id=user.id)
        raise ForbiddenError(
            "Access Denied: Your account has been permanently banned for repeated attempts "
            "to register existing domains."
        )

    until = utc_now() + timedelta(hours=REGISTRATION_GUARD["suspension_hours"])
    user.banned_until = until
    user.ban_reason = REGISTRATION_GUARD["suspension_reason"]
    session.commit()
    log_business_event(
        "user_suspended",
        {"domain": domain, "offenses": offenses, "until": until.isoformat(), "reason": user.ban_reason},
        user_id=user.id,
    )
    raise ForbiddenError(
        f"Access Denied: Your account has been suspended for {REGISTRATION_GUARD['suspension_hours']} hours "
        "for attempting to register a domain that belongs to another account.",
        until=until,
    )


def register_website(
    session: Session,
    user: User,
    raw_domain: str,
    category: str,
    creative: Optional[Dict[str, Any]] = None,
) -> Website:
    """Submit a website for review on behalf of ``user``.

    Raises:
        ForbiddenError: caller is suspended, or just got suspended/banned
        InvalidInputError: domain cannot be normalized
        ConflictError: caller already owns this domain
    """
    # The caller may hold a row loaded before a concurrent punishment landed
    session.refresh(user)
    ensure_not_suspended(user)

    try:
        domain = normalize_domain(raw_domain)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e

    existing = session.execute(select(Website).where(Website.domain == domain)).scalar_one_or_none()
    if existing is not None:
        if existing.user_id == user.id:
            raise ConflictError("You have already registered this domain.")
        logger.warning("Duplicate domain submission", user_id=user.id, domain=domain, owner_id=existing.user_id)
        _punish_duplicate(session, user, domain)

    website = Website(
        user_id=user.id,
        domain=domain,
        category=category,
        status=WebsiteStatus.PENDING,
        active=False,
        show_ads=True,
        has_credits=(user.credits or 0) > 0,
        **{name: value for name, value in (creative or {}).items() if name in CREATIVE_FIELDS},
    )
    session.add(website)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning("Concurrent registration of the same domain", user_id=user.id, domain=domain, error=str(e))
        raise ConflictError("This domain was registered by a concurrent request.") from e

    session.refresh(website)
    log_business_event("website_registered", {"website_id": website.id, "domain": domain}, user_id=user.id)
    return website


__all__ = ["CREATIVE_FIELDS", "ensure_not_suspended", "register_website"]
