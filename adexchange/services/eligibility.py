"""Credit eligibility cache reconciliation and balance adjustments.

Two separate facts are kept on purpose:

* ``User.credits`` is authoritative and only changed inside transactions that
  re-validate it (conditional UPDATEs).
* ``Website.has_credits`` is an advisory cache of ``credits > 0`` used to
  narrow ad candidate pools. It is reconciled after the balance-changing
  transaction commits, across every site the user owns, and may lag briefly.
  Nothing money-related reads it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adexchange.models.db import User, Website
from adexchange.services.errors import InvalidInputError, NotFoundError
from adexchange.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EligibilityTransition:
    user_id: str
    has_credits: bool


@dataclass(frozen=True, slots=True)
class BalanceChange:
    user_id: str
    before: int
    after: int

    def transition(self) -> Optional[EligibilityTransition]:
        """Flag flips when the balance crosses zero in either direction."""
        if self.before > 0 and self.after <= 0:
            return EligibilityTransition(self.user_id, False)
        if self.before <= 0 and self.after > 0:
            return EligibilityTransition(self.user_id, True)
        return None


def read_balance(session: Session, user_id: str) -> int:
    balance = session.execute(select(User.credits).where(User.id == user_id)).scalar_one_or_none()
    if balance is None:
        raise NotFoundError(f"User {user_id} not found")
    return int(balance)


def adjust_balance(session: Session, user_id: str, delta: int) -> BalanceChange:
    """Apply ``delta`` to a balance inside the caller's transaction.

    Debits are conditional on sufficient funds so the balance can never go
    negative, even under concurrent adjustments.
    """
    stmt = update(User).where(User.id == user_id)
    if delta < 0:
        stmt = stmt.where(User.credits >= -delta)
    result = session.execute(stmt.values(credits=User.credits + delta))
    if result.rowcount == 0:
        # Distinguish a missing user from insufficient funds
        read_balance(session, user_id)
        raise InvalidInputError("Insufficient credits for this adjustment")
    after = read_balance(session, user_id)
    return BalanceChange(user_id=user_id, before=after - delta, after=after)


def sync_site_eligibility(session: Session, user_id: str, has_credits: bool) -> int:
    """Set ``has_credits`` on every site owned by ``user_id``; returns rows changed."""
    result = session.execute(
        update(Website)
        .where(Website.user_id == user_id, Website.has_credits.is_not(has_credits))
        .values(has_credits=has_credits)
    )
    session.commit()
    return result.rowcount


def apply_transitions(session: Session, transitions: Iterable[Optional[EligibilityTransition]]) -> None:
    """Best-effort fan-out run after the balance transaction committed.

    Errors are logged and swallowed: a stale flag only widens candidate pools,
    and the settlement transaction re-checks the real balance anyway.
    """
    for transition in transitions:
        if transition is None:
            continue
        try:
            changed = sync_site_eligibility(session, transition.user_id, transition.has_credits)
            logger.info(
                "Eligibility reconciled",
                user_id=transition.user_id,
                has_credits=transition.has_credits,
                sites_updated=changed,
            )
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                "Eligibility reconciliation failed",
                user_id=transition.user_id,
                has_credits=transition.has_credits,
                error=str(e),
            )


__all__ = [
    "EligibilityTransition",
    "BalanceChange",
    "read_balance",
    "adjust_balance",
    "sync_site_eligibility",
    "apply_transitions",
]
