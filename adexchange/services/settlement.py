"""Credit Settlement Engine.

One qualifying click moves ``SETTLEMENT["credits_per_click"]`` from the
advertiser's owner to the publisher's owner. Everything money-related happens
in a single database transaction:

1. insert the click lock (publisher, visitor, day); a primary-key violation
   means another request already settled this triple
2. conditional debit ``credits >= amount``; zero rows means insufficient funds
3. credit the publisher owner
4. bump publisher clicks / advertiser visitors
5. upsert the publisher's daily click aggregates
6. read back balances to derive eligibility transitions

Commit, then the eligibility fan-out runs best-effort on its own.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from adexchange.config import DEMO_PUBLISHER_ID, SETTLEMENT, SYSTEM_PROMOTION
from adexchange.models.db import ClickLock, User, Website
from adexchange.models.db.enums import ClickOutcome
from adexchange.services.analytics import record_click_stats
from adexchange.services.eligibility import (
    BalanceChange,
    EligibilityTransition,
    apply_transitions,
    read_balance,
)
from adexchange.services.errors import ExchangeError, InvalidInputError, NotFoundError, TransientStoreError
from adexchange.services.fraud_guard import evaluate_click, lock_exists
from adexchange.utils import destination_url, get_logger, log_business_event, log_performance
from adexchange.utils.backoff import compute_backoff_seconds
from adexchange.utils.time import utc_today
from adexchange.utils.visitor import VisitorContext

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SettlementResult:
    outcome: ClickOutcome
    publisher_balance: Optional[int] = None
    advertiser_balance: Optional[int] = None
    transitions: List[EligibilityTransition] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ClickResult:
    outcome: ClickOutcome
    destination: str


def _settle_once(
    session: Session,
    *,
    publisher_id: str,
    publisher_owner_id: str,
    advertiser_id: str,
    advertiser_owner_id: str,
    visitor: VisitorContext,
    day: date,
    amount: int,
) -> SettlementResult:
    session.add(ClickLock(
        publisher_id=publisher_id,
        visitor_id=visitor.identity,
        day=day,
        advertiser_id=advertiser_id,
        device=visitor.device.value,
        country=visitor.country,
        browser=visitor.browser,
        os=visitor.os,
        is_bot=visitor.is_bot,
    ))
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        if lock_exists(session, publisher_id, visitor.identity, day):
            return SettlementResult(outcome=ClickOutcome.RATE_LIMITED)
        raise

    debit = session.execute(
        update(User)
        .where(User.id == advertiser_owner_id, User.credits >= amount)
        .values(credits=User.credits - amount)
    )
    if debit.rowcount == 0:
        # Nothing moves and no lock is kept; the advertiser's flag is corrected
        session.rollback()
        return SettlementResult(
            outcome=ClickOutcome.INSUFFICIENT_FUNDS,
            transitions=[EligibilityTransition(advertiser_owner_id, False)],
        )

    credit = session.execute(
        update(User).where(User.id == publisher_owner_id).values(credits=User.credits + amount)
    )
    if credit.rowcount == 0:
        session.rollback()
        raise NotFoundError("Publisher owner not found")

    session.execute(update(Website).where(Website.id == publisher_id).values(clicks=Website.clicks + 1))
    session.execute(update(Website).where(Website.id == advertiser_id).values(visitors=Website.visitors + 1))
    record_click_stats(session, publisher_id, visitor, day)

    advertiser_after = read_balance(session, advertiser_owner_id)
    publisher_after = read_balance(session, publisher_owner_id)
    session.commit()

    transitions: List[EligibilityTransition] = []
    if advertiser_owner_id != publisher_owner_id:
        for change in (
            BalanceChange(advertiser_owner_id, advertiser_after + amount, advertiser_after),
            BalanceChange(publisher_owner_id, publisher_after - amount, publisher_after),
        ):
            transition = change.transition()
            if transition is not None:
                transitions.append(transition)

    return SettlementResult(
        outcome=ClickOutcome.SETTLED,
        publisher_balance=publisher_after,
        advertiser_balance=advertiser_after,
        transitions=transitions,
    )


def settle_click(
    session: Session,
    publisher: Website,
    advertiser: Website,
    visitor: VisitorContext,
    *,
    day: Optional[date] = None,
) -> SettlementResult:
    """Run the settlement transaction, retrying transient store errors.

    Raises:
        TransientStoreError: the store stayed contended for every attempt
        NotFoundError: an owning account disappeared mid-flight
    """
    # Plain values only: ORM instances expire on commit/rollback
    params = dict(
        publisher_id=publisher.id,
        publisher_owner_id=publisher.user_id,
        advertiser_id=advertiser.id,
        advertiser_owner_id=advertiser.user_id,
        visitor=visitor,
        day=day or utc_today(),
        amount=int(SETTLEMENT["credits_per_click"]),
    )
    max_attempts = int(SETTLEMENT["max_attempts"])

    for attempt in range(1, max_attempts + 1):
        try:
            result = _settle_once(session, **params)
            break
        except OperationalError as e:
            session.rollback()
            if attempt >= max_attempts:
                logger.error(
                    "Settlement retries exhausted",
                    publisher_id=params["publisher_id"],
                    advertiser_id=params["advertiser_id"],
                    attempts=attempt,
                    error=str(e),
                )
                raise TransientStoreError("Settlement could not complete, please retry") from e
            delay = compute_backoff_seconds(attempt)
            logger.warning(
                "Settlement transaction contended, retrying",
                publisher_id=params["publisher_id"],
                attempt=attempt,
                delay_seconds=round(delay, 3),
            )
            time.sleep(delay)

    apply_transitions(session, result.transitions)
    return result


def process_click(
    session: Session,
    publisher_id: Optional[str],
    advertiser_id: Optional[str],
    visitor: VisitorContext,
    *,
    day: Optional[date] = None,
) -> ClickResult:
    """Resolve, guard and settle a widget click; always yields a redirect target.

    Raises:
        InvalidInputError: an id is missing
        NotFoundError: the publisher or advertiser does not exist
    """
    if not publisher_id or not advertiser_id:
        raise InvalidInputError("Missing publisherId or advertiserId")

    # Demo widget clicks and the house ad never move credits
    if publisher_id == DEMO_PUBLISHER_ID or advertiser_id == SYSTEM_PROMOTION["id"]:
        return ClickResult(outcome=ClickOutcome.SYSTEM_PROMOTION, destination=SYSTEM_PROMOTION["url"])

    publisher = session.get(Website, publisher_id)
    advertiser = session.get(Website, advertiser_id)
    if publisher is None or advertiser is None:
        raise NotFoundError("Site not found")

    destination = destination_url(advertiser.domain)
    day = day or utc_today()

    started = time.perf_counter()
    try:
        rejected = evaluate_click(
            session,
            publisher_id=publisher.id,
            publisher_owner_id=publisher.user_id,
            advertiser_id=advertiser.id,
            advertiser_owner_id=advertiser.user_id,
            visitor_id=visitor.identity,
            day=day,
        )
        if rejected is not None:
            logger.info("Click not settled", publisher_id=publisher_id, advertiser_id=advertiser_id, outcome=rejected.value)
            return ClickResult(outcome=rejected, destination=destination)
        result = settle_click(session, publisher, advertiser, visitor, day=day)
    except (ExchangeError, SQLAlchemyError) as e:
        session.rollback()
        logger.error(
            "Click settlement failed",
            publisher_id=publisher_id,
            advertiser_id=advertiser_id,
            error=str(e),
            exc_info=True,
        )
        return ClickResult(outcome=ClickOutcome.ERROR, destination=destination)

    if result.outcome == ClickOutcome.SETTLED:
        log_business_event(
            "click_settled",
            {
                "publisher_id": publisher_id,
                "advertiser_id": advertiser_id,
                "publisher_balance": result.publisher_balance,
                "advertiser_balance": result.advertiser_balance,
            },
        )
    else:
        logger.info("Click not settled", publisher_id=publisher_id, advertiser_id=advertiser_id, outcome=result.outcome.value)
    log_performance("settle_click", (time.perf_counter() - started) * 1000, {"outcome": result.outcome.value})
    return ClickResult(outcome=result.outcome, destination=destination)


__all__ = ["SettlementResult", "ClickResult", "settle_click", "process_click"]
