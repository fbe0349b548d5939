"""Ad Selector: waterfall candidate selection for a publisher widget.

Pools are tried strictly in order, first non-empty wins:

1. active, same category, owner has credits
2. active, any category, owner has credits
3. active, same category
4. active, any category
5. the built-in system promotion (never empty)

Pools 1-4 fetch at most ``AD_SERVING["candidate_window"]`` rows, drop the
publisher's own site after the fetch, and pick uniformly at random.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from adexchange.config import AD_SERVING, DEMO_PUBLISHER_ID, SYSTEM_PROMOTION
from adexchange.models.db import Website
from adexchange.services.errors import NotFoundError
from adexchange.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RealAdvertiser:
    website: Website
    pool: int

    @property
    def id(self) -> str:
        return self.website.id

    def as_public(self) -> dict:
        return {
            "id": self.website.id,
            "domain": self.website.domain,
            "category": self.website.category,
            "description": self.website.description,
        }


@dataclass(frozen=True, slots=True)
class SystemPromotion:
    pool: int = 5

    @property
    def id(self) -> str:
        return SYSTEM_PROMOTION["id"]

    def as_public(self) -> dict:
        return {
            "id": SYSTEM_PROMOTION["id"],
            "domain": SYSTEM_PROMOTION["domain"],
            "category": SYSTEM_PROMOTION["category"],
            "description": SYSTEM_PROMOTION["description"],
        }


Candidate = Union[RealAdvertiser, SystemPromotion]


@dataclass(frozen=True, slots=True)
class AdDecision:
    candidate: Optional[Candidate]
    refresh_seconds: int
    disabled: bool = False

    @classmethod
    def safe_default(cls) -> "AdDecision":
        return cls(candidate=None, refresh_seconds=AD_SERVING["error_refresh_seconds"])


def _pool_queries(publisher: Website):
    base = select(Website).where(Website.active.is_(True))
    same_category = Website.category == publisher.category
    funded = Website.has_credits.is_(True)
    return (
        (1, base.where(same_category, funded)),
        (2, base.where(funded)),
        (3, base.where(same_category)),
        (4, base),
    )


def pick_candidate(session: Session, publisher: Website, rng: Optional[random.Random] = None) -> Candidate:
    """Walk the waterfall and return the chosen candidate (never None)."""
    chooser = rng or random
    window = AD_SERVING["candidate_window"]
    for pool, stmt in _pool_queries(publisher):
        rows = session.execute(stmt.limit(window)).scalars().all()
        candidates = [site for site in rows if site.id != publisher.id]
        if candidates:
            return RealAdvertiser(website=chooser.choice(candidates), pool=pool)
    return SystemPromotion()


def refresh_for(publisher: Website) -> int:
    interval = publisher.refresh_interval
    if interval and AD_SERVING["min_refresh_seconds"] <= interval <= AD_SERVING["max_refresh_seconds"]:
        return interval
    return AD_SERVING["default_refresh_seconds"]


def select_ad(session: Session, publisher_id: str, rng: Optional[random.Random] = None) -> AdDecision:
    """Choose an ad for ``publisher_id``.

    Raises:
        NotFoundError: the publisher does not exist
    """
    if publisher_id == DEMO_PUBLISHER_ID:
        return AdDecision(candidate=SystemPromotion(), refresh_seconds=AD_SERVING["default_refresh_seconds"])

    publisher = session.get(Website, publisher_id)
    if publisher is None:
        raise NotFoundError("Publisher not found")

    if not publisher.show_ads:
        return AdDecision(candidate=None, refresh_seconds=AD_SERVING["disabled_refresh_seconds"], disabled=True)

    candidate = pick_candidate(session, publisher, rng)
    logger.debug("Ad selected", publisher_id=publisher_id, advertiser_id=candidate.id, pool=candidate.pool)
    return AdDecision(candidate=candidate, refresh_seconds=refresh_for(publisher))


__all__ = [
    "RealAdvertiser",
    "SystemPromotion",
    "Candidate",
    "AdDecision",
    "pick_candidate",
    "refresh_for",
    "select_ad",
]
