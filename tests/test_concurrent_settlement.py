"""Concurrent clicks for one (publisher, visitor, day) must move money at most once."""
import threading
from datetime import date

from adexchange import database
from adexchange.models.db import ClickLock, User, Website
from adexchange.models.db.enums import ClickOutcome
from adexchange.services.settlement import process_click
from adexchange.utils.visitor import VisitorContext

THREADS = 8


def _run_concurrently(publisher_id: str, advertiser_id: str, visitor: VisitorContext, day: date):
    barrier = threading.Barrier(THREADS)
    outcomes = []
    errors = []
    guard = threading.Lock()

    def _worker():
        session = database.SessionLocal()
        try:
            barrier.wait()
            result = process_click(session, publisher_id, advertiser_id, visitor, day=day)
            with guard:
                outcomes.append(result.outcome)
        except Exception as e:  # surfaced through the errors list
            with guard:
                errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=_worker) for _ in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes, errors


def test_concurrent_clicks_settle_at_most_once(db_session, user_factory, website_factory):
    u1 = user_factory(credits=0)
    u2 = user_factory(credits=5)
    publisher = website_factory(u1)
    advertiser = website_factory(u2)
    day = date(2025, 3, 14)

    outcomes, errors = _run_concurrently(publisher.id, advertiser.id, VisitorContext(identity="203.0.113.77"), day)

    assert errors == []
    assert len(outcomes) == THREADS
    assert outcomes.count(ClickOutcome.SETTLED) == 1
    assert set(outcomes) <= {ClickOutcome.SETTLED, ClickOutcome.RATE_LIMITED, ClickOutcome.ERROR}

    db_session.expire_all()
    assert db_session.get(User, u1.id).credits == 1
    assert db_session.get(User, u2.id).credits == 4
    assert db_session.get(Website, publisher.id).clicks == 1
    assert db_session.query(ClickLock).filter_by(publisher_id=publisher.id, day=day).count() == 1


def test_concurrent_clicks_never_overdraw(db_session, user_factory, website_factory):
    u1 = user_factory(credits=0)
    u2 = user_factory(credits=1)
    publisher = website_factory(u1)
    advertiser = website_factory(u2)
    day = date(2025, 3, 14)

    publisher_id, advertiser_id = publisher.id, advertiser.id

    # Distinct visitors: each click qualifies, but only one credit exists
    barrier = threading.Barrier(THREADS)
    outcomes = []
    guard = threading.Lock()

    def _worker(i: int):
        session = database.SessionLocal()
        try:
            barrier.wait()
            result = process_click(session, publisher_id, advertiser_id, VisitorContext(identity=f"198.51.100.{i}"), day=day)
            with guard:
                outcomes.append(result.outcome)
        finally:
            session.close()

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert outcomes.count(ClickOutcome.SETTLED) == 1
    db_session.expire_all()
    assert db_session.get(User, u2.id).credits == 0
    assert db_session.get(User, u1.id).credits == 1
