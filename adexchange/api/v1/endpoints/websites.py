"""
Website ownership endpoints: submission, listing, owner edits and stats.

Service errors (suspension, duplicate domain, bad input) propagate as
``ExchangeError`` and are rendered by the application's exception handler.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
import time
from adexchange.api.deps import get_db, get_current_user, get_owned_website
from adexchange.models.db import User, Website
from adexchange.models.db.enums import WebsiteStatus
from adexchange.models.schemas.websites import WebsiteCreate, WebsiteRead, WebsiteUpdate, WebsiteStats
from adexchange.services.analytics import get_website_stats
from adexchange.services.registration_guard import register_website
from adexchange.utils import get_logger, log_performance

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/",
    response_model=WebsiteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit website",
    description="Register a domain for review. Claiming another account's domain suspends, then bans, the caller."
)
async def submit_website(
    payload: WebsiteCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> WebsiteRead:
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")
    logger.info(
        "Website submission started",
        user_id=current_user.id,
        raw_domain=payload.domain,
        request_id=request_id
    )

    website = register_website(
        db,
        current_user,
        payload.domain,
        payload.category,
        creative=payload.model_dump(exclude={"domain", "category"}, exclude_none=True),
    )

    log_performance(
        operation="submit_website",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"website_id": website.id}
    )
    return WebsiteRead.model_validate(website)


@router.get(
    "/",
    response_model=List[WebsiteRead],
    summary="List my websites"
)
async def list_websites(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[WebsiteRead]:
    sites = (
        db.query(Website)
        .filter(Website.user_id == current_user.id)
        .order_by(Website.created_at.desc())
        .all()
    )
    return [WebsiteRead.model_validate(site) for site in sites]


@router.patch(
    "/{website_id}",
    response_model=WebsiteRead,
    summary="Update website",
    description="Toggle serving (approved sites only) or ad display, and edit creative fields"
)
async def update_website(
    payload: WebsiteUpdate,
    website: Website = Depends(get_owned_website),
    db: Session = Depends(get_db)
) -> WebsiteRead:
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("active") and website.status != WebsiteStatus.APPROVED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Only approved websites can be activated"
        )

    for field, value in changes.items():
        if value is None and field in ("active", "show_ads", "category"):
            continue
        setattr(website, field, value)
    db.commit()
    db.refresh(website)

    logger.info("Website updated", website_id=website.id, fields=sorted(changes))
    return WebsiteRead.model_validate(website)


@router.get(
    "/{website_id}/stats",
    response_model=WebsiteStats,
    summary="Website stats",
    description="Per-day views and clicks for the last N days with CTR and device share"
)
async def website_stats(
    days: int = Query(7, ge=1, le=90),
    website: Website = Depends(get_owned_website),
    db: Session = Depends(get_db)
) -> WebsiteStats:
    return WebsiteStats.model_validate(get_website_stats(db, website.id, days=days))
