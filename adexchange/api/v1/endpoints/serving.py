"""
Widget endpoints: ad request and click redirect.

Both are mounted at the application root (``/ads``, ``/click``) because the
embed script calls them directly. Neither ever answers a visitor with a 5xx:
the ad request degrades to "no ad" and the click always redirects.
"""
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from adexchange.api.deps import get_db
from adexchange.models.schemas.ads import AdPublic, AdResponse
from adexchange.services.ad_selector import RealAdvertiser, select_ad, AdDecision
from adexchange.services.analytics import record_view_in_background
from adexchange.services.errors import InvalidInputError, NotFoundError
from adexchange.services.settlement import process_click
from adexchange.utils import get_logger
from adexchange.utils.visitor import build_visitor_context

router = APIRouter()
logger = get_logger(__name__)


def _peer_host(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.get(
    "/ads",
    response_model=AdResponse,
    summary="Request an ad",
    description="Pick an advertiser for the publisher widget and tell it how often to refresh"
)
def request_ad(
    request: Request,
    background_tasks: BackgroundTasks,
    publisher_id: Optional[str] = Query(None, alias="publisherId"),
    db: Session = Depends(get_db)
) -> AdResponse:
    if not publisher_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing publisherId")

    try:
        decision = select_ad(db, publisher_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Publisher not found")
    except Exception as e:
        logger.error("Ad selection failed", publisher_id=publisher_id, error=str(e), exc_info=True)
        decision = AdDecision.safe_default()

    candidate = decision.candidate
    if isinstance(candidate, RealAdvertiser):
        visitor = build_visitor_context(request.headers, _peer_host(request))
        background_tasks.add_task(record_view_in_background, publisher_id, visitor)

    return AdResponse(
        ad=AdPublic(**candidate.as_public()) if candidate is not None else None,
        disabled=decision.disabled,
        refresh_seconds=decision.refresh_seconds,
    )


@router.get(
    "/click",
    summary="Ad click",
    description="Settle the click when it qualifies, then redirect to the advertiser",
    response_class=RedirectResponse,
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
)
def click(
    request: Request,
    publisher_id: Optional[str] = Query(None, alias="publisherId"),
    advertiser_id: Optional[str] = Query(None, alias="advertiserId"),
    db: Session = Depends(get_db)
) -> RedirectResponse:
    visitor = build_visitor_context(request.headers, _peer_host(request))
    try:
        result = process_click(db, publisher_id, advertiser_id, visitor)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    logger.info(
        "Click redirected",
        publisher_id=publisher_id,
        advertiser_id=advertiser_id,
        outcome=result.outcome.value
    )
    return RedirectResponse(url=result.destination, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
