"""
Administrative endpoints (Admin and Owner roles).

Who may act on whom is decided by ``services.permissions.can_perform``; the
router dependency only keeps plain users out.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from adexchange.api.deps import get_db, require_admin
from adexchange.models.db import User
from adexchange.models.schemas.admin import WebsiteStatusUpdate, CreditAdjustment, BalanceRead, BanRequest
from adexchange.models.schemas.users import UserRead
from adexchange.models.schemas.websites import WebsiteRead
from adexchange.services import moderation
from adexchange.utils import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.put(
    "/websites/{website_id}/status",
    response_model=WebsiteRead,
    summary="Moderate website",
    description="Approve, deny or suspend a website; only approved sites are served"
)
async def set_website_status(
    website_id: str,
    payload: WebsiteStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> WebsiteRead:
    website = moderation.set_website_status(db, admin, website_id, payload.status)
    return WebsiteRead.model_validate(website)


@router.delete(
    "/websites/{website_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete website"
)
async def delete_website(
    website_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Response:
    moderation.delete_website(db, admin, website_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/users/{user_id}/credits",
    response_model=BalanceRead,
    summary="Adjust credits",
    description="Apply a signed credit delta; the balance never goes below zero"
)
async def adjust_credits(
    user_id: str,
    payload: CreditAdjustment,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> BalanceRead:
    change = moderation.adjust_credits(db, admin, user_id, payload.delta, payload.reason)
    return BalanceRead(user_id=change.user_id, before=change.before, after=change.after)


@router.post(
    "/users/{user_id}/ban",
    response_model=UserRead,
    summary="Ban or suspend user"
)
async def ban_user(
    user_id: str,
    payload: BanRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> UserRead:
    target = moderation.ban_user(
        db, admin, user_id,
        permanent=payload.permanent,
        hours=payload.hours,
        reason=payload.reason,
    )
    return UserRead.model_validate(target)


@router.post(
    "/users/{user_id}/unban",
    response_model=UserRead,
    summary="Lift ban"
)
async def unban_user(
    user_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> UserRead:
    return UserRead.model_validate(moderation.unban_user(db, admin, user_id))
