"""
Account endpoints: sign-up and profile.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import time
from sqlalchemy.exc import IntegrityError
from adexchange.api.deps import get_db, get_current_user
from adexchange.config import ACCOUNT_DEFAULTS
from adexchange.models.db import User
from adexchange.models.schemas.users import UserCreate, UserRead, UserCreated
from adexchange.services.identity import generate_api_key
from adexchange.utils import get_logger, log_business_event, log_performance

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/",
    response_model=UserCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create new user",
    description="Register an account with the starting credit balance; the API key is returned once"
)
async def create_user(
    user_data: UserCreate,
    request: Request,
    db: Session = Depends(get_db)
) -> UserCreated:
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")

    existing = db.query(User).filter(User.email == user_data.email).first()
    if existing:
        logger.warning(
            "User creation failed: duplicate email",
            email=user_data.email,
            existing_user_id=existing.id,
            request_id=request_id
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email '{user_data.email}' already exists"
        )

    new_user = User(
        email=user_data.email,
        display_name=user_data.display_name,
        api_key=generate_api_key(),
        credits=ACCOUNT_DEFAULTS["starting_credits"],
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(
            "User creation failed: database integrity error",
            error=str(e),
            email=user_data.email,
            request_id=request_id
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )
    db.refresh(new_user)

    log_business_event(
        event_type="user_created",
        details={"email": new_user.email, "starting_credits": new_user.credits},
        user_id=new_user.id,
        request_id=request_id
    )
    log_performance(
        operation="create_user",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"user_id": new_user.id}
    )
    return UserCreated.model_validate(new_user)


@router.get(
    "/me",
    response_model=UserRead,
    summary="Current account",
    description="Balance, role and suspension state of the authenticated account"
)
async def read_me(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)
