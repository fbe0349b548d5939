"""
Dependencies for authentication, database sessions, and common validations.
"""
from typing import Generator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from adexchange import database
from adexchange.models.db import User, Website
from adexchange.models.db.enums import UserRole
from adexchange.utils import get_logger

logger = get_logger(__name__)
security = HTTPBearer()


def _key_prefix(api_key: str) -> str:
    return api_key[:10] + "..." if len(api_key) > 10 else api_key


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.
    Ensures proper session lifecycle management with automatic cleanup.

    Yields:
        Session: SQLAlchemy database session
    """
    db = database.SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error", error=str(e), exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Extract and validate user from API key.

    Raises:
        HTTPException: If API key is invalid or the auth identity is disabled
    """
    api_key = credentials.credentials

    user = db.query(User).filter(
        User.api_key == api_key,
        User.is_active.is_(True)
    ).first()

    if not user:
        logger.warning(
            "Authentication failed: invalid or inactive API key",
            api_key_prefix=_key_prefix(api_key)
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or inactive API key",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug("User authenticated", user_id=user.id, user_role=user.role.value)
    return user


def require_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Admins and the owner pass; finer target checks happen in the permissions service."""
    if current_user.role not in (UserRole.ADMIN, UserRole.OWNER):
        logger.warning(
            "Access denied: admin required",
            user_id=current_user.id,
            user_role=current_user.role.value
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def get_owned_website(
    website_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Website:
    """Fetch a website owned by the caller; 404 for both missing and foreign sites."""
    website = db.get(Website, website_id)
    if website is None or website.user_id != current_user.id:
        logger.warning(
            "Website not found for owner",
            website_id=website_id,
            user_id=current_user.id
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Website not found"
        )
    return website
