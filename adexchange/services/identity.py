"""Auth identity switch for accounts.

Authentication is a bearer API key checked against ``users.api_key``; an
account with ``is_active = False`` can no longer authenticate.
"""
from __future__ import annotations

import secrets

from sqlalchemy import update
from sqlalchemy.orm import Session

from adexchange.models.db import User
from adexchange.services.errors import NotFoundError


def generate_api_key() -> str:
    return f"rk_{secrets.token_urlsafe(32)}"


def disable_auth_identity(session: Session, user_id: str) -> None:
    """Flag the identity disabled in the caller's transaction."""
    result = session.execute(update(User).where(User.id == user_id).values(is_active=False))
    if result.rowcount == 0:
        raise NotFoundError(f"User {user_id} not found")


def enable_auth_identity(session: Session, user_id: str) -> None:
    result = session.execute(update(User).where(User.id == user_id).values(is_active=True))
    if result.rowcount == 0:
        raise NotFoundError(f"User {user_id} not found")


__all__ = ["generate_api_key", "disable_auth_identity", "enable_auth_identity"]
