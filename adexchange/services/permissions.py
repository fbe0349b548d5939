"""Role hierarchy (Owner > Admin > User) for administrative mutations.

Every admin endpoint funnels through ``can_perform`` so the rule
"an Admin cannot touch another Admin or the Owner" lives in one place.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from adexchange.models.db import User
from adexchange.models.db.enums import UserRole
from adexchange.services.errors import ForbiddenError

_RANK = {UserRole.USER: 0, UserRole.ADMIN: 1, UserRole.OWNER: 2}


class Action(str, Enum):
    MODERATE_WEBSITE = "moderate_website"
    DELETE_WEBSITE = "delete_website"
    ADJUST_CREDITS = "adjust_credits"
    BAN_USER = "ban_user"
    UNBAN_USER = "unban_user"


_USER_TARGETED = {Action.ADJUST_CREDITS, Action.BAN_USER, Action.UNBAN_USER}
_SELF_FORBIDDEN = {Action.BAN_USER, Action.UNBAN_USER}


def can_perform(actor: User, target: Optional[User], action: Action) -> bool:
    """True if ``actor`` may apply ``action`` to ``target``.

    ``target`` is the affected account: the user itself for account actions,
    the website owner for website actions.
    """
    actor_role = actor.role
    if actor_role == UserRole.USER:
        return False
    if target is None:
        return action not in _USER_TARGETED
    if target.id == actor.id:
        return action not in _SELF_FORBIDDEN and actor_role == UserRole.OWNER
    if actor_role == UserRole.OWNER:
        return True
    # Admins only act on plain users (and their websites)
    return _RANK[target.role] < _RANK[actor_role]


def ensure_can_perform(actor: User, target: Optional[User], action: Action) -> None:
    if not can_perform(actor, target, action):
        raise ForbiddenError(f"Not permitted to {action.value.replace('_', ' ')}")


__all__ = ["Action", "can_perform", "ensure_can_perform"]
