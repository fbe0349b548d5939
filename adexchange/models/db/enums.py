"""Central Enum definitions for core domain states.

These replace scattered string literals to ensure consistency across
DB models, schemas, and business logic.
"""
from __future__ import annotations
import enum


class WebsiteStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    SUSPENDED = "suspended"


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    OWNER = "OWNER"


class DeviceType(str, enum.Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
    TABLET = "tablet"


class BreakdownDimension(str, enum.Enum):
    COUNTRY = "country"
    BROWSER = "browser"
    OS = "os"

# ------------------ Click / Settlement Outcomes ------------------ #

class ClickOutcome(str, enum.Enum):
    SETTLED = "SETTLED"
    SYSTEM_PROMOTION = "SYSTEM_PROMOTION"
    SELF_CLICK = "SELF_CLICK"
    RATE_LIMITED = "RATE_LIMITED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    ERROR = "ERROR"

__all__ = [
    "WebsiteStatus",
    "UserRole",
    "DeviceType",
    "BreakdownDimension",
    "ClickOutcome",
]
