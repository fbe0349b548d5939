from .users import User
from .websites import Website
from .click_locks import ClickLock
from .daily_stats import DailyStats, DailyBreakdown
from .processed_charges import ProcessedCharge
from .enums import WebsiteStatus, UserRole, DeviceType, BreakdownDimension, ClickOutcome

__all__ = [
    "User",
    "Website",
    "ClickLock",
    "DailyStats",
    "DailyBreakdown",
    "ProcessedCharge",
    "WebsiteStatus",
    "UserRole",
    "DeviceType",
    "BreakdownDimension",
    "ClickOutcome",
]
