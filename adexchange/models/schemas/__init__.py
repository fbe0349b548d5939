from .base import ResponseBase
from .users import UserCreate, UserRead, UserCreated
from .websites import WebsiteCreate, WebsiteUpdate, WebsiteRead, DailyPoint, WebsiteStats
from .ads import AdPublic, AdResponse
from .admin import WebsiteStatusUpdate, CreditAdjustment, BalanceRead, BanRequest
from .payments import CreditPackage

__all__ = [
    # Base
    "ResponseBase",

    # Users
    "UserCreate",
    "UserRead",
    "UserCreated",

    # Websites
    "WebsiteCreate",
    "WebsiteUpdate",
    "WebsiteRead",
    "DailyPoint",
    "WebsiteStats",

    # Widget
    "AdPublic",
    "AdResponse",

    # Admin
    "WebsiteStatusUpdate",
    "CreditAdjustment",
    "BalanceRead",
    "BanRequest",

    # Payments
    "CreditPackage",
]
