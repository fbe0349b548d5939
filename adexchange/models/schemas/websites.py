"""
Pydantic schemas for website submission, owner edits and stats.
"""
from datetime import datetime
from typing import Optional, Dict, List
from pydantic import BaseModel, Field, ConfigDict
from ..db.enums import WebsiteStatus

_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class WebsiteCreate(BaseModel):
    domain: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=100)
    title: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = Field(None, max_length=500)
    widget_color: Optional[str] = Field(None, pattern=_COLOR)
    widget_bg_color: Optional[str] = Field(None, pattern=_COLOR)
    refresh_interval: Optional[int] = Field(None, ge=5, le=3600)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "domain": "https://www.example.com/",
            "category": "Technology",
            "title": "Example Dev Tools",
            "description": "Tools for developers who ship.",
            "widget_color": "#ffffff",
            "widget_bg_color": "#111827",
            "refresh_interval": 30
        }
    })


class WebsiteUpdate(BaseModel):
    active: Optional[bool] = None
    show_ads: Optional[bool] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    title: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = Field(None, max_length=500)
    widget_color: Optional[str] = Field(None, pattern=_COLOR)
    widget_bg_color: Optional[str] = Field(None, pattern=_COLOR)
    refresh_interval: Optional[int] = Field(None, ge=5, le=3600)


class WebsiteRead(BaseModel):
    id: str
    user_id: str
    domain: str
    category: str
    status: WebsiteStatus
    active: bool
    show_ads: bool
    has_credits: bool
    title: Optional[str]
    description: Optional[str]
    widget_color: Optional[str]
    widget_bg_color: Optional[str]
    refresh_interval: Optional[int]
    views: int
    clicks: int
    visitors: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DailyPoint(BaseModel):
    date: str
    views: int
    clicks: int


class WebsiteStats(BaseModel):
    website_id: str
    views: int
    clicks: int
    ctr: float = Field(description="Click-through rate, percent")
    daily: List[DailyPoint]
    devices: Dict[str, int] = Field(description="Share of views per device, percent")
    countries: Dict[str, int]
