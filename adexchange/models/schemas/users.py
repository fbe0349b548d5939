"""
Pydantic schemas for user-related operations.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, EmailStr, ConfigDict
from ..db.enums import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    display_name: Optional[str] = Field(None, min_length=1, max_length=200)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "email": "jane@example.com",
            "display_name": "Jane's Blog Network"
        }
    })


class UserRead(BaseModel):
    id: str
    email: str
    display_name: Optional[str]
    is_active: bool
    credits: int
    role: UserRole
    banned_until: Optional[datetime]
    permanent_ban: bool
    ban_reason: Optional[str]
    duplicate_domain_offenses: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserCreated(UserRead):
    """Returned once at sign-up; the only time the API key is shown."""
    api_key: str
