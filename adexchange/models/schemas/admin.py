"""
Pydantic schemas for administrative actions.
"""
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator
from ..db.enums import WebsiteStatus


class WebsiteStatusUpdate(BaseModel):
    status: WebsiteStatus

    model_config = ConfigDict(json_schema_extra={"example": {"status": "approved"}})


class CreditAdjustment(BaseModel):
    delta: int = Field(description="Signed amount; negative values remove credits")
    reason: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(json_schema_extra={"example": {"delta": -25, "reason": "Refund reversal"}})


class BalanceRead(BaseModel):
    user_id: str
    before: int
    after: int


class BanRequest(BaseModel):
    permanent: bool = False
    hours: Optional[int] = Field(None, gt=0, le=24 * 365)
    reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def _needs_duration(self):
        if not self.permanent and self.hours is None:
            raise ValueError("hours is required for a temporary ban")
        return self
