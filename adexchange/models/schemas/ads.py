"""
Widget-facing payloads. Keys are camelCase to match the embed script.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class AdPublic(BaseModel):
    id: str
    domain: str
    category: str
    description: Optional[str] = None


class AdResponse(BaseModel):
    ad: Optional[AdPublic] = None
    disabled: bool = False
    refresh_seconds: int = Field(serialization_alias="refreshSeconds")

    model_config = ConfigDict(populate_by_name=True)
