"""
Pydantic schemas for credit packages.
"""
from pydantic import BaseModel


class CreditPackage(BaseModel):
    id: str
    name: str
    price: str
    credits: int
