from __future__ import annotations
"""SQLAlchemy model for payment charges already credited.

The charge id primary key makes a replayed webhook delivery collide inside the
crediting transaction, so each charge moves credits at most once.
"""
from datetime import datetime
from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from adexchange.database import Base


class ProcessedCharge(Base):
    __tablename__ = "processed_charges"
    charge_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
