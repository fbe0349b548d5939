from __future__ import annotations
"""SQLAlchemy model for settled clicks.

The composite primary key (publisher_id, visitor_id, day) is the rate-limit lock:
an existence check is a point lookup and a second insert for the same triple
violates the key inside the settlement transaction. Rows are append-only.
"""
from datetime import date, datetime
from sqlalchemy import String, Date, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from adexchange.database import Base


class ClickLock(Base):
    __tablename__ = "click_locks"
    publisher_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    visitor_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    day: Mapped[date] = mapped_column(Date, primary_key=True)

    advertiser_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Optional visitor metadata
    device: Mapped[str | None] = mapped_column(String(16), nullable=True)
    country: Mapped[str | None] = mapped_column(String(8), nullable=True)
    browser: Mapped[str | None] = mapped_column(String(64), nullable=True)
    os: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_bot: Mapped[bool] = mapped_column(Boolean, default=False)

    @staticmethod
    def key(publisher_id: str, visitor_id: str, day: date) -> tuple[str, str, date]:
        """Primary key tuple usable with ``Session.get``."""
        return (publisher_id, visitor_id, day)
