from __future__ import annotations
"""SQLAlchemy models for per-publisher, per-day analytics aggregates.

Counters only ever grow; rows are written with insert-or-increment upserts.
"""
import datetime as dt
from sqlalchemy import Integer, String, Date, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column
from adexchange.database import Base
from .enums import BreakdownDimension


class DailyStats(Base):
    __tablename__ = "daily_stats"
    website_id: Mapped[str] = mapped_column(String(64), ForeignKey("websites.id", ondelete="CASCADE"), primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)

    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    clicks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    views_desktop: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    views_mobile: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    views_tablet: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    clicks_desktop: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    clicks_mobile: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    clicks_tablet: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class DailyBreakdown(Base):
    """Views/clicks per (website, day, dimension, value), e.g. country=DE."""
    __tablename__ = "daily_breakdowns"
    website_id: Mapped[str] = mapped_column(String(64), ForeignKey("websites.id", ondelete="CASCADE"), primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)
    dimension: Mapped[BreakdownDimension] = mapped_column(Enum(BreakdownDimension), primary_key=True)
    value: Mapped[str] = mapped_column(String(64), primary_key=True)

    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    clicks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
