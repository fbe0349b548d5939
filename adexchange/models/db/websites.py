from __future__ import annotations
"""SQLAlchemy model for member websites (publish ads, and are advertised)."""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, DateTime, Boolean, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column

if TYPE_CHECKING:  # pragma: no cover
    from .users import User
from sqlalchemy.sql import func
from adexchange.database import Base
from .enums import WebsiteStatus


class Website(Base):
    __tablename__ = "websites"
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    # Normalized hostname, one registration network-wide.
    domain: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    category: Mapped[str] = mapped_column(String, index=True, nullable=False)

    # active: eligible to be selected as an ad
    active: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    # has_credits: cached "owner balance > 0", a query hint only
    has_credits: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    status: Mapped[WebsiteStatus] = mapped_column(Enum(WebsiteStatus), default=WebsiteStatus.PENDING, index=True)
    # show_ads: publisher displays the widget
    show_ads: Mapped[bool] = mapped_column(Boolean, default=True)

    # Creative / widget display
    title: Mapped[str | None] = mapped_column(String(120), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    widget_color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    widget_bg_color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    refresh_interval: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Lifetime counters
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    clicks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    visitors: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    owner: Mapped["User"] = relationship("User", back_populates="websites")
