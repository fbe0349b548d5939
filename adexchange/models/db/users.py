from __future__ import annotations
"""SQLAlchemy model for account holders (publisher and advertiser are the same identity)."""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, DateTime, Boolean, Text, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column

if TYPE_CHECKING:  # pragma: no cover
    from .websites import Website
from sqlalchemy.sql import func
from adexchange.database import Base
from .enums import UserRole


def _new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String, nullable=True)
    api_key: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    # Auth identity switch; disabled accounts cannot authenticate.
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Authoritative spendable balance. The Website.has_credits flag is only a cache of credits > 0.
    credits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    is_owner: Mapped[bool] = mapped_column(Boolean, default=False)

    # Suspension state
    banned_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    permanent_ban: Mapped[bool] = mapped_column(Boolean, default=False)
    ban_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    duplicate_domain_offenses: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    websites: Mapped[list["Website"]] = relationship("Website", back_populates="owner", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("credits >= 0", name="user_credits_non_negative"),
    )

    @property
    def role(self) -> UserRole:
        if self.is_owner:
            return UserRole.OWNER
        if self.is_admin:
            return UserRole.ADMIN
        return UserRole.USER
