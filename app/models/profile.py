from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Profile(Base):
    """A user's game state. `id` is the subject of the auth provider's JWT."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_profiles_balance_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active_avatar_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("avatars.id"), nullable=True
    )
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    last_login_bonus_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
