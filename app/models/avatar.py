import enum
from datetime import datetime
from sqlalchemy import Integer, String, Boolean, DateTime, Enum, ForeignKey, JSON, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class AvatarCategory(str, enum.Enum):
    starter = "starter"
    motivator = "motivator"
    legend = "legend"
    premium = "premium"


class Avatar(Base):
    __tablename__ = "avatars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    emoji: Mapped[str] = mapped_column(String(16), nullable=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(
        Enum(AvatarCategory, name="avatar_category_enum"), nullable=False
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    personality_voice: Mapped[str | None] = mapped_column(String(256), nullable=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    encouragement_messages: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class UserAvatar(Base):
    __tablename__ = "user_avatars"

    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    avatar_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("avatars.id", ondelete="CASCADE"), primary_key=True
    )
    acquired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
