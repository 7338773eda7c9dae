import enum
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class CollectibleTier(str, enum.Enum):
    accessory = "accessory"
    vehicle = "vehicle"
    property = "property"


class Collectible(Base):
    __tablename__ = "collectibles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    emoji: Mapped[str] = mapped_column(String(16), nullable=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    tier: Mapped[str] = mapped_column(
        Enum(CollectibleTier, name="collectible_tier_enum"), nullable=False
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class UserCollectible(Base):
    __tablename__ = "user_collectibles"

    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    collectible_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectibles.id", ondelete="CASCADE"), primary_key=True
    )
    acquired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
