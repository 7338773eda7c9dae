import enum
import uuid
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Enum, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class BetCategory(str, enum.Enum):
    health = "health"
    learning = "learning"
    creative = "creative"
    social = "social"
    financial = "financial"
    other = "other"


class BetStatus(str, enum.Enum):
    active = "active"
    won = "won"
    lost = "lost"


class BuddyRelationship(str, enum.Enum):
    friend = "friend"
    family = "family"
    coworker = "coworker"
    coach = "coach"


class Bet(Base):
    __tablename__ = "bets"
    __table_args__ = (
        CheckConstraint("stake_amount > 0", name="ck_bets_stake_positive"),
        CheckConstraint("current_week >= 1", name="ck_bets_current_week_min"),
        CheckConstraint("current_week <= duration_weeks", name="ck_bets_current_week_max"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False, index=True
    )
    habit_description: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str | None] = mapped_column(
        Enum(BetCategory, name="bet_category_enum"), nullable=True
    )
    stake_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    current_week: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(
        Enum(BetStatus, name="bet_status_enum"),
        nullable=False,
        default=BetStatus.active,
        index=True,
    )
    buddy_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    buddy_relationship: Mapped[str | None] = mapped_column(
        Enum(BuddyRelationship, name="buddy_relationship_enum"), nullable=True
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
