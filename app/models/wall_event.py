"""
WallEvent: public activity feed entries.

Append-only. Rows are written by the services in the same transaction
as the state change they announce.

event_type values:
  "signup"       : {display_name}
  "bet_created"  : {habit, stake, weeks, category}
  "bet_won"      : {habit, payout, weeks, supporters}
  "bet_lost"     : {habit, lost, failed_at_week, weeks}
  "milestone"    : {description, week, weeks}

metadata: JSON-encoded dict stored as Text.
"""
import enum
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class WallEventType(str, enum.Enum):
    signup = "signup"
    bet_created = "bet_created"
    bet_won = "bet_won"
    bet_lost = "bet_lost"
    milestone = "milestone"


class WallEvent(Base):
    __tablename__ = "wall_events"

    # Monotonic; breaks created_at ties in the feed.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    event_type: Mapped[str] = mapped_column(
        Enum(WallEventType, name="wall_event_type_enum"), nullable=False, index=True
    )
    user_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    bet_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("bets.id", ondelete="SET NULL"), nullable=True, index=True
    )
    event_metadata: Mapped[str | None] = mapped_column(
        "metadata", Text, nullable=True,
        comment="JSON-encoded dict with context specific to each event_type",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
