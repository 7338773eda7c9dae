import uuid
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Support(Base):
    """A co-stake on someone else's bet. payout_amount stays NULL until the bet resolves."""

    __tablename__ = "supports"
    __table_args__ = (
        UniqueConstraint("bet_id", "supporter_id", name="uq_supports_bet_supporter"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    bet_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("bets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    supporter_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id"), nullable=False, index=True
    )
    stake_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    payout_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
