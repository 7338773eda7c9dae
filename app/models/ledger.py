"""
LedgerEntry: one row per movement of a profile's coin balance.

For every profile, balance == SUM(amount). Written only by
app/services/ledger.py, in the same transaction as the balance update.
"""
import enum
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class LedgerReason(str, enum.Enum):
    signup_grant = "signup_grant"
    login_bonus = "login_bonus"
    bet_stake = "bet_stake"
    bet_payout = "bet_payout"
    support_stake = "support_stake"
    support_payout = "support_payout"
    avatar_purchase = "avatar_purchase"
    collectible_purchase = "collectible_purchase"


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(
        Enum(LedgerReason, name="ledger_reason_enum"), nullable=False
    )
    bet_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    reference: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
