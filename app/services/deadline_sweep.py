"""
Deadline sweep: the daily cron job that marks missed weeks as lost.

For every active bet:
    week_start = started_at + (current_week - 1) * 7 days
    deadline   = week_start + 7 days
    if now > deadline and the current week's check-in row exists and is
    not completed → settle_loss

Bets are processed sequentially, one savepoint each. A failed resolution
is logged, not counted, and picked up again by the next run. Running the
sweep twice is harmless: settle_loss only matches active bets.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.models.bet import Bet, BetStatus
from app.services.bets import get_checkin, settle_loss, week_deadline

logger = structlog.get_logger(__name__)


@dataclass
class SweepResult:
    processed: int = 0
    lost: int = 0
    failed: list[str] = field(default_factory=list)
    lost_bet_ids: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.processed == 0:
            return "No active bets found"
        return f"Processed {self.processed} active bets, {self.lost} marked as lost"


def is_overdue(bet: Bet, now: datetime) -> bool:
    return now > week_deadline(bet.started_at, bet.current_week)


def run_deadline_sweep(db: Session, now: Optional[datetime] = None) -> SweepResult:
    now = now or utcnow()
    active_bets = (
        db.query(Bet)
        .filter(Bet.status == BetStatus.active)
        .order_by(Bet.started_at, Bet.id)
        .all()
    )
    result = SweepResult(processed=len(active_bets))

    for bet in active_bets:
        if not is_overdue(bet, now):
            continue
        checkin = get_checkin(db, bet.id, bet.current_week)
        if checkin is None or checkin.completed:
            continue

        bet_id = bet.id
        savepoint = db.begin_nested()
        try:
            resolved = settle_loss(db, bet_id, now)
            savepoint.commit()
        except Exception as exc:
            savepoint.rollback()
            result.failed.append(bet_id)
            logger.warning(
                "deadline_sweep_resolution_failed",
                bet_id=bet_id,
                error=str(exc),
            )
            continue
        if resolved:
            result.lost += 1
            result.lost_bet_ids.append(bet_id)

    db.commit()
    logger.info(
        "deadline_sweep_finished",
        processed=result.processed,
        lost=result.lost,
        failed=len(result.failed),
    )
    return result
