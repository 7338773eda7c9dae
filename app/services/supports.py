"""
Support staking: a third party co-stakes on someone else's active bet.

Rules
-----
  * not the supporter's own bet
  * bet is active
  * one support per (bet, supporter)
  * bet is strictly younger than SUPPORT_WINDOW (14 days from created_at)
  * stake within [SUPPORT_MIN_STAKE, SUPPORT_MAX_STAKE] and covered by balance

The stake is escrowed (debited) immediately; the payout is settled by
resolve_bet_win / resolve_bet_loss in app/services/bets.py.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import ensure_utc, utcnow
from app.core.errors import (
    AlreadySupportingError,
    BetNotActiveError,
    BetNotFoundError,
    CannotSupportOwnBetError,
    InvalidStakeError,
    SupportWindowClosedError,
)
from app.models.bet import Bet, BetStatus
from app.models.ledger import LedgerReason
from app.models.support import Support
from app.services import ledger

logger = structlog.get_logger(__name__)

SUPPORT_MIN_STAKE = 10
SUPPORT_MAX_STAKE = 500
SUPPORT_WINDOW_DAYS = 14
SUPPORT_WINDOW = timedelta(days=SUPPORT_WINDOW_DAYS)


class SupportBlock:
    OWN_BET           = "CANNOT_SUPPORT_OWN_BET"
    NOT_ACTIVE        = "BET_NOT_ACTIVE"
    ALREADY           = "ALREADY_SUPPORTING"
    WINDOW_CLOSED     = "SUPPORT_WINDOW_CLOSED"


def support_block_reason(
    bet: Bet,
    supporter_id: Optional[str],
    now: datetime,
    already_supporting: bool = False,
) -> Optional[str]:
    """
    Return the SupportBlock code that prevents supporting `bet`, or None.
    With supporter_id=None only the bet-level rules are checked.
    """
    if supporter_id is not None and bet.user_id == supporter_id:
        return SupportBlock.OWN_BET
    if bet.status != BetStatus.active:
        return SupportBlock.NOT_ACTIVE
    if already_supporting:
        return SupportBlock.ALREADY
    if ensure_utc(bet.created_at) <= now - SUPPORT_WINDOW:
        return SupportBlock.WINDOW_CLOSED
    return None


def _raise_for(reason: str, bet: Bet) -> None:
    if reason == SupportBlock.OWN_BET:
        raise CannotSupportOwnBetError(bet.id)
    if reason == SupportBlock.NOT_ACTIVE:
        raise BetNotActiveError(bet.id, str(getattr(bet.status, "value", bet.status)))
    if reason == SupportBlock.ALREADY:
        raise AlreadySupportingError(bet.id)
    raise SupportWindowClosedError(bet.id, SUPPORT_WINDOW_DAYS)


def find_support(db: Session, bet_id: str, supporter_id: str) -> Optional[Support]:
    return (
        db.query(Support)
        .filter(Support.bet_id == bet_id, Support.supporter_id == supporter_id)
        .first()
    )


def support_bet(
    db: Session,
    supporter_id: str,
    bet_id: str,
    stake_amount: int,
    now: Optional[datetime] = None,
) -> Support:
    """Escrow `stake_amount` from the supporter and record the support. Commits."""
    now = now or utcnow()
    if not SUPPORT_MIN_STAKE <= stake_amount <= SUPPORT_MAX_STAKE:
        raise InvalidStakeError(
            f"Support stake must be between {SUPPORT_MIN_STAKE} and {SUPPORT_MAX_STAKE} GC.",
            details={"min": SUPPORT_MIN_STAKE, "max": SUPPORT_MAX_STAKE, "received": stake_amount},
        )

    bet = db.query(Bet).filter(Bet.id == bet_id).with_for_update().first()
    if bet is None:
        raise BetNotFoundError(bet_id)

    already = find_support(db, bet_id, supporter_id) is not None
    reason = support_block_reason(bet, supporter_id, now, already_supporting=already)
    if reason is not None:
        _raise_for(reason, bet)

    supporter = ledger.lock_profile(db, supporter_id)
    ledger.debit(db, supporter, stake_amount, LedgerReason.support_stake, bet_id=bet.id)

    support = Support(
        bet_id=bet.id,
        supporter_id=supporter_id,
        stake_amount=stake_amount,
        created_at=now,
    )
    db.add(support)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadySupportingError(bet_id) from exc

    db.commit()
    db.refresh(support)
    logger.info(
        "bet_supported",
        bet_id=bet.id,
        supporter_id=supporter_id,
        stake=stake_amount,
    )
    return support
