"""
Bet lifecycle: stake escrow → weekly check-in → win/loss resolution → payout.

Public API
----------
create_bet(db, user_id, ...)                 → Bet             (commits)
checkin_week(db, user_id, bet_id, ...)       → CheckinOutcome  (commits)
resolve_bet_win(db, bet_id)                  → bool            (commits)
resolve_bet_loss(db, bet_id)                 → bool            (commits)

Internal
--------
settle_win(db, bet_id, now)   → bool   (flush only)
settle_loss(db, bet_id, now)  → bool   (flush only)

Resolution is a compare-and-set on `status`: the UPDATE only matches an
active bet, so a second call (overlapping cron runs, retries) matches zero
rows and pays nothing.

Payouts
-------
  win  : owner     += stake_amount * duration_weeks
         supporter += support.stake_amount * duration_weeks
  loss : owner stake forfeited, supporters' payout_amount = 0
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from app.core.clock import ensure_utc, utcnow
from app.core.enums import enum_value
from app.core.errors import (
    BetNotActiveError,
    BetNotFoundError,
    CheckinAlreadyCompletedError,
    DeadlinePassedError,
    InvalidRequestError,
    InvalidStakeError,
    NotBetOwnerError,
)
from app.models.bet import Bet, BetCategory, BetStatus, BuddyRelationship
from app.models.checkin import Checkin
from app.models.ledger import LedgerReason
from app.models.support import Support
from app.models.wall_event import WallEventType
from app.services import ledger, wall

logger = structlog.get_logger(__name__)

MIN_STAKE = 10
MAX_STAKE = 500
MIN_WEEKS = 2
MAX_WEEKS = 12
HABIT_MAX_LENGTH = 200
WEEK = timedelta(days=7)


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class CheckinOutcome:
    success: bool
    bet: Bet
    checkin: Checkin
    week: int           # the week that was just completed
    won: bool
    payout: int         # credited to the owner when won, else 0


# ---------------------------------------------------------------------------
# Date arithmetic
# ---------------------------------------------------------------------------

def week_start(started_at: datetime, week: int) -> datetime:
    return ensure_utc(started_at) + (week - 1) * WEEK


def week_deadline(started_at: datetime, week: int) -> datetime:
    """Week `week` must be checked in no later than this instant."""
    return week_start(started_at, week) + WEEK


def potential_payout(stake_amount: int, duration_weeks: int) -> int:
    return stake_amount * duration_weeks


def halfway_week(duration_weeks: int) -> int:
    return (duration_weeks + 1) // 2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _enum_or_none(enum_cls, value, field: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise InvalidRequestError(
            f"Invalid {field}: {value!r}",
            details={"field": field, "allowed": [m.value for m in enum_cls]},
        ) from exc


def _load_for_update(db: Session, bet_id: str) -> Bet:
    bet = (
        db.query(Bet)
        .filter(Bet.id == bet_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if bet is None:
        raise BetNotFoundError(bet_id)
    return bet


def get_bet(db: Session, bet_id: str) -> Bet:
    bet = db.get(Bet, bet_id)
    if bet is None:
        raise BetNotFoundError(bet_id)
    return bet


def get_checkin(db: Session, bet_id: str, week: int) -> Optional[Checkin]:
    return (
        db.query(Checkin)
        .filter(Checkin.bet_id == bet_id, Checkin.week_number == week)
        .first()
    )


def get_bet_checkins(db: Session, bet_id: str) -> list[Checkin]:
    return (
        db.query(Checkin)
        .filter(Checkin.bet_id == bet_id)
        .order_by(Checkin.week_number)
        .all()
    )


def get_bet_supports(db: Session, bet_id: str) -> list[Support]:
    return (
        db.query(Support)
        .filter(Support.bet_id == bet_id)
        .order_by(Support.created_at, Support.id)
        .all()
    )


def list_user_bets(
    db: Session,
    user_id: str,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[int, list[Bet]]:
    """Return (total, page) of the user's bets, newest first."""
    q = db.query(Bet).filter(Bet.user_id == user_id)
    if status:
        q = q.filter(Bet.status == status)
    total = q.count()
    items = (
        q.order_by(Bet.created_at.desc(), Bet.id)
        .offset(offset)
        .limit(limit)
        .all()
    )
    return total, items


# ---------------------------------------------------------------------------
# create_bet
# ---------------------------------------------------------------------------

def create_bet(
    db: Session,
    user_id: str,
    habit_description: str,
    category: Optional[str],
    stake_amount: int,
    duration_weeks: int,
    buddy_email: Optional[str] = None,
    buddy_relationship: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Bet:
    """Escrow the stake, open week 1 and announce the bet on the wall."""
    now = now or utcnow()
    habit = (habit_description or "").strip()
    if not habit or len(habit) > HABIT_MAX_LENGTH:
        raise InvalidRequestError(
            f"Habit description must be 1-{HABIT_MAX_LENGTH} characters.",
            details={"field": "habit_description"},
        )
    if not MIN_STAKE <= stake_amount <= MAX_STAKE:
        raise InvalidStakeError(
            f"Stake must be between {MIN_STAKE} and {MAX_STAKE} GC.",
            details={"min": MIN_STAKE, "max": MAX_STAKE, "received": stake_amount},
        )
    if not MIN_WEEKS <= duration_weeks <= MAX_WEEKS:
        raise InvalidRequestError(
            f"Duration must be between {MIN_WEEKS} and {MAX_WEEKS} weeks.",
            details={"field": "duration_weeks", "min": MIN_WEEKS, "max": MAX_WEEKS},
        )
    bet_category = _enum_or_none(BetCategory, category, "category")
    relationship = _enum_or_none(BuddyRelationship, buddy_relationship, "buddy_relationship")
    buddy = (buddy_email or "").strip() or None

    owner = ledger.lock_profile(db, user_id)
    bet_id = str(uuid.uuid4())
    ledger.debit(db, owner, stake_amount, LedgerReason.bet_stake, bet_id=bet_id)

    bet = Bet(
        id=bet_id,
        user_id=user_id,
        habit_description=habit,
        category=bet_category,
        stake_amount=stake_amount,
        duration_weeks=duration_weeks,
        current_week=1,
        status=BetStatus.active,
        buddy_email=buddy,
        buddy_relationship=relationship if buddy else None,
        started_at=now,
        created_at=now,
    )
    db.add(bet)
    db.flush()
    db.add(Checkin(bet_id=bet_id, week_number=1))

    wall.emit(
        db, WallEventType.bet_created, user_id, bet_id,
        meta={
            "habit": habit,
            "stake": stake_amount,
            "weeks": duration_weeks,
            "category": bet_category.value if bet_category else None,
        },
    )
    db.commit()
    db.refresh(bet)
    logger.info(
        "bet_created",
        bet_id=bet.id,
        user_id=user_id,
        stake=stake_amount,
        weeks=duration_weeks,
    )
    return bet


# ---------------------------------------------------------------------------
# checkin_week
# ---------------------------------------------------------------------------

def checkin_week(
    db: Session,
    user_id: str,
    bet_id: str,
    notify_buddy: bool = False,
    now: Optional[datetime] = None,
) -> CheckinOutcome:
    """
    Complete the current week's check-in.
    Final week → resolves the bet as won in the same transaction.
    Otherwise advances current_week and opens the next week's row.
    """
    now = now or utcnow()
    bet = _load_for_update(db, bet_id)
    if bet.user_id != user_id:
        raise NotBetOwnerError(bet_id)
    if bet.status != BetStatus.active:
        raise BetNotActiveError(bet_id, enum_value(bet.status))

    week = bet.current_week
    deadline = week_deadline(bet.started_at, week)
    if now > deadline:
        raise DeadlinePassedError(bet_id, week, deadline.isoformat())

    checkin = get_checkin(db, bet_id, week)
    if checkin is None:
        checkin = Checkin(bet_id=bet_id, week_number=week)
        db.add(checkin)
    elif checkin.completed:
        raise CheckinAlreadyCompletedError(bet_id, week)

    checkin.completed = True
    checkin.checked_in_at = now
    checkin.buddy_notified = bool(notify_buddy and bet.buddy_email)
    db.flush()

    won = False
    payout = 0
    if week >= bet.duration_weeks:
        won = settle_win(db, bet_id, now)
        payout = potential_payout(bet.stake_amount, bet.duration_weeks) if won else 0
    else:
        bet.current_week = week + 1
        db.add(Checkin(bet_id=bet_id, week_number=week + 1))
        if week == halfway_week(bet.duration_weeks):
            wall.emit(
                db, WallEventType.milestone, user_id, bet_id,
                meta={
                    "description": (
                        f"Halfway there: week {week} of {bet.duration_weeks} "
                        f"done for \"{bet.habit_description}\""
                    ),
                    "week": week,
                    "weeks": bet.duration_weeks,
                },
            )

    db.commit()
    db.refresh(bet)
    db.refresh(checkin)
    logger.info(
        "checkin_completed",
        bet_id=bet_id,
        user_id=user_id,
        week=week,
        won=won,
        buddy_notified=checkin.buddy_notified,
    )
    return CheckinOutcome(
        success=True,
        bet=bet,
        checkin=checkin,
        week=week,
        won=won,
        payout=payout,
    )


# ---------------------------------------------------------------------------
# Resolution: flush only
# ---------------------------------------------------------------------------

def _claim_terminal(db: Session, bet_id: str, new_status: BetStatus, now: datetime) -> Optional[Bet]:
    """Flip an active bet to `new_status`. Returns the bet, or None if it was not active."""
    db.flush()
    rows = (
        db.query(Bet)
        .filter(Bet.id == bet_id, Bet.status == BetStatus.active)
        .update(
            {Bet.status: new_status, Bet.completed_at: now},
            synchronize_session=False,
        )
    )
    if rows == 0:
        return None
    return db.get(Bet, bet_id, populate_existing=True)


def settle_win(db: Session, bet_id: str, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    bet = _claim_terminal(db, bet_id, BetStatus.won, now)
    if bet is None:
        return False

    payout = potential_payout(bet.stake_amount, bet.duration_weeks)
    owner = ledger.lock_profile(db, bet.user_id)
    ledger.credit(db, owner, payout, LedgerReason.bet_payout, bet_id=bet.id)

    supports = get_bet_supports(db, bet.id)
    for support in supports:
        support_payout = potential_payout(support.stake_amount, bet.duration_weeks)
        support.payout_amount = support_payout
        supporter = ledger.lock_profile(db, support.supporter_id)
        ledger.credit(db, supporter, support_payout, LedgerReason.support_payout, bet_id=bet.id)

    wall.emit(
        db, WallEventType.bet_won, bet.user_id, bet.id,
        meta={
            "habit": bet.habit_description,
            "payout": payout,
            "weeks": bet.duration_weeks,
            "supporters": len(supports),
        },
    )
    logger.info("bet_won", bet_id=bet.id, user_id=bet.user_id, payout=payout, supporters=len(supports))
    return True


def settle_loss(db: Session, bet_id: str, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    bet = _claim_terminal(db, bet_id, BetStatus.lost, now)
    if bet is None:
        return False

    supports = get_bet_supports(db, bet.id)
    for support in supports:
        support.payout_amount = 0
    db.flush()

    wall.emit(
        db, WallEventType.bet_lost, bet.user_id, bet.id,
        meta={
            "habit": bet.habit_description,
            "lost": bet.stake_amount,
            "failed_at_week": bet.current_week,
            "weeks": bet.duration_weeks,
        },
    )
    logger.info(
        "bet_lost",
        bet_id=bet.id,
        user_id=bet.user_id,
        lost=bet.stake_amount,
        failed_at_week=bet.current_week,
        supporters=len(supports),
    )
    return True


# ---------------------------------------------------------------------------
# Resolution: public, transactional
# ---------------------------------------------------------------------------

def resolve_bet_win(db: Session, bet_id: str, now: Optional[datetime] = None) -> bool:
    """Resolve an active bet as won. Returns False (no-op) if it was already resolved."""
    if db.get(Bet, bet_id) is None:
        raise BetNotFoundError(bet_id)
    resolved = settle_win(db, bet_id, now)
    db.commit()
    return resolved


def resolve_bet_loss(db: Session, bet_id: str, now: Optional[datetime] = None) -> bool:
    """Resolve an active bet as lost. Returns False (no-op) if it was already resolved."""
    if db.get(Bet, bet_id) is None:
        raise BetNotFoundError(bet_id)
    resolved = settle_loss(db, bet_id, now)
    db.commit()
    return resolved
