"""
Bets router.

POST /bets                  : create a bet (escrows the stake)
GET  /bets                  : the caller's bets (newest first)
GET  /bets/{id}             : bet detail with check-ins and supports
POST /bets/{id}/checkin     : complete the current week
POST /bets/{id}/supports    : co-stake on someone else's bet
"""
from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.enums import enum_value
from app.core.errors import BetOnYouException
from app.core.security import get_current_profile
from app.db.base import get_db
from app.models.bet import Bet, BetStatus
from app.models.checkin import Checkin
from app.models.profile import Profile
from app.models.support import Support
from app.schemas.common import AUTH_RESPONSES
from app.schemas.bet import (
    BetDetailResponse,
    BetListResponse,
    BetResponse,
    CheckinOut,
    CheckinRequest,
    CheckinResponse,
    CreateBetRequest,
    SupportOut,
    SupportRequest,
    SupportResponse,
)
from app.services import bets, buddy_email, supports

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/bets", tags=["bets"], responses=AUTH_RESPONSES)


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _iso(dt) -> Optional[str]:
    return dt.isoformat() if dt else None


def bet_to_response(bet: Bet) -> BetResponse:
    deadline = None
    if bet.status == BetStatus.active:
        deadline = bets.week_deadline(bet.started_at, bet.current_week).isoformat()
    return BetResponse(
        id=bet.id,
        user_id=bet.user_id,
        habit_description=bet.habit_description,
        category=enum_value(bet.category),
        stake_amount=bet.stake_amount,
        duration_weeks=bet.duration_weeks,
        current_week=bet.current_week,
        status=enum_value(bet.status),
        buddy_email=bet.buddy_email,
        buddy_relationship=enum_value(bet.buddy_relationship),
        potential_payout=bets.potential_payout(bet.stake_amount, bet.duration_weeks),
        week_deadline=deadline,
        started_at=_iso(bet.started_at) or "",
        completed_at=_iso(bet.completed_at),
        created_at=_iso(bet.created_at) or "",
    )


def _checkin_to_out(c: Checkin) -> CheckinOut:
    return CheckinOut(
        id=c.id,
        week_number=c.week_number,
        completed=c.completed,
        checked_in_at=_iso(c.checked_in_at),
        buddy_notified=c.buddy_notified,
    )


def _support_to_out(s: Support, duration_weeks: int) -> dict:
    return dict(
        id=s.id,
        bet_id=s.bet_id,
        supporter_id=s.supporter_id,
        stake_amount=s.stake_amount,
        payout_amount=s.payout_amount,
        potential_payout=bets.potential_payout(s.stake_amount, duration_weeks),
        created_at=_iso(s.created_at) or "",
    )


# ---------------------------------------------------------------------------
# POST /bets
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=BetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a bet",
    responses={
        409: {"description": "Insufficient balance."},
        422: {"description": "Validation error (stake, duration, habit, etc.)"},
    },
)
def create_bet(
    payload: CreateBetRequest,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """
    Escrow `stake_amount` from the caller's balance, open week 1 and post a
    `bet_created` event on the wall.

    Winning pays `stake_amount * duration_weeks`.
    """
    bet = bets.create_bet(
        db=db,
        user_id=profile.id,
        habit_description=payload.habit_description,
        category=payload.category,
        stake_amount=payload.stake_amount,
        duration_weeks=payload.duration_weeks,
        buddy_email=payload.buddy_email,
        buddy_relationship=payload.buddy_relationship,
    )
    return bet_to_response(bet)


# ---------------------------------------------------------------------------
# GET /bets, GET /bets/{id}
# ---------------------------------------------------------------------------

@router.get("", response_model=BetListResponse, summary="The caller's bets")
def list_my_bets(
    bet_status: Optional[BetStatus] = Query(
        default=None, alias="status", description="Filter by status. Omit for all."
    ),
    limit: int = Query(default=50, ge=1, le=200, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    total, items = bets.list_user_bets(
        db=db,
        user_id=profile.id,
        status=bet_status.value if bet_status else None,
        limit=limit,
        offset=offset,
    )
    return BetListResponse(total=total, items=[bet_to_response(b) for b in items])


@router.get(
    "/{bet_id}",
    response_model=BetDetailResponse,
    summary="Bet detail",
    responses={404: {"description": "Bet not found."}},
)
def get_bet(
    bet_id: str,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    bet = bets.get_bet(db, bet_id)
    base = bet_to_response(bet)
    return BetDetailResponse(
        **base.model_dump(),
        checkins=[_checkin_to_out(c) for c in bets.get_bet_checkins(db, bet.id)],
        supports=[
            SupportOut(**_support_to_out(s, bet.duration_weeks))
            for s in bets.get_bet_supports(db, bet.id)
        ],
    )


# ---------------------------------------------------------------------------
# POST /bets/{id}/checkin
# ---------------------------------------------------------------------------

@router.post(
    "/{bet_id}/checkin",
    response_model=CheckinResponse,
    summary="Complete the current week's check-in",
    responses={
        403: {"description": "Not the owner of the bet."},
        404: {"description": "Bet not found."},
        409: {"description": "Bet not active, week already checked in, or deadline passed."},
    },
)
def checkin(
    bet_id: str,
    payload: CheckinRequest,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """
    Mark the current week complete. The final week resolves the bet as won
    and pays out owner and supporters.

    With `notify_buddy`, the accountability buddy is emailed afterwards;
    an email failure does not undo the check-in.
    """
    outcome = bets.checkin_week(
        db=db,
        user_id=profile.id,
        bet_id=bet_id,
        notify_buddy=payload.notify_buddy,
    )

    email_sent = False
    if outcome.checkin.buddy_notified:
        try:
            buddy_email.send_buddy_checkin_email(db=db, bet_id=bet_id, user_id=profile.id)
            email_sent = True
        except BetOnYouException as exc:
            logger.warning("buddy_email_failed", bet_id=bet_id, code=exc.code)

    return CheckinResponse(
        success=outcome.success,
        week=outcome.week,
        won=outcome.won,
        payout=outcome.payout,
        buddy_email_sent=email_sent,
        bet=bet_to_response(outcome.bet),
    )


# ---------------------------------------------------------------------------
# POST /bets/{id}/supports
# ---------------------------------------------------------------------------

@router.post(
    "/{bet_id}/supports",
    response_model=SupportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Support someone else's bet",
    responses={
        403: {"description": "Cannot support your own bet."},
        404: {"description": "Bet not found."},
        409: {"description": "Bet not active, already supporting, window closed, or insufficient balance."},
    },
)
def support(
    bet_id: str,
    payload: SupportRequest,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """
    Escrow `stake_amount` on the bet. If the owner wins, the supporter is paid
    `stake_amount * duration_weeks`; if they lose, the stake is forfeited.
    Only bets younger than 14 days accept supporters.
    """
    s = supports.support_bet(
        db=db,
        supporter_id=profile.id,
        bet_id=bet_id,
        stake_amount=payload.stake_amount,
    )
    bet = bets.get_bet(db, bet_id)
    return SupportResponse(**_support_to_out(s, bet.duration_weeks))
