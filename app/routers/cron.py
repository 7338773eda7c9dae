"""
Scheduler-facing router. In production every call must carry
`Authorization: Bearer <CRON_SECRET>`.

GET  /cron/check-bets                : daily deadline sweep
POST /cron/bets/{id}/resolve-win     : resolve a bet as won
POST /cron/bets/{id}/resolve-loss    : resolve a bet as lost
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.enums import enum_value
from app.core.security import require_cron_secret
from app.db.base import get_db
from app.schemas.cron import ResolveResponse, SweepResponse
from app.services import bets
from app.services.deadline_sweep import run_deadline_sweep

router = APIRouter(
    prefix="/cron",
    tags=["cron"],
    dependencies=[Depends(require_cron_secret)],
)


@router.get(
    "/check-bets",
    response_model=SweepResponse,
    summary="Mark bets whose current week expired unchecked as lost",
    responses={401: {"description": "Missing or wrong cron secret (production only)."}},
)
def check_bets(db: Session = Depends(get_db)):
    """
    For every active bet: deadline = started_at + current_week * 7 days.
    Past the deadline with an open check-in row → `resolve_bet_loss`.
    Safe to run repeatedly.
    """
    result = run_deadline_sweep(db)
    return SweepResponse(
        success=True,
        message=result.message,
        processed=result.processed,
        lost=result.lost,
        failed=len(result.failed),
    )


@router.post("/bets/{bet_id}/resolve-win", response_model=ResolveResponse)
def resolve_win(bet_id: str, db: Session = Depends(get_db)):
    resolved = bets.resolve_bet_win(db, bet_id)
    bet = bets.get_bet(db, bet_id)
    return ResolveResponse(bet_id=bet_id, resolved=resolved, status=enum_value(bet.status))


@router.post("/bets/{bet_id}/resolve-loss", response_model=ResolveResponse)
def resolve_loss(bet_id: str, db: Session = Depends(get_db)):
    resolved = bets.resolve_bet_loss(db, bet_id)
    bet = bets.get_bet(db, bet_id)
    return ResolveResponse(bet_id=bet_id, resolved=resolved, status=enum_value(bet.status))
