"""
Wall router.

GET /wall   : public activity feed (paginated, newest first)
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.enums import enum_value
from app.db.base import get_db
from app.models.wall_event import WallEventType
from app.schemas.wall import WallBetSummary, WallEventResponse, WallListResponse
from app.services.wall import WallItem, list_wall_events

router = APIRouter(prefix="/wall", tags=["wall"])


def _item_to_response(item: WallItem) -> WallEventResponse:
    ev = item.event
    bet = item.bet
    return WallEventResponse(
        id=ev.id,
        event_type=enum_value(ev.event_type),
        user_id=ev.user_id,
        display_name=item.display_name,
        avatar_emoji=item.avatar_emoji,
        bet_id=ev.bet_id,
        bet=WallBetSummary(
            id=bet.id,
            user_id=bet.user_id,
            status=enum_value(bet.status),
            stake_amount=bet.stake_amount,
            duration_weeks=bet.duration_weeks,
            current_week=bet.current_week,
            created_at=bet.created_at.isoformat() if bet.created_at else "",
        ) if bet else None,
        metadata=item.metadata,
        supportable=item.supportable,
        created_at=ev.created_at.isoformat() if ev.created_at else "",
    )


@router.get(
    "",
    response_model=WallListResponse,
    summary="Public activity feed (newest first)",
)
def list_wall(
    event_type: Optional[WallEventType] = Query(
        default=None,
        description="Filter by event type. Omit for all.",
        examples=["bet_created"],
    ),
    limit: int = Query(default=50, ge=1, le=200, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    db: Session = Depends(get_db),
):
    """
    ### Event types
    | Type | Metadata |
    |---|---|
    | `signup`      | `display_name` |
    | `bet_created` | `habit`, `stake`, `weeks`, `category` |
    | `bet_won`     | `habit`, `payout`, `weeks`, `supporters` |
    | `bet_lost`    | `habit`, `lost`, `failed_at_week`, `weeks` |
    | `milestone`   | `description`, `week`, `weeks` |
    """
    total, items = list_wall_events(
        db=db,
        event_type=event_type.value if event_type else None,
        limit=limit,
        offset=offset,
    )
    return WallListResponse(total=total, items=[_item_to_response(i) for i in items])
