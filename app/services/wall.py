"""
Wall service: append-only public activity feed.

emit(db, event_type, user_id, bet_id, meta)    → WallEvent (flush only)
list_wall_events(db, event_type, limit, offset) → (total, list[WallItem])
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.models.avatar import Avatar
from app.models.bet import Bet
from app.models.profile import Profile
from app.models.wall_event import WallEvent, WallEventType
from app.services.supports import support_block_reason


@dataclass
class WallItem:
    event: WallEvent
    metadata: Optional[dict[str, Any]]
    display_name: Optional[str]
    avatar_emoji: Optional[str]
    bet: Optional[Bet]
    supportable: bool


def emit(
    db: Session,
    event_type: WallEventType,
    user_id: Optional[str],
    bet_id: Optional[str],
    meta: dict[str, Any],
) -> WallEvent:
    event = WallEvent(
        event_type=event_type,
        user_id=user_id,
        bet_id=bet_id,
        event_metadata=json.dumps(meta, default=str),
        created_at=utcnow(),
    )
    db.add(event)
    db.flush()
    return event


def parse_metadata(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return None


def list_wall_events(
    db: Session,
    event_type: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    now: Optional[datetime] = None,
) -> tuple[int, list[WallItem]]:
    """Return (total, page) of wall events, newest first, joined with author and bet."""
    now = now or utcnow()
    q = db.query(WallEvent)
    if event_type:
        q = q.filter(WallEvent.event_type == event_type)
    total = q.count()
    events = (
        q.order_by(WallEvent.created_at.desc(), WallEvent.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )

    user_ids = {e.user_id for e in events if e.user_id}
    bet_ids = {e.bet_id for e in events if e.bet_id}
    profiles = {
        p.id: p for p in db.query(Profile).filter(Profile.id.in_(user_ids)).all()
    } if user_ids else {}
    bets = {
        b.id: b for b in db.query(Bet).filter(Bet.id.in_(bet_ids)).all()
    } if bet_ids else {}
    avatar_ids = {p.active_avatar_id for p in profiles.values() if p.active_avatar_id}
    emojis = {
        a.id: a.emoji for a in db.query(Avatar).filter(Avatar.id.in_(avatar_ids)).all()
    } if avatar_ids else {}

    items = []
    for ev in events:
        profile = profiles.get(ev.user_id) if ev.user_id else None
        bet = bets.get(ev.bet_id) if ev.bet_id else None
        supportable = (
            ev.event_type == WallEventType.bet_created
            and bet is not None
            and support_block_reason(bet, supporter_id=None, now=now) is None
        )
        items.append(WallItem(
            event=ev,
            metadata=parse_metadata(ev.event_metadata),
            display_name=profile.display_name if profile else None,
            avatar_emoji=emojis.get(profile.active_avatar_id) if profile else None,
            bet=bet,
            supportable=supportable,
        ))
    return total, items
