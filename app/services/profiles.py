"""
Profile service: sign-up grant and the daily login bonus.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import ensure_utc, utcnow
from app.core.errors import InvalidRequestError, ProfileAlreadyExistsError
from app.models.ledger import LedgerReason
from app.models.profile import Profile
from app.models.wall_event import WallEventType
from app.services import ledger, wall

logger = structlog.get_logger(__name__)

SIGNUP_GRANT = 1000
LOGIN_BONUS = 50


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def validate_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidRequestError(
            f"Unknown timezone: {name!r}", details={"field": "timezone"}
        ) from exc
    return name


def create_profile(
    db: Session,
    user_id: str,
    display_name: Optional[str] = None,
    timezone_name: str = "UTC",
) -> Profile:
    """Create the profile, grant the starting coins and post a signup event. Commits."""
    if db.get(Profile, user_id) is not None:
        raise ProfileAlreadyExistsError(user_id)
    tz = validate_timezone(timezone_name or "UTC")

    profile = Profile(id=user_id, display_name=display_name, balance=0, timezone=tz)
    db.add(profile)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ProfileAlreadyExistsError(user_id) from exc

    ledger.credit(db, profile, SIGNUP_GRANT, LedgerReason.signup_grant)
    wall.emit(
        db, WallEventType.signup, user_id, None,
        meta={"display_name": display_name},
    )
    db.commit()
    db.refresh(profile)
    logger.info("profile_created", user_id=user_id, balance=profile.balance)
    return profile


def bonus_claimed_today(profile: Profile, now: datetime) -> bool:
    """True when the last claim falls on the same calendar day as `now` in the profile's timezone."""
    last = ensure_utc(profile.last_login_bonus_at)
    if last is None:
        return False
    zone = _zone(profile.timezone)
    return last.astimezone(zone).date() == now.astimezone(zone).date()


def claim_login_bonus(db: Session, user_id: str, now: Optional[datetime] = None) -> int:
    """Credit the daily bonus once per local calendar day. Returns the amount credited (0 if already claimed)."""
    now = now or utcnow()
    profile = ledger.lock_profile(db, user_id)
    if bonus_claimed_today(profile, now):
        db.rollback()
        return 0

    ledger.credit(db, profile, LOGIN_BONUS, LedgerReason.login_bonus)
    profile.last_login_bonus_at = now
    db.commit()
    logger.info("login_bonus_claimed", user_id=user_id, amount=LOGIN_BONUS)
    return LOGIN_BONUS
