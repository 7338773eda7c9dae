"""
Profile router.

POST /profiles/me                : create profile (sign-up grant)
GET  /profiles/me                : own profile
POST /profiles/me/login-bonus    : claim the daily login bonus
GET  /profiles/me/ledger         : coin movements, newest first
PUT  /profiles/me/active-avatar  : select an owned avatar
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.enums import enum_value
from app.core.security import get_current_profile, get_current_user_id
from app.db.base import get_db
from app.models.ledger import LedgerEntry
from app.models.profile import Profile
from app.schemas.common import AUTH_RESPONSES
from app.schemas.profile import (
    ActiveAvatarOut,
    CreateProfileRequest,
    LedgerEntryResponse,
    LedgerListResponse,
    LoginBonusResponse,
    ProfileResponse,
    SetActiveAvatarRequest,
)
from app.services import ledger, profiles, shop

router = APIRouter(prefix="/profiles", tags=["profiles"], responses=AUTH_RESPONSES)


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _profile_to_response(db: Session, profile: Profile) -> ProfileResponse:
    avatar = shop.get_active_avatar(db, profile)
    return ProfileResponse(
        id=profile.id,
        display_name=profile.display_name,
        avatar_url=profile.avatar_url,
        balance=profile.balance,
        timezone=profile.timezone,
        active_avatar=(
            ActiveAvatarOut(id=avatar.id, emoji=avatar.emoji, name=avatar.name)
            if avatar else None
        ),
        last_login_bonus_at=(
            profile.last_login_bonus_at.isoformat() if profile.last_login_bonus_at else None
        ),
        bonus_available=not profiles.bonus_claimed_today(profile, utcnow()),
        created_at=profile.created_at.isoformat() if profile.created_at else "",
    )


def _ledger_to_response(entry: LedgerEntry) -> LedgerEntryResponse:
    return LedgerEntryResponse(
        id=entry.id,
        amount=entry.amount,
        balance_after=entry.balance_after,
        reason=enum_value(entry.reason),
        bet_id=entry.bet_id,
        reference=entry.reference,
        created_at=entry.created_at.isoformat() if entry.created_at else "",
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create the caller's profile",
    responses={409: {"description": "Profile already exists."}},
)
def create_my_profile(
    payload: CreateProfileRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Called once after sign-up. Grants the starting coins and posts a `signup` wall event."""
    profile = profiles.create_profile(
        db=db,
        user_id=user_id,
        display_name=payload.display_name,
        timezone_name=payload.timezone,
    )
    return _profile_to_response(db, profile)


@router.get("/me", response_model=ProfileResponse, summary="The caller's profile")
def get_my_profile(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return _profile_to_response(db, profile)


@router.post(
    "/me/login-bonus",
    response_model=LoginBonusResponse,
    summary="Claim the daily login bonus",
)
def claim_login_bonus(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """
    Credits the bonus once per calendar day in the profile's timezone.
    Returns `credited: 0` when today's bonus was already claimed.
    """
    credited = profiles.claim_login_bonus(db=db, user_id=profile.id)
    db.refresh(profile)
    return LoginBonusResponse(credited=credited, balance=profile.balance)


@router.get("/me/ledger", response_model=LedgerListResponse, summary="Coin movements, newest first")
def get_my_ledger(
    limit: int = Query(default=50, ge=1, le=200, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    total, items = ledger.get_ledger(db=db, user_id=profile.id, limit=limit, offset=offset)
    return LedgerListResponse(
        total=total,
        balance=profile.balance,
        items=[_ledger_to_response(e) for e in items],
    )


@router.put(
    "/me/active-avatar",
    response_model=ProfileResponse,
    summary="Select an owned avatar",
    responses={
        403: {"description": "Avatar not owned."},
        404: {"description": "Avatar not found."},
    },
)
def set_active_avatar(
    payload: SetActiveAvatarRequest,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    shop.set_active_avatar(db=db, user_id=profile.id, avatar_id=payload.avatar_id)
    db.refresh(profile)
    return _profile_to_response(db, profile)
