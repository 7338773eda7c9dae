"""
Shop router.

GET  /shop/avatars                       : avatar catalog with ownership
POST /shop/avatars/{id}/purchase         : buy an avatar
GET  /shop/collectibles                  : collectible catalog with ownership
POST /shop/collectibles/{id}/purchase    : buy a collectible
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.enums import enum_value
from app.core.security import get_current_profile
from app.db.base import get_db
from app.models.collectible import CollectibleTier
from app.models.profile import Profile
from app.schemas.common import AUTH_RESPONSES
from app.schemas.shop import (
    AvatarResponse,
    CollectibleListResponse,
    CollectibleResponse,
    PurchaseResponse,
)
from app.services import shop
from app.services.shop import CatalogItem

router = APIRouter(prefix="/shop", tags=["shop"], responses=AUTH_RESPONSES)


def _avatar_to_response(ci: CatalogItem) -> AvatarResponse:
    a = ci.item
    return AvatarResponse(
        id=a.id,
        emoji=a.emoji,
        name=a.name,
        category=enum_value(a.category),
        price=a.price,
        personality_voice=a.personality_voice,
        is_premium=a.is_premium,
        encouragement_messages=a.encouragement_messages,
        owned=ci.owned,
    )


def _collectible_to_response(ci: CatalogItem) -> CollectibleResponse:
    c = ci.item
    return CollectibleResponse(
        id=c.id,
        emoji=c.emoji,
        name=c.name,
        tier=enum_value(c.tier),
        price=c.price,
        owned=ci.owned,
    )


@router.get("/avatars", response_model=list[AvatarResponse], summary="Avatar catalog")
def list_avatars(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """All avatars ordered by price, each flagged with whether the caller owns it."""
    return [_avatar_to_response(ci) for ci in shop.list_avatars(db, profile.id)]


@router.post(
    "/avatars/{avatar_id}/purchase",
    response_model=PurchaseResponse,
    summary="Buy an avatar",
    responses={
        404: {"description": "Avatar not found."},
        409: {"description": "Already owned or insufficient balance."},
    },
)
def purchase_avatar(
    avatar_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ok = shop.purchase_avatar(db=db, user_id=profile.id, avatar_id=avatar_id)
    db.refresh(profile)
    return PurchaseResponse(success=ok, balance=profile.balance)


@router.get(
    "/collectibles",
    response_model=CollectibleListResponse,
    summary="Collectible catalog",
)
def list_collectibles(
    tier: Optional[CollectibleTier] = Query(default=None, description="Filter by tier."),
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    items = shop.list_collectibles(db, profile.id, tier=tier.value if tier else None)
    return CollectibleListResponse(
        total=len(items),
        owned=sum(1 for ci in items if ci.owned),
        items=[_collectible_to_response(ci) for ci in items],
    )


@router.post(
    "/collectibles/{collectible_id}/purchase",
    response_model=PurchaseResponse,
    summary="Buy a collectible",
    responses={
        404: {"description": "Collectible not found."},
        409: {"description": "Already owned or insufficient balance."},
    },
)
def purchase_collectible(
    collectible_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ok = shop.purchase_collectible(db=db, user_id=profile.id, collectible_id=collectible_id)
    db.refresh(profile)
    return PurchaseResponse(success=ok, balance=profile.balance)
