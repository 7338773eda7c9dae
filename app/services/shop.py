"""
Shop service: avatar and collectible purchases, active avatar selection.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    AlreadyOwnedError,
    AvatarNotFoundError,
    AvatarNotOwnedError,
    CollectibleNotFoundError,
)
from app.models.avatar import Avatar, UserAvatar
from app.models.collectible import Collectible, UserCollectible
from app.models.ledger import LedgerReason
from app.models.profile import Profile
from app.services import ledger

logger = structlog.get_logger(__name__)


@dataclass
class CatalogItem:
    item: Any           # Avatar | Collectible
    owned: bool


# ---------------------------------------------------------------------------
# Ownership helpers
# ---------------------------------------------------------------------------

def owns_avatar(db: Session, user_id: str, avatar_id: int) -> bool:
    return (
        db.query(UserAvatar.avatar_id)
        .filter(UserAvatar.user_id == user_id, UserAvatar.avatar_id == avatar_id)
        .first()
        is not None
    )


def owns_collectible(db: Session, user_id: str, collectible_id: int) -> bool:
    return (
        db.query(UserCollectible.collectible_id)
        .filter(
            UserCollectible.user_id == user_id,
            UserCollectible.collectible_id == collectible_id,
        )
        .first()
        is not None
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

def list_avatars(db: Session, user_id: str) -> list[CatalogItem]:
    owned = {
        row.avatar_id
        for row in db.query(UserAvatar.avatar_id).filter(UserAvatar.user_id == user_id).all()
    }
    avatars = db.query(Avatar).order_by(Avatar.price, Avatar.id).all()
    return [CatalogItem(item=a, owned=a.id in owned) for a in avatars]


def list_collectibles(
    db: Session, user_id: str, tier: Optional[str] = None
) -> list[CatalogItem]:
    owned = {
        row.collectible_id
        for row in db.query(UserCollectible.collectible_id)
        .filter(UserCollectible.user_id == user_id)
        .all()
    }
    q = db.query(Collectible)
    if tier:
        q = q.filter(Collectible.tier == tier)
    collectibles = q.order_by(Collectible.price, Collectible.id).all()
    return [CatalogItem(item=c, owned=c.id in owned) for c in collectibles]


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------

def purchase_avatar(db: Session, user_id: str, avatar_id: int) -> bool:
    """Debit the avatar's price and grant ownership. Commits."""
    avatar = db.get(Avatar, avatar_id)
    if avatar is None:
        raise AvatarNotFoundError(avatar_id)
    profile = ledger.lock_profile(db, user_id)
    if owns_avatar(db, user_id, avatar_id):
        raise AlreadyOwnedError("avatar", avatar_id)

    if avatar.price > 0:
        ledger.debit(
            db, profile, avatar.price, LedgerReason.avatar_purchase,
            reference=f"avatar:{avatar_id}",
        )
    db.add(UserAvatar(user_id=user_id, avatar_id=avatar_id))
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyOwnedError("avatar", avatar_id) from exc
    db.commit()
    logger.info("avatar_purchased", user_id=user_id, avatar_id=avatar_id, price=avatar.price)
    return True


def purchase_collectible(db: Session, user_id: str, collectible_id: int) -> bool:
    """Debit the collectible's price and grant ownership. Commits."""
    collectible = db.get(Collectible, collectible_id)
    if collectible is None:
        raise CollectibleNotFoundError(collectible_id)
    profile = ledger.lock_profile(db, user_id)
    if owns_collectible(db, user_id, collectible_id):
        raise AlreadyOwnedError("collectible", collectible_id)

    if collectible.price > 0:
        ledger.debit(
            db, profile, collectible.price, LedgerReason.collectible_purchase,
            reference=f"collectible:{collectible_id}",
        )
    db.add(UserCollectible(user_id=user_id, collectible_id=collectible_id))
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyOwnedError("collectible", collectible_id) from exc
    db.commit()
    logger.info(
        "collectible_purchased",
        user_id=user_id,
        collectible_id=collectible_id,
        price=collectible.price,
    )
    return True


def set_active_avatar(db: Session, user_id: str, avatar_id: int) -> bool:
    if db.get(Avatar, avatar_id) is None:
        raise AvatarNotFoundError(avatar_id)
    if not owns_avatar(db, user_id, avatar_id):
        raise AvatarNotOwnedError(avatar_id)
    profile = db.get(Profile, user_id)
    profile.active_avatar_id = avatar_id
    db.commit()
    return True


def get_active_avatar(db: Session, profile: Profile) -> Optional[Avatar]:
    if profile.active_avatar_id is None:
        return None
    return db.get(Avatar, profile.active_avatar_id)
