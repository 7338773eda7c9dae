"""
Ledger service: the only code that changes `profiles.balance`.

Public API
----------
lock_profile(db, user_id)                      → Profile   (SELECT ... FOR UPDATE)
credit(db, profile, amount, reason, ...)       → LedgerEntry
debit(db, profile, amount, reason, ...)        → LedgerEntry  (raises on overdraft)
get_ledger(db, user_id, limit, offset)         → (total, entries)

Every call writes exactly one LedgerEntry and flushes; callers commit.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import InsufficientBalanceError, ProfileNotFoundError
from app.models.ledger import LedgerEntry, LedgerReason
from app.models.profile import Profile


def lock_profile(db: Session, user_id: str) -> Profile:
    """Load the profile row with a write lock held until the transaction ends."""
    profile = (
        db.query(Profile)
        .filter(Profile.id == user_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if profile is None:
        raise ProfileNotFoundError(user_id)
    return profile


def _post(
    db: Session,
    profile: Profile,
    amount: int,
    reason: LedgerReason,
    bet_id: Optional[str],
    reference: Optional[str],
) -> LedgerEntry:
    profile.balance = profile.balance + amount
    entry = LedgerEntry(
        user_id=profile.id,
        amount=amount,
        balance_after=profile.balance,
        reason=reason,
        bet_id=bet_id,
        reference=reference,
    )
    db.add(entry)
    db.flush()
    return entry


def credit(
    db: Session,
    profile: Profile,
    amount: int,
    reason: LedgerReason,
    bet_id: Optional[str] = None,
    reference: Optional[str] = None,
) -> LedgerEntry:
    if amount <= 0:
        raise ValueError(f"credit amount must be positive, got {amount}")
    return _post(db, profile, amount, reason, bet_id, reference)


def debit(
    db: Session,
    profile: Profile,
    amount: int,
    reason: LedgerReason,
    bet_id: Optional[str] = None,
    reference: Optional[str] = None,
) -> LedgerEntry:
    if amount <= 0:
        raise ValueError(f"debit amount must be positive, got {amount}")
    if profile.balance < amount:
        raise InsufficientBalanceError(required=amount, balance=profile.balance)
    return _post(db, profile, -amount, reason, bet_id, reference)


def ledger_sum(db: Session, user_id: str) -> int:
    return int(
        db.query(func.coalesce(func.sum(LedgerEntry.amount), 0))
        .filter(LedgerEntry.user_id == user_id)
        .scalar()
    )


def get_ledger(
    db: Session,
    user_id: str,
    limit: int = 50,
    offset: int = 0,
) -> tuple[int, list[LedgerEntry]]:
    """Return (total, page) of a user's ledger entries, newest first."""
    q = db.query(LedgerEntry).filter(LedgerEntry.user_id == user_id)
    total = q.count()
    items = (
        q.order_by(LedgerEntry.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return total, items
