"""
Tests for support staking: eligibility rules, the 14-day window and
supporter payouts on win/loss.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import (
    AlreadySupportingError,
    BetNotActiveError,
    BetNotFoundError,
    CannotSupportOwnBetError,
    InsufficientBalanceError,
    InvalidStakeError,
    SupportWindowClosedError,
)
from app.models.ledger import LedgerEntry, LedgerReason
from app.models.profile import Profile
from app.services import bets, supports
from app.services.supports import SupportBlock, support_block_reason

T0 = datetime(2026, 4, 6, 12, 0, tzinfo=timezone.utc)
DAY = timedelta(days=1)


def _balance(db, user_id):
    db.expire_all()
    return db.get(Profile, user_id).balance


@pytest.fixture()
def owner_bet(db, make_user):
    owner = make_user("Owner")
    bet = bets.create_bet(db, owner, "Practice guitar", "creative", 100, 3, now=T0)
    return owner, bet


class TestEligibility:
    def test_own_bet(self, db, owner_bet):
        owner, bet = owner_bet
        assert support_block_reason(bet, owner, T0) == SupportBlock.OWN_BET

    def test_open_within_window(self, db, owner_bet):
        _, bet = owner_bet
        assert support_block_reason(bet, "someone-else", T0 + 13 * DAY) is None

    def test_window_closes_at_fourteen_days(self, db, owner_bet):
        _, bet = owner_bet
        assert support_block_reason(bet, "someone-else", T0 + 14 * DAY) == SupportBlock.WINDOW_CLOSED

    def test_already_supporting_wins_over_window(self, db, owner_bet):
        _, bet = owner_bet
        reason = support_block_reason(bet, "x", T0 + 20 * DAY, already_supporting=True)
        assert reason == SupportBlock.ALREADY


class TestSupportBet:
    def test_escrows_supporter_stake(self, db, make_user, owner_bet):
        _, bet = owner_bet
        fan = make_user("Fan")
        support = supports.support_bet(db, fan, bet.id, 40, now=T0 + DAY)

        assert support.stake_amount == 40
        assert support.payout_amount is None
        assert _balance(db, fan) == 960
        entry = (
            db.query(LedgerEntry)
            .filter(LedgerEntry.user_id == fan, LedgerEntry.reason == LedgerReason.support_stake)
            .one()
        )
        assert entry.amount == -40
        assert entry.bet_id == bet.id

    def test_cannot_support_own_bet(self, db, owner_bet):
        owner, bet = owner_bet
        with pytest.raises(CannotSupportOwnBetError):
            supports.support_bet(db, owner, bet.id, 40, now=T0)

    def test_only_once_per_bet(self, db, make_user, owner_bet):
        _, bet = owner_bet
        fan = make_user()
        supports.support_bet(db, fan, bet.id, 40, now=T0 + DAY)
        with pytest.raises(AlreadySupportingError):
            supports.support_bet(db, fan, bet.id, 40, now=T0 + DAY)
        assert _balance(db, fan) == 960

    def test_window_closed(self, db, make_user, owner_bet):
        _, bet = owner_bet
        fan = make_user()
        with pytest.raises(SupportWindowClosedError):
            supports.support_bet(db, fan, bet.id, 40, now=T0 + 14 * DAY)
        db.rollback()
        assert _balance(db, fan) == 1000

    def test_inactive_bet(self, db, make_user, owner_bet):
        _, bet = owner_bet
        bets.resolve_bet_loss(db, bet.id, now=T0 + DAY)
        fan = make_user()
        with pytest.raises(BetNotActiveError):
            supports.support_bet(db, fan, bet.id, 40, now=T0 + 2 * DAY)

    def test_unknown_bet(self, db, make_user):
        fan = make_user()
        with pytest.raises(BetNotFoundError):
            supports.support_bet(db, fan, "missing", 40, now=T0)

    @pytest.mark.parametrize("stake", [0, 9, 501])
    def test_stake_bounds(self, db, make_user, owner_bet, stake):
        _, bet = owner_bet
        fan = make_user()
        with pytest.raises(InvalidStakeError):
            supports.support_bet(db, fan, bet.id, stake, now=T0)

    def test_insufficient_balance(self, db, make_user, owner_bet):
        _, bet = owner_bet
        fan = make_user()
        for _ in range(2):
            bets.create_bet(db, fan, "Drain", None, 495, 2, now=T0)
        with pytest.raises(InsufficientBalanceError):
            supports.support_bet(db, fan, bet.id, 20, now=T0 + DAY)
        db.rollback()
        assert supports.find_support(db, bet.id, fan) is None
        assert _balance(db, fan) == 10


class TestSupporterPayouts:
    def test_supporters_paid_stake_times_weeks_on_win(self, db, make_user, owner_bet):
        owner, bet = owner_bet
        fan_a = make_user()
        fan_b = make_user()
        supports.support_bet(db, fan_a, bet.id, 50, now=T0 + DAY)
        supports.support_bet(db, fan_b, bet.id, 10, now=T0 + DAY)

        assert bets.resolve_bet_win(db, bet.id, now=T0 + 2 * DAY) is True

        assert _balance(db, owner) == 1000 - 100 + 300
        assert _balance(db, fan_a) == 1000 - 50 + 150
        assert _balance(db, fan_b) == 1000 - 10 + 30
        payouts = {s.supporter_id: s.payout_amount for s in bets.get_bet_supports(db, bet.id)}
        assert payouts == {fan_a: 150, fan_b: 30}

    def test_supporters_lose_stake_on_loss(self, db, make_user, owner_bet):
        _, bet = owner_bet
        fan = make_user()
        supports.support_bet(db, fan, bet.id, 50, now=T0 + DAY)

        assert bets.resolve_bet_loss(db, bet.id, now=T0 + 8 * DAY) is True

        assert _balance(db, fan) == 950
        (support,) = bets.get_bet_supports(db, bet.id)
        assert support.payout_amount == 0

    def test_repeated_win_does_not_pay_supporters_twice(self, db, make_user, owner_bet):
        _, bet = owner_bet
        fan = make_user()
        supports.support_bet(db, fan, bet.id, 50, now=T0 + DAY)
        bets.resolve_bet_win(db, bet.id, now=T0 + 2 * DAY)
        bets.resolve_bet_win(db, bet.id, now=T0 + 2 * DAY)
        assert _balance(db, fan) == 1100
