"""
Tests for the daily deadline sweep and the /cron endpoints.

The sweep looks at every active bet in the database, so assertions are
made on the bets each test creates rather than on global counts.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.config import settings
from app.core.clock import utcnow
from app.models.bet import BetStatus
from app.models.profile import Profile
from app.services import bets, deadline_sweep, supports
from app.services.deadline_sweep import SweepResult, is_overdue, run_deadline_sweep

T0 = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)
DAY = timedelta(days=1)


def _status(db, bet_id):
    db.expire_all()
    return bets.get_bet(db, bet_id).status


class TestSweepResult:
    def test_message_without_bets(self):
        assert SweepResult().message == "No active bets found"

    def test_message_with_bets(self):
        assert SweepResult(processed=5, lost=2).message == "Processed 5 active bets, 2 marked as lost"


class TestOverdue:
    def test_deadline_follows_current_week(self, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Floss", None, 20, 4, now=T0)
        assert not is_overdue(bet, T0 + 7 * DAY)
        assert is_overdue(bet, T0 + 7 * DAY + timedelta(seconds=1))

        bets.checkin_week(db, uid, bet.id, now=T0 + 2 * DAY)
        assert not is_overdue(bet, T0 + 10 * DAY)
        assert is_overdue(bet, T0 + 15 * DAY)


class TestRunDeadlineSweep:
    def test_missed_week_is_marked_lost(self, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Floss", None, 20, 4, now=T0)

        result = run_deadline_sweep(db, now=T0 + 8 * DAY)

        assert bet.id in result.lost_bet_ids
        assert result.lost >= 1
        assert result.processed >= 1
        assert _status(db, bet.id) == BetStatus.lost

    def test_bet_within_deadline_is_left_alone(self, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Floss", None, 20, 4, now=T0 + 30 * DAY)

        result = run_deadline_sweep(db, now=T0 + 31 * DAY)

        assert bet.id not in result.lost_bet_ids
        assert _status(db, bet.id) == BetStatus.active

    def test_completed_current_week_is_not_lost(self, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Floss", None, 20, 4, now=T0)
        row = bets.get_checkin(db, bet.id, 1)
        row.completed = True
        row.checked_in_at = T0 + DAY
        db.commit()

        result = run_deadline_sweep(db, now=T0 + 8 * DAY)

        assert bet.id not in result.lost_bet_ids
        assert _status(db, bet.id) == BetStatus.active

    def test_running_twice_is_harmless(self, db, make_user):
        uid = make_user()
        fan = make_user()
        bet = bets.create_bet(db, uid, "Floss", None, 20, 4, now=T0)
        supports.support_bet(db, fan, bet.id, 30, now=T0 + DAY)

        first = run_deadline_sweep(db, now=T0 + 8 * DAY)
        second = run_deadline_sweep(db, now=T0 + 9 * DAY)

        assert bet.id in first.lost_bet_ids
        assert bet.id not in second.lost_bet_ids
        db.expire_all()
        assert db.get(Profile, uid).balance == 980
        assert db.get(Profile, fan).balance == 970
        (support,) = bets.get_bet_supports(db, bet.id)
        assert support.payout_amount == 0

    def test_one_failure_does_not_block_the_others(self, db, make_user, monkeypatch):
        uid = make_user()
        broken = bets.create_bet(db, uid, "Broken", None, 20, 4, now=T0)
        healthy = bets.create_bet(db, uid, "Healthy", None, 20, 4, now=T0)
        real_settle_loss = deadline_sweep.settle_loss

        def flaky_settle_loss(db_, bet_id, now=None):
            if bet_id == broken.id:
                raise RuntimeError("boom")
            return real_settle_loss(db_, bet_id, now)

        monkeypatch.setattr(deadline_sweep, "settle_loss", flaky_settle_loss)
        result = run_deadline_sweep(db, now=T0 + 8 * DAY)

        assert broken.id in result.failed
        assert broken.id not in result.lost_bet_ids
        assert healthy.id in result.lost_bet_ids
        assert _status(db, broken.id) == BetStatus.active
        assert _status(db, healthy.id) == BetStatus.lost

        monkeypatch.setattr(deadline_sweep, "settle_loss", real_settle_loss)
        retry = run_deadline_sweep(db, now=T0 + 8 * DAY)
        assert broken.id in retry.lost_bet_ids


class TestCronEndpoints:
    def test_check_bets_marks_overdue_bet_lost(self, client, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Floss", None, 20, 2, now=utcnow() - 8 * DAY)

        r = client.get("/cron/check-bets")
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["lost"] >= 1
        assert body["message"].startswith("Processed ")
        assert _status(db, bet.id) == BetStatus.lost

    def test_production_requires_cron_secret(self, client, monkeypatch):
        monkeypatch.setattr(settings, "APP_ENV", "production")
        monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")

        r = client.get("/cron/check-bets")
        assert r.status_code == 401
        assert r.json()["code"] == "UNAUTHORIZED"

        r = client.get("/cron/check-bets", headers={"Authorization": "Bearer wrong"})
        assert r.status_code == 401

        r = client.get("/cron/check-bets", headers={"Authorization": "Bearer s3cret"})
        assert r.status_code == 200

    def test_production_without_configured_secret_rejects(self, client, monkeypatch):
        monkeypatch.setattr(settings, "APP_ENV", "production")
        monkeypatch.setattr(settings, "CRON_SECRET", "")
        r = client.get("/cron/check-bets")
        assert r.status_code == 401

    def test_resolve_win_endpoint_is_idempotent(self, client, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Floss", None, 20, 2, now=utcnow())

        r1 = client.post(f"/cron/bets/{bet.id}/resolve-win")
        assert r1.status_code == 200
        assert r1.json() == {"bet_id": bet.id, "resolved": True, "status": "won"}

        r2 = client.post(f"/cron/bets/{bet.id}/resolve-win")
        assert r2.json()["resolved"] is False

        db.expire_all()
        assert db.get(Profile, uid).balance == 1000 - 20 + 40

    def test_resolve_loss_endpoint(self, client, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Floss", None, 20, 2, now=utcnow())
        r = client.post(f"/cron/bets/{bet.id}/resolve-loss")
        assert r.status_code == 200
        assert r.json()["status"] == "lost"

    @pytest.mark.parametrize("outcome", ["resolve-win", "resolve-loss"])
    def test_resolve_unknown_bet_returns_404(self, client, outcome):
        r = client.post(f"/cron/bets/missing-bet/{outcome}")
        assert r.status_code == 404
        assert r.json()["code"] == "BET_NOT_FOUND"
