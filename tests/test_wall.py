"""
Tests for the public wall feed.
"""
from datetime import timedelta

from app.core.clock import utcnow
from app.core.enums import enum_value
from app.models.wall_event import WallEventType
from app.services import bets, shop, wall
from app.services.wall import list_wall_events, parse_metadata


def _find(items, bet_id, event_type):
    return next(
        i for i in items if i["bet_id"] == bet_id and i["event_type"] == event_type
    )


class TestWallEndpoint:
    def test_is_public(self, client):
        r = client.get("/wall")
        assert r.status_code == 200
        body = r.json()
        assert "total" in body
        assert isinstance(body["items"], list)

    def test_new_bet_is_supportable(self, client, db, make_user):
        uid = make_user("Sam")
        bet = bets.create_bet(db, uid, "Cook at home", "health", 60, 5)

        body = client.get("/wall?event_type=bet_created&limit=200").json()
        item = _find(body["items"], bet.id, "bet_created")
        assert item["supportable"] is True
        assert item["display_name"] == "Sam"
        assert item["metadata"] == {
            "habit": "Cook at home", "stake": 60, "weeks": 5, "category": "health",
        }
        assert item["bet"]["status"] == "active"
        assert item["bet"]["stake_amount"] == 60
        assert {i["event_type"] for i in body["items"]} == {"bet_created"}

    def test_resolved_bet_is_not_supportable(self, client, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Cook at home", None, 60, 5)
        bets.resolve_bet_loss(db, bet.id)

        body = client.get("/wall?limit=200").json()
        assert _find(body["items"], bet.id, "bet_created")["supportable"] is False
        lost = _find(body["items"], bet.id, "bet_lost")
        assert lost["metadata"]["lost"] == 60
        assert lost["supportable"] is False

    def test_bet_past_support_window_is_not_supportable(self, client, db, make_user):
        uid = make_user()
        bet = bets.create_bet(db, uid, "Cook", None, 60, 5, now=utcnow() - timedelta(days=14, minutes=1))
        body = client.get("/wall?event_type=bet_created&limit=200").json()
        assert _find(body["items"], bet.id, "bet_created")["supportable"] is False

    def test_invalid_event_type(self, client):
        assert client.get("/wall?event_type=party").status_code == 422

    def test_pagination_limit(self, client, make_user):
        make_user()
        make_user()
        body = client.get("/wall?limit=1").json()
        assert len(body["items"]) == 1
        assert body["total"] >= 2


class TestWallService:
    def test_avatar_emoji_follows_active_avatar(self, db, make_user, catalog):
        uid = make_user("Kim")
        chick = catalog["avatars"]["Chick"]
        shop.purchase_avatar(db, uid, chick)
        shop.set_active_avatar(db, uid, chick)

        _, items = list_wall_events(db, event_type="signup", limit=200)
        (mine,) = [i for i in items if i.event.user_id == uid]
        assert mine.avatar_emoji == "🐣"
        assert mine.display_name == "Kim"
        assert mine.metadata == {"display_name": "Kim"}
        assert mine.supportable is False

    def test_parse_metadata_tolerates_garbage(self):
        assert parse_metadata(None) is None
        assert parse_metadata("not json") is None
        assert parse_metadata('{"a": 1}') == {"a": 1}

    def test_events_written_back_to_back_come_newest_first(self, db, make_user):
        users = [make_user(f"Runner {n}") for n in range(10)]
        for uid in users:
            bets.create_bet(db, uid, "Run 5k", "health", 20, 2)

        _, items = list_wall_events(db, limit=1000)
        for uid in users:
            mine = [i.event.event_type for i in items if i.event.user_id == uid]
            assert [enum_value(t) for t in mine] == ["bet_created", "signup"]

    def test_ids_are_monotonic_and_break_ties(self, db, make_user):
        uid = make_user()
        emitted = [
            wall.emit(db, WallEventType.milestone, uid, None, {"week": week})
            for week in range(1, 6)
        ]
        db.commit()
        ids = [e.id for e in emitted]
        assert ids == sorted(ids)
        assert len(set(ids)) == 5

        _, items = list_wall_events(db, event_type="milestone", limit=1000)
        mine = [i.event.id for i in items if i.event.user_id == uid]
        assert mine == list(reversed(ids))
