"""
Integration tests for the HTTP surface: health and the /bets endpoints.
"""
import pytest


@pytest.fixture()
def bet_payload():
    return {
        "habit_description": "Go to the gym 3 times per week",
        "category": "health",
        "stake_amount": 100,
        "duration_weeks": 4,
    }


class TestHealth:
    def test_health_ok(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["db"] == "ok"


class TestCreateBet:
    def test_create_returns_201(self, client, make_user, auth, bet_payload):
        headers = auth(make_user())
        r = client.post("/bets", json=bet_payload, headers=headers)
        assert r.status_code == 201
        data = r.json()
        assert data["status"] == "active"
        assert data["current_week"] == 1
        assert data["potential_payout"] == 400
        assert data["week_deadline"] is not None
        assert data["category"] == "health"
        assert data["completed_at"] is None

        profile = client.get("/profiles/me", headers=headers).json()
        assert profile["balance"] == 900

    def test_blank_buddy_email_is_ignored(self, client, make_user, auth, bet_payload):
        r = client.post(
            "/bets",
            json={**bet_payload, "buddy_email": "  ", "buddy_relationship": "friend"},
            headers=auth(make_user()),
        )
        assert r.status_code == 201
        assert r.json()["buddy_email"] is None
        assert r.json()["buddy_relationship"] is None

    def test_invalid_buddy_email_rejected(self, client, make_user, auth, bet_payload):
        r = client.post(
            "/bets",
            json={**bet_payload, "buddy_email": "not-an-email"},
            headers=auth(make_user()),
        )
        assert r.status_code == 422

    def test_requires_profile(self, client, auth, bet_payload):
        r = client.post("/bets", json=bet_payload, headers=auth("user-no-profile"))
        assert r.status_code == 404
        assert r.json()["code"] == "PROFILE_NOT_FOUND"


class TestListAndDetail:
    def test_list_only_own_bets_with_status_filter(self, client, make_user, auth, bet_payload):
        me = auth(make_user())
        other = auth(make_user())
        first = client.post("/bets", json=bet_payload, headers=me).json()
        client.post("/bets", json={**bet_payload, "stake_amount": 20}, headers=me)
        client.post("/bets", json=bet_payload, headers=other)
        client.post(f"/cron/bets/{first['id']}/resolve-loss")

        body = client.get("/bets", headers=me).json()
        assert body["total"] == 2

        lost = client.get("/bets?status=lost", headers=me).json()
        assert [b["id"] for b in lost["items"]] == [first["id"]]
        assert lost["items"][0]["week_deadline"] is None

    def test_invalid_status_filter(self, client, make_user, auth):
        r = client.get("/bets?status=pending", headers=auth(make_user()))
        assert r.status_code == 422

    def test_detail_includes_checkins_and_supports(self, client, make_user, auth, bet_payload):
        owner = auth(make_user())
        fan_headers = auth(make_user())
        bet = client.post("/bets", json=bet_payload, headers=owner).json()

        r = client.post(f"/bets/{bet['id']}/supports", json={"stake_amount": 30}, headers=fan_headers)
        assert r.status_code == 201
        assert r.json()["potential_payout"] == 120
        assert r.json()["payout_amount"] is None

        detail = client.get(f"/bets/{bet['id']}", headers=fan_headers).json()
        assert [c["week_number"] for c in detail["checkins"]] == [1]
        assert detail["checkins"][0]["completed"] is False
        assert len(detail["supports"]) == 1
        assert detail["supports"][0]["stake_amount"] == 30

    def test_unknown_bet_returns_404(self, client, make_user, auth):
        r = client.get("/bets/does-not-exist", headers=auth(make_user()))
        assert r.status_code == 404
        assert r.json()["code"] == "BET_NOT_FOUND"


class TestCheckinEndpoint:
    def test_checkin_flow_to_win(self, client, make_user, auth, bet_payload):
        headers = auth(make_user())
        bet = client.post(
            "/bets", json={**bet_payload, "duration_weeks": 2}, headers=headers
        ).json()

        r1 = client.post(f"/bets/{bet['id']}/checkin", json={}, headers=headers)
        assert r1.status_code == 200
        assert r1.json()["won"] is False
        assert r1.json()["bet"]["current_week"] == 2

        r2 = client.post(f"/bets/{bet['id']}/checkin", json={}, headers=headers)
        assert r2.status_code == 200
        body = r2.json()
        assert body["won"] is True
        assert body["payout"] == 200
        assert body["bet"]["status"] == "won"

        r3 = client.post(f"/bets/{bet['id']}/checkin", json={}, headers=headers)
        assert r3.status_code == 409
        assert r3.json()["code"] == "BET_NOT_ACTIVE"

        assert client.get("/profiles/me", headers=headers).json()["balance"] == 1100

    def test_non_owner_gets_403(self, client, make_user, auth, bet_payload):
        bet = client.post("/bets", json=bet_payload, headers=auth(make_user())).json()
        r = client.post(f"/bets/{bet['id']}/checkin", json={}, headers=auth(make_user()))
        assert r.status_code == 403
        assert r.json()["code"] == "NOT_BET_OWNER"


class TestSupportEndpoint:
    def test_own_bet_rejected(self, client, make_user, auth, bet_payload):
        headers = auth(make_user())
        bet = client.post("/bets", json=bet_payload, headers=headers).json()
        r = client.post(f"/bets/{bet['id']}/supports", json={"stake_amount": 30}, headers=headers)
        assert r.status_code == 403
        assert r.json()["code"] == "CANNOT_SUPPORT_OWN_BET"

    def test_second_support_rejected(self, client, make_user, auth, bet_payload):
        bet = client.post("/bets", json=bet_payload, headers=auth(make_user())).json()
        fan = auth(make_user())
        client.post(f"/bets/{bet['id']}/supports", json={"stake_amount": 30}, headers=fan)
        r = client.post(f"/bets/{bet['id']}/supports", json={"stake_amount": 30}, headers=fan)
        assert r.status_code == 409
        assert r.json()["code"] == "ALREADY_SUPPORTING"

    def test_stake_out_of_range(self, client, make_user, auth, bet_payload):
        bet = client.post("/bets", json=bet_payload, headers=auth(make_user())).json()
        r = client.post(
            f"/bets/{bet['id']}/supports", json={"stake_amount": 600}, headers=auth(make_user())
        )
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"
