"""Budgets with derived spend, and once-per-session notifications."""

import pytest

from conftest import random_id, tx_body
from services.notification_service import SessionNotifier


def budget_body(category_id, amount=100.0, start="2026-10-01", end="2026-10-31"):
    return {"category_id": category_id, "budget_amount": amount, "start_date": start, "end_date": end}


@pytest.fixture
def budget(client, alice, groceries):
    res = client.post("/api/budgets", json=budget_body(groceries), headers=alice[1])
    assert res.status_code == 201
    return res.json()["budget"]


def spend_of(client, headers, budget_id):
    return client.get(f"/api/budgets/{budget_id}", headers=headers).json()["current_spend"]


class TestBudgetCrud:
    def test_new_budget_has_no_spend(self, client, alice, budget):
        got = client.get(f"/api/budgets/{budget['id']}", headers=alice[1]).json()
        assert got["current_spend"] == 0
        assert got["exceeded"] is False
        assert got["budget_amount"] == 100

    def test_end_before_start(self, client, alice, groceries):
        res = client.post("/api/budgets", json=budget_body(groceries, start="2026-10-31", end="2026-10-01"),
                          headers=alice[1])
        assert res.status_code == 400

    def test_amount_must_be_positive(self, client, alice, groceries):
        res = client.post("/api/budgets", json=budget_body(groceries, amount=0), headers=alice[1])
        assert res.status_code == 400

    def test_infinite_amount(self, client, alice, groceries):
        raw = (f'{{"category_id": "{groceries}", "budget_amount": 1e309, '
               f'"start_date": "2026-10-01", "end_date": "2026-10-31"}}')
        res = client.post("/api/budgets", content=raw, headers={**alice[1], "Content-Type": "application/json"})

        assert res.status_code == 400
        assert client.get("/api/budgets", headers=alice[1]).json() == []

    @pytest.mark.parametrize("query", ["start_date=2026-13-45", "end_date=2026-02-30"])
    def test_impossible_date_filter(self, client, alice, budget, query):
        res = client.get(f"/api/budgets?{query}", headers=alice[1])
        assert res.status_code == 400
        assert res.json()["error"] == "Invalid input data."

    def test_update(self, client, alice, groceries, budget):
        res = client.put(f"/api/budgets/{budget['id']}", json=budget_body(groceries, amount=40), headers=alice[1])
        assert res.status_code == 200
        assert res.json()["budget"]["budget_amount"] == 40

    def test_other_user_cannot_see_or_change(self, client, bob, groceries, budget):
        assert client.get(f"/api/budgets/{budget['id']}", headers=bob[1]).status_code == 404
        assert client.get("/api/budgets", headers=bob[1]).json() == []
        assert client.put(f"/api/budgets/{budget['id']}", json=budget_body(groceries), headers=bob[1]).status_code == 404
        assert client.delete(f"/api/budgets/{budget['id']}", headers=bob[1]).status_code == 404

    def test_delete(self, client, alice, budget):
        assert client.delete(f"/api/budgets/{budget['id']}", headers=alice[1]).status_code == 204
        assert client.get(f"/api/budgets/{budget['id']}", headers=alice[1]).status_code == 404

    def test_unknown_budget(self, client, alice):
        assert client.get(f"/api/budgets/{random_id()}", headers=alice[1]).status_code == 404

    def test_list_filters(self, client, alice, groceries, salary, budget):
        client.post("/api/budgets", json=budget_body(salary, start="2026-09-01", end="2026-09-30"), headers=alice[1])

        assert len(client.get("/api/budgets", headers=alice[1]).json()) == 2
        only = client.get(f"/api/budgets?category_id={salary}", headers=alice[1]).json()
        assert [b["category_id"] for b in only] == [salary]
        october = client.get("/api/budgets?start_date=2026-10-01", headers=alice[1]).json()
        assert [b["id"] for b in october] == [budget["id"]]


class TestCurrentSpend:
    def test_tracks_inserts_and_deletes(self, client, alice, groceries, budget):
        first = client.post("/api/transactions", json=tx_body(groceries, 30, "2026-10-03"), headers=alice[1]).json()
        assert spend_of(client, alice[1], budget["id"]) == 30

        client.post("/api/transactions", json=tx_body(groceries, 12.5, "2026-10-09"), headers=alice[1])
        assert spend_of(client, alice[1], budget["id"]) == 42.5

        client.delete(f"/api/transactions/{first['id']}", headers=alice[1])
        assert spend_of(client, alice[1], budget["id"]) == 12.5

    def test_range_is_inclusive(self, client, alice, groceries):
        september = client.post("/api/budgets", json=budget_body(groceries, start="2026-09-01", end="2026-09-30"),
                                headers=alice[1]).json()["budget"]
        for day in ("2026-08-31", "2026-09-01", "2026-09-30", "2026-10-01"):
            client.post("/api/transactions", json=tx_body(groceries, 10, day), headers=alice[1])
        assert spend_of(client, alice[1], september["id"]) == 20

    def test_other_category_is_ignored(self, client, alice, salary, budget):
        client.post("/api/transactions", json=tx_body(salary, 500, "2026-10-05"), headers=alice[1])
        assert spend_of(client, alice[1], budget["id"]) == 0

    def test_partner_spending_is_ignored(self, client, alice, bob, groceries, budget):
        res = client.post("/api/couple-relationships/request", json={"partner_email": "bob@example.com"},
                          headers=alice[1])
        client.put(f"/api/couple-relationships/{res.json()['relationship']['id']}/accept", headers=bob[1])
        client.post("/api/transactions", json=tx_body(groceries, 70, "2026-10-05"), headers=bob[1])

        assert spend_of(client, alice[1], budget["id"]) == 0

    def test_scheduled_entries_do_not_count(self, client, alice, groceries, budget):
        client.post("/api/transactions", json=tx_body(groceries, 80, "2026-10-20"), headers=alice[1])
        assert spend_of(client, alice[1], budget["id"]) == 0

    def test_every_transaction_type_counts(self, client, alice, groceries, budget):
        client.post("/api/transactions", json=tx_body(groceries, 30, "2026-10-03"), headers=alice[1])
        client.post("/api/transactions", json=tx_body(groceries, 5, "2026-10-04", type="income"), headers=alice[1])
        assert spend_of(client, alice[1], budget["id"]) == 35

    def test_exceeded_flag(self, client, alice, groceries, budget):
        client.post("/api/transactions", json=tx_body(groceries, 100, "2026-10-03"), headers=alice[1])
        assert client.get(f"/api/budgets/{budget['id']}", headers=alice[1]).json()["exceeded"] is False

        client.post("/api/transactions", json=tx_body(groceries, 0.01, "2026-10-04"), headers=alice[1])
        assert client.get(f"/api/budgets/{budget['id']}", headers=alice[1]).json()["exceeded"] is True


class TestNotifications:
    @pytest.fixture
    def overspent(self, client, alice, groceries, budget):
        client.post("/api/transactions", json=tx_body(groceries, 150, "2026-10-03"), headers=alice[1])

    def test_budget_alert_once_per_session(self, client, alice, budget, overspent):
        alerts = client.get("/api/notifications", headers=alice[1]).json()

        assert [a["type"] for a in alerts] == ["budget_exceeded"]
        assert alerts[0]["budget_id"] == budget["id"]
        assert alerts[0]["message"] == "Groceries budget exceeded! Spent 150.00 of 100.00"

        assert client.get("/api/notifications", headers=alice[1]).json() == []

    def test_new_session_is_notified_again(self, client, identity, alice, overspent):
        assert len(client.get("/api/notifications", headers=alice[1]).json()) == 1

        token = identity.create_token(alice[0], "alice@example.com")
        fresh = {"Authorization": f"Bearer {token}"}
        assert len(client.get("/api/notifications", headers=fresh).json()) == 1

    def test_budget_within_limit_is_silent(self, client, alice, groceries, budget):
        client.post("/api/transactions", json=tx_body(groceries, 20, "2026-10-03"), headers=alice[1])
        assert client.get("/api/notifications", headers=alice[1]).json() == []

    def test_upcoming_alert_once_per_session(self, client, alice, groceries):
        client.post("/api/transactions", json=tx_body(groceries, 20, "2026-10-19"), headers=alice[1])

        alerts = client.get("/api/notifications", headers=alice[1]).json()
        assert [a["type"] for a in alerts] == ["scheduled_upcoming"]
        assert len(alerts[0]["transactions"]) == 1

        assert client.get("/api/notifications", headers=alice[1]).json() == []

    def test_empty_upcoming_is_not_consumed(self, client, alice, groceries):
        assert client.get("/api/notifications", headers=alice[1]).json() == []

        client.post("/api/transactions", json=tx_body(groceries, 20, "2026-10-19"), headers=alice[1])
        assert [a["type"] for a in client.get("/api/notifications", headers=alice[1]).json()] == ["scheduled_upcoming"]

    def test_marks_are_in_memory_only(self, client, alice, notifier, overspent):
        client.get("/api/notifications", headers=alice[1])
        notifier.clear()
        assert len(client.get("/api/notifications", headers=alice[1]).json()) == 1


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestSessionNotifierExpiry:
    def test_marks_expire_after_token_lifetime(self):
        clock = FakeClock()
        notifier = SessionNotifier(ttl_seconds=3600, clock=clock)

        assert notifier.first_time("s1", "budget_exceeded", "b1") is True
        clock.now += 3599
        assert notifier.first_time("s1", "budget_exceeded", "b1") is False

        clock.now += 3601
        assert notifier.first_time("s1", "budget_exceeded", "b1") is True

    def test_stale_sessions_are_dropped(self):
        clock = FakeClock()
        notifier = SessionNotifier(ttl_seconds=60, clock=clock)
        for i in range(50):
            notifier.mark(f"session-{i}", "scheduled_upcoming", "u1")
        assert notifier.size() == 50

        clock.now += 61
        notifier.mark("fresh", "scheduled_upcoming", "u1")

        assert notifier.size() == 1
        assert not notifier.has_delivered("session-0", "scheduled_upcoming", "u1")
        assert notifier.has_delivered("fresh", "scheduled_upcoming", "u1")
