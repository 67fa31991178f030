"""Pairing lifecycle, couple scope and the couple dashboard."""

import pytest

from conftest import random_id, tx_body
from errors import ConflictError, UpstreamError


def send_request(client, headers, email):
    return client.post("/api/couple-relationships/request", json={"partner_email": email}, headers=headers)


@pytest.fixture
def pending(client, alice, bob):
    res = send_request(client, alice[1], "bob@example.com")
    assert res.status_code == 201
    return res.json()["relationship"]


@pytest.fixture
def paired(client, bob, pending):
    res = client.put(f"/api/couple-relationships/{pending['id']}/accept", headers=bob[1])
    assert res.status_code == 200
    return res.json()["relationship"]


def statuses(client, headers):
    return [r["status"] for r in client.get("/api/couple-relationships", headers=headers).json()]


class TestRequest:
    def test_creates_pending_relationship(self, client, alice, bob, pending):
        assert pending["user1_id"] == alice[0]
        assert pending["user2_id"] == bob[0]
        assert pending["status"] == "pending"
        assert "pair_key" not in pending

    def test_creates_placeholder_profile(self, client, bob, pending):
        profile = client.get("/api/profile", headers=bob[1]).json()
        assert profile == {"full_name": "bob", "avatar_url": None}

    def test_keeps_existing_profile(self, client, alice, bob):
        client.put("/api/profile", json={"full_name": "Robert"}, headers=bob[1])
        send_request(client, alice[1], "bob@example.com")
        assert client.get("/api/profile", headers=bob[1]).json()["full_name"] == "Robert"

    def test_email_lookup_ignores_case(self, client, alice, bob):
        assert send_request(client, alice[1], "Bob@Example.com").status_code == 201

    def test_unknown_email(self, client, alice):
        res = send_request(client, alice[1], "nobody@example.com")
        assert res.status_code == 404
        assert res.json() == {"error": "Partner not found."}

    def test_self_request(self, client, alice):
        res = send_request(client, alice[1], "alice@example.com")
        assert res.status_code == 400

    def test_invalid_email(self, client, alice):
        assert send_request(client, alice[1], "not-an-email").status_code == 400

    def test_duplicate_same_direction(self, client, alice, pending):
        res = send_request(client, alice[1], "bob@example.com")
        assert res.status_code == 409
        assert res.json() == {"error": "A relationship or request already exists with this user."}

    def test_duplicate_reverse_direction(self, client, bob, pending):
        assert send_request(client, bob[1], "alice@example.com").status_code == 409

    def test_duplicate_after_accept(self, client, bob, paired):
        assert send_request(client, bob[1], "alice@example.com").status_code == 409

    def test_failed_insert_removes_placeholder_profile(self, client, store, alice, bob):
        original = store.handle.insert

        def failing_insert(table, data):
            if table == "couple_relationships":
                raise UpstreamError("connection reset")
            return original(table, data)

        store.handle.insert = failing_insert

        res = send_request(client, alice[1], "bob@example.com")

        assert res.status_code == 500
        assert res.json() == {"error": "Could not send the connection request."}
        assert store.handle.select("profiles", filters={"id": bob[0]}) == []

    def test_failed_insert_keeps_preexisting_profile(self, client, store, alice, bob):
        client.put("/api/profile", json={"full_name": "Robert"}, headers=bob[1])
        original = store.handle.insert

        def failing_insert(table, data):
            if table == "couple_relationships":
                raise UpstreamError("connection reset")
            return original(table, data)

        store.handle.insert = failing_insert

        assert send_request(client, alice[1], "bob@example.com").status_code == 500
        assert store.handle.select("profiles", filters={"id": bob[0]})[0]["full_name"] == "Robert"


class TestPairUniqueness:
    def test_store_rejects_second_row_for_pair(self, store, alice, bob):
        handle = store.admin()
        handle.insert("couple_relationships", {"user1_id": alice[0], "user2_id": bob[0], "status": "pending"})

        with pytest.raises(ConflictError):
            handle.insert("couple_relationships", {"user1_id": bob[0], "user2_id": alice[0], "status": "pending"})

    def test_store_rejects_self_pair(self, store, alice):
        with pytest.raises(UpstreamError):
            store.admin().insert("couple_relationships", {"user1_id": alice[0], "user2_id": alice[0]})


class TestAccept:
    def test_recipient_accepts(self, client, alice, bob, paired):
        assert paired["status"] == "accepted"
        assert statuses(client, alice[1]) == ["accepted"]

    def test_requester_cannot_accept(self, client, alice, pending):
        res = client.put(f"/api/couple-relationships/{pending['id']}/accept", headers=alice[1])
        assert res.status_code == 404
        assert statuses(client, alice[1]) == ["pending"]

    def test_third_party_cannot_accept(self, client, alice, make_user, pending):
        _, carol = make_user("carol@example.com")
        res = client.put(f"/api/couple-relationships/{pending['id']}/accept", headers=carol)
        assert res.status_code == 404
        assert statuses(client, alice[1]) == ["pending"]

    def test_unknown_relationship(self, client, bob):
        res = client.put(f"/api/couple-relationships/{random_id()}/accept", headers=bob[1])
        assert res.status_code == 404

    def test_accepting_twice_is_harmless(self, client, bob, paired):
        res = client.put(f"/api/couple-relationships/{paired['id']}/accept", headers=bob[1])
        assert res.status_code == 200
        assert res.json()["relationship"]["status"] == "accepted"

    def test_reject_is_not_implemented(self, client, bob, pending):
        res = client.put(f"/api/couple-relationships/{pending['id']}/reject", headers=bob[1])
        assert res.status_code == 501
        assert statuses(client, bob[1]) == ["pending"]


class TestListAndDelete:
    def test_both_sides_see_relationship_with_names(self, client, alice, bob, pending):
        client.put("/api/profile", json={"full_name": "Alice"}, headers=alice[1])

        for headers in (alice[1], bob[1]):
            rows = client.get("/api/couple-relationships", headers=headers).json()
            assert len(rows) == 1
            assert rows[0]["user1_profile"] == {"full_name": "Alice"}
            assert rows[0]["user2_profile"] == {"full_name": "bob"}

    def test_outsider_sees_nothing(self, client, make_user, pending):
        _, carol = make_user("carol@example.com")
        assert client.get("/api/couple-relationships", headers=carol).json() == []

    def test_either_participant_can_delete(self, client, alice, bob, paired):
        res = client.delete(f"/api/couple-relationships/{paired['id']}", headers=bob[1])
        assert res.status_code == 204
        assert statuses(client, alice[1]) == []
        # The pair may be formed again afterwards
        assert send_request(client, bob[1], "alice@example.com").status_code == 201

    def test_outsider_cannot_delete(self, client, alice, make_user, pending):
        _, carol = make_user("carol@example.com")
        assert client.delete(f"/api/couple-relationships/{pending['id']}", headers=carol).status_code == 404
        assert statuses(client, alice[1]) == ["pending"]


class TestCoupleScope:
    @pytest.fixture
    def spending(self, client, alice, bob, groceries):
        client.post("/api/transactions", json=tx_body(groceries, 10, "2026-10-01"), headers=alice[1])
        client.post("/api/transactions", json=tx_body(groceries, 20, "2026-10-02"), headers=bob[1])
        client.post("/api/goals", json={"category_id": groceries, "amount": 300, "month": "2026-10-01"},
                    headers=bob[1])

    def test_pending_request_grants_nothing(self, client, alice, pending, spending):
        dash = client.get("/api/couple-dashboard", headers=alice[1]).json()
        assert dash["partner_id"] is None
        assert [t["amount"] for t in dash["transactions"]] == [10]
        assert dash["goals"] == []

        rows = client.get("/api/transactions?scope=couple", headers=alice[1]).json()
        assert [t["amount"] for t in rows] == [10]

    def test_accepted_partner_is_visible_both_ways(self, client, alice, bob, paired, spending):
        for me, partner in ((alice, bob), (bob, alice)):
            dash = client.get("/api/couple-dashboard", headers=me[1]).json()
            assert dash["partner_id"] == partner[0]
            assert [t["amount"] for t in dash["transactions"]] == [20, 10]
            assert dash["transactions"][0]["categories"] == {"name": "Groceries"}
            assert [g["amount"] for g in dash["goals"]] == [300]

    def test_personal_reads_stay_personal(self, client, alice, paired, spending):
        rows = client.get("/api/transactions", headers=alice[1]).json()
        assert [t["amount"] for t in rows] == [10]

    def test_partner_rows_stay_read_only(self, client, alice, bob, paired, groceries):
        tx = client.post("/api/transactions", json=tx_body(groceries), headers=bob[1]).json()

        assert client.delete(f"/api/transactions/{tx['id']}", headers=alice[1]).status_code == 404
        assert len(client.get("/api/transactions", headers=bob[1]).json()) == 1

    def test_outsider_never_sees_the_couple(self, client, make_user, paired, spending):
        _, carol = make_user("carol@example.com")
        dash = client.get("/api/couple-dashboard", headers=carol).json()
        assert dash == {"partner_id": None, "transactions": [], "goals": []}

    def test_deleting_relationship_revokes_access(self, client, alice, paired, spending):
        client.delete(f"/api/couple-relationships/{paired['id']}", headers=alice[1])
        dash = client.get("/api/couple-dashboard", headers=alice[1]).json()
        assert dash["partner_id"] is None
        assert [t["amount"] for t in dash["transactions"]] == [10]
