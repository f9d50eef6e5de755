"""
End-to-end tests for balances, settlements and payments over the API.
"""
from decimal import Decimal
import pytest


@pytest.fixture
def ledger(client, register):
    """Alice pays 90 split equally between Alice, Bob and Carol."""
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    carol_id, _ = register("carol")
    group_id = client.post("/api/groups", json={"name": "Cabin"}, headers=alice).json()["id"]
    for username in ("bob", "carol"):
        client.post(f"/api/groups/{group_id}/participants", json={"username": username}, headers=alice)
    response = client.post(
        f"/api/groups/{group_id}/expenses",
        json={
            "description": "Groceries",
            "amount": "90",
            "paid_by": alice_id,
            "splits": [{"participant_id": pid} for pid in (alice_id, bob_id, carol_id)]
        },
        headers=alice
    )
    assert response.status_code == 201
    return {
        "url": f"/api/groups/{group_id}",
        "alice": alice_id, "bob": bob_id, "carol": carol_id,
        "alice_headers": alice, "bob_headers": bob,
    }


def net_balances(client, ledger):
    response = client.get(f"{ledger['url']}/balances", headers=ledger["alice_headers"])
    assert response.status_code == 200
    return {b["participant_id"]: Decimal(b["amount"]) for b in response.json()}


def settlements(client, ledger):
    response = client.get(f"{ledger['url']}/settlements", headers=ledger["alice_headers"])
    assert response.status_code == 200
    return [(s["from_id"], s["to_id"], Decimal(s["amount"])) for s in response.json()]


def pay(client, ledger, from_name, to_name, amount):
    return client.post(
        f"{ledger['url']}/payments",
        json={"from_id": ledger[from_name], "to_id": ledger[to_name], "amount": amount},
        headers=ledger["bob_headers"]
    )


def test_balances_and_settlements(client, ledger):
    assert net_balances(client, ledger) == {
        ledger["alice"]: Decimal("60"), ledger["bob"]: Decimal("-30"), ledger["carol"]: Decimal("-30"),
    }
    assert sorted(settlements(client, ledger)) == sorted([
        (ledger["bob"], ledger["alice"], Decimal("30")),
        (ledger["carol"], ledger["alice"], Decimal("30")),
    ])


def test_payment_flow(client, ledger):
    response = pay(client, ledger, "bob", "alice", "30")
    assert response.status_code == 201
    assert response.json()["created_by"] == ledger["bob"]

    assert net_balances(client, ledger) == {
        ledger["alice"]: Decimal("30"), ledger["bob"]: Decimal("0"), ledger["carol"]: Decimal("-30"),
    }
    assert settlements(client, ledger) == [(ledger["carol"], ledger["alice"], Decimal("30"))]

    response = pay(client, ledger, "bob", "alice", "5")
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "sender_not_owing"


def test_payment_rejections(client, ledger):
    response = pay(client, ledger, "bob", "bob", "5")
    assert response.json()["detail"]["code"] == "same_participant"

    response = pay(client, ledger, "bob", "alice", "0")
    assert response.json()["detail"]["code"] == "invalid_amount"

    response = pay(client, ledger, "bob", "carol", "5")
    assert response.json()["detail"]["code"] == "recipient_not_owed"

    response = pay(client, ledger, "bob", "alice", "45")
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "amount_exceeds_owed"
    assert Decimal(response.json()["detail"]["max_amount"]) == Decimal("30")

    response = client.post(
        f"{ledger['url']}/payments",
        json={"from_id": ledger["bob"], "to_id": 9999, "amount": "5"},
        headers=ledger["bob_headers"]
    )
    assert response.json()["detail"]["code"] == "not_a_member"

    assert client.get(f"{ledger['url']}/payments", headers=ledger["alice_headers"]).json() == []


@pytest.mark.parametrize("amount", ["0", "-5", "0.00"])
def test_non_positive_payment_is_a_bad_request(client, ledger, amount):
    response = pay(client, ledger, "bob", "alice", amount)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_amount"
    assert net_balances(client, ledger)[ledger["bob"]] == Decimal("-30")


def test_payment_check_does_not_record(client, ledger):
    response = client.post(
        f"{ledger['url']}/payment-check",
        json={"from_id": ledger["carol"], "to_id": ledger["alice"], "amount": "31"},
        headers=ledger["alice_headers"]
    )
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is False
    assert body["code"] == "amount_exceeds_owed"
    assert Decimal(body["max_amount"]) == Decimal("30")

    response = client.post(
        f"{ledger['url']}/payment-check",
        json={"from_id": ledger["carol"], "to_id": ledger["alice"], "amount": "30"},
        headers=ledger["alice_headers"]
    )
    assert response.json()["ok"] is True
    assert client.get(f"{ledger['url']}/payments", headers=ledger["alice_headers"]).json() == []


def test_debt_matrix_ignores_payments(client, ledger):
    pay(client, ledger, "bob", "alice", "30")
    response = client.get(f"{ledger['url']}/balances/matrix", headers=ledger["alice_headers"])
    assert response.status_code == 200
    edges = [(b["from_id"], b["to_id"], Decimal(b["amount"])) for b in response.json()]
    assert edges == [
        (ledger["bob"], ledger["alice"], Decimal("30")),
        (ledger["carol"], ledger["alice"], Decimal("30")),
    ]


def test_summary(client, ledger):
    pay(client, ledger, "carol", "alice", "10")
    response = client.get(f"{ledger['url']}/summary", headers=ledger["alice_headers"])
    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["total_expenses"]) == Decimal("90")
    alice = next(p for p in body["participants"] if p["participant_id"] == ledger["alice"])
    assert Decimal(alice["total_paid"]) == Decimal("90")
    assert Decimal(alice["net_balance"]) == Decimal("50")
    assert len(body["settlements"]) == 2


def test_delete_payment_permissions(client, ledger):
    payment_id = pay(client, ledger, "bob", "alice", "30").json()["id"]

    response = client.post("/api/auth/login", json={"username": "carol", "password": "testpassword123"})
    carol_headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    url = f"{ledger['url']}/payments/{payment_id}"
    assert client.delete(url, headers=carol_headers).status_code == 403
    # Group creator may cancel anyone's payment
    assert client.delete(url, headers=ledger["alice_headers"]).status_code == 200
    assert client.delete(url, headers=ledger["alice_headers"]).status_code == 404
    assert net_balances(client, ledger)[ledger["bob"]] == Decimal("-30")
