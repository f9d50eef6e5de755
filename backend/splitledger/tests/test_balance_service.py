"""
Tests for net balance aggregation and the debt matrix.
"""
import random
from decimal import Decimal
from splitledger.schemas.expense import ExpenseData
from splitledger.schemas.group import ParticipantData
from splitledger.schemas.payment import PaymentData
from splitledger.schemas.settlement import Balance
from splitledger.services.balance_service import (
    calculate_balances, compute_net_balances, get_participant_total_owed,
    get_participant_total_paid, get_total_expenses
)
from splitledger.services.split_service import compute_splits


def people(*ids):
    return [ParticipantData(id=pid, name=pid) for pid in ids]


def expense(paid_by, amount, participant_ids, policy="equal", params=None):
    return ExpenseData(
        amount=Decimal(str(amount)),
        paid_by=paid_by,
        split_type=policy,
        splits=compute_splits(Decimal(str(amount)), policy, participant_ids, params),
    )


def payment(from_id, to_id, amount):
    return PaymentData(from_id=from_id, to_id=to_id, amount=Decimal(str(amount)))


def test_every_participant_starts_at_zero():
    assert compute_net_balances([], people("A", "B")) == {"A": Decimal("0.00"), "B": Decimal("0.00")}


def test_single_expense_balances():
    net = compute_net_balances([expense("A", 90, ["A", "B", "C"])], people("A", "B", "C"))
    assert net == {"A": Decimal("60.00"), "B": Decimal("-30.00"), "C": Decimal("-30.00")}


def test_payment_moves_value_between_balances():
    net = compute_net_balances(
        [expense("A", 90, ["A", "B", "C"])],
        people("A", "B", "C"),
        [payment("B", "A", 30)],
    )
    assert net == {"A": Decimal("30.00"), "B": Decimal("0.00"), "C": Decimal("-30.00")}


def test_payment_with_unknown_participant_is_ignored():
    expenses = [expense("A", 90, ["A", "B", "C"])]
    net = compute_net_balances(expenses, people("A", "B", "C"), [payment("Z", "A", 30)])
    assert net == compute_net_balances(expenses, people("A", "B", "C"))


def test_iteration_order_does_not_matter():
    expenses = [expense("A", 90, ["A", "B", "C"]), expense("B", "10.01", ["A", "B", "C"])]
    payments = [payment("C", "A", 5), payment("B", "A", "1.50")]
    forward = compute_net_balances(expenses, people("A", "B", "C"), payments)
    backward = compute_net_balances(expenses[::-1], people("C", "B", "A"), payments[::-1])
    assert forward == backward


def test_zero_sum_invariant():
    rng = random.Random(7)
    ids = ["A", "B", "C", "D", "E"]
    for _ in range(25):
        expenses = []
        for _ in range(rng.randint(1, 8)):
            members = rng.sample(ids, rng.randint(1, len(ids)))
            total = Decimal(rng.randint(1, 100000)) / 100
            expenses.append(expense(rng.choice(ids), total, members))
        payments = [
            payment(*rng.sample(ids, 2), Decimal(rng.randint(1, 5000)) / 100)
            for _ in range(rng.randint(0, 4))
        ]
        net = compute_net_balances(expenses, people(*ids), payments)
        assert sum(net.values()) == 0


def test_orm_like_objects_are_accepted():
    class Split:
        def __init__(self, participant_id, amount):
            self.participant_id = participant_id
            self.amount = amount

    class Row:
        paid_by = 1
        amount = Decimal("20.00")
        splits = [Split(1, Decimal("10.00")), Split(2, Decimal("10.00"))]

    net = compute_net_balances([Row()], people(1, 2))
    assert net == {1: Decimal("10.00"), 2: Decimal("-10.00")}


def test_debt_matrix_pairs_debtors_with_creditors_in_order():
    expenses = [
        expense("C1", 30, ["D1"]),
        expense("C2", 70, ["D1", "D2"], "amount", {"D1": 20, "D2": 50}),
    ]
    balances = calculate_balances(expenses, people("D1", "D2", "C1", "C2"))
    assert balances == [
        Balance(from_id="D1", to_id="C1", amount=Decimal("30.00")),
        Balance(from_id="D1", to_id="C2", amount=Decimal("20.00")),
        Balance(from_id="D2", to_id="C2", amount=Decimal("50.00")),
    ]


def test_debt_matrix_drops_dust():
    # A owes B a single cent, which is within the threshold
    expenses = [expense("B", "0.02", ["A", "B"])]
    assert compute_net_balances(expenses, people("A", "B")) == {"A": Decimal("-0.01"), "B": Decimal("0.01")}
    assert calculate_balances(expenses, people("A", "B")) == []


def test_totals():
    expenses = [expense("A", 90, ["A", "B", "C"]), expense("B", "10.50", ["A", "B"])]
    assert get_total_expenses(expenses) == Decimal("100.50")
    assert get_participant_total_paid(expenses, "A") == Decimal("90.00")
    assert get_participant_total_paid(expenses, "C") == Decimal("0.00")
    assert get_participant_total_owed(expenses, "A") == Decimal("35.25")
    assert get_participant_total_owed(expenses, "C") == Decimal("30.00")
