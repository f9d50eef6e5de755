"""
Net balance aggregation and the all-pairs debt matrix.

Inputs are engine records (ExpenseData, ParticipantData, PaymentData) or any
objects exposing the same attributes, ORM rows included.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Hashable, Iterable, List
from splitledger.core.utils import DUST_THRESHOLD, from_cents, is_positive_amount, quantize_money, to_cents
from splitledger.schemas.settlement import Balance

logger = logging.getLogger(__name__)

# Smallest transfer the debt matrix records
MATRIX_EPSILON = Decimal("0.001")


def _net_cents(expenses: Iterable, participants: Iterable, payments: Iterable = ()) -> Dict[Hashable, int]:
    balances: Dict[Hashable, int] = {p.id: 0 for p in participants}

    for expense in expenses:
        balances[expense.paid_by] = balances.get(expense.paid_by, 0) + to_cents(expense.amount)
        for split in expense.splits:
            balances[split.participant_id] = balances.get(split.participant_id, 0) - to_cents(split.amount)

    for payment in payments:
        if payment.from_id not in balances or payment.to_id not in balances:
            logger.warning(
                "Ignoring payment %s: participant %s or %s is not in the group",
                getattr(payment, "id", None), payment.from_id, payment.to_id,
            )
            continue
        if not is_positive_amount(payment.amount):
            logger.warning("Ignoring payment %s with non-positive amount", getattr(payment, "id", None))
            continue
        amount = to_cents(payment.amount)
        # The sender owes less, the recipient is owed less
        balances[payment.from_id] += amount
        balances[payment.to_id] -= amount

    return balances


def compute_net_balances(
    expenses: Iterable,
    participants: Iterable,
    payments: Iterable = (),
) -> Dict[Hashable, Decimal]:
    """
    Fold expenses and payments into one signed balance per participant.

    Positive means the participant is owed money by the group, negative
    means they owe money. Every participant starts at zero; the payer of an
    expense is credited with its full amount and each split participant is
    debited their share; a payment credits its sender and debits its
    recipient. Sums are kept in integer cents so the balances add up to
    exactly zero. Payments naming a participant outside the group are
    ignored.
    """
    return {pid: from_cents(cents) for pid, cents in _net_cents(expenses, participants, payments).items()}


def calculate_balances(expenses: Iterable, participants: Iterable) -> List[Balance]:
    """
    Debt matrix: who owes whom, pairing every debtor with creditors in order.

    Recorded payments are not applied to this view. The result is not
    minimized; see settlement_service.optimize_settlements for that.
    """
    net_balances = compute_net_balances(expenses, participants)

    remaining = {
        pid: quantize_money(amount)
        for pid, amount in net_balances.items()
        if abs(quantize_money(amount)) > DUST_THRESHOLD
    }
    creditors = [pid for pid, amount in remaining.items() if amount > 0]
    debtors = [pid for pid, amount in remaining.items() if amount < 0]

    balances: List[Balance] = []
    for debtor in debtors:
        for creditor in creditors:
            amount = min(abs(remaining[debtor]), remaining[creditor])
            if amount > MATRIX_EPSILON:
                balances.append(Balance(from_id=debtor, to_id=creditor, amount=quantize_money(amount)))
                remaining[debtor] += amount
                remaining[creditor] -= amount

    return balances


def get_total_expenses(expenses: Iterable) -> Decimal:
    """Sum of all expense amounts."""
    return from_cents(sum(to_cents(e.amount) for e in expenses))


def get_participant_total_paid(expenses: Iterable, participant_id: Hashable) -> Decimal:
    """Total amount a participant paid for the group."""
    return from_cents(sum(to_cents(e.amount) for e in expenses if e.paid_by == participant_id))


def get_participant_total_owed(expenses: Iterable, participant_id: Hashable) -> Decimal:
    """Total of a participant's splits across all expenses."""
    owed = 0
    for expense in expenses:
        for split in expense.splits:
            if split.participant_id == participant_id:
                owed += to_cents(split.amount)
    return from_cents(owed)


def totals_by_participant(expenses: Iterable) -> Dict[Hashable, Dict[str, Decimal]]:
    """Paid and owed totals for every participant appearing in the expenses."""
    paid = defaultdict(int)
    owed = defaultdict(int)
    for expense in expenses:
        paid[expense.paid_by] += to_cents(expense.amount)
        for split in expense.splits:
            owed[split.participant_id] += to_cents(split.amount)
    return {
        pid: {"paid": from_cents(paid[pid]), "owed": from_cents(owed[pid])}
        for pid in set(paid) | set(owed)
    }
