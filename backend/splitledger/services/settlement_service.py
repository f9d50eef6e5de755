"""
Settlement service: suggested transfers that zero out a group's balances.
"""
import logging
from typing import Hashable, Iterable, List, Sequence, Tuple
from decimal import Decimal
from splitledger.core.utils import DUST_THRESHOLD, quantize_money
from splitledger.schemas.settlement import GroupSummary, ParticipantSummary, Settlement
from splitledger.services.balance_service import (
    compute_net_balances, get_total_expenses, totals_by_participant
)

logger = logging.getLogger(__name__)


def minimize_transfers(balances: Sequence[Tuple[Hashable, Decimal]]) -> List[Settlement]:
    """
    Greedy largest-creditor / largest-debtor matching.

    Balances within the dust threshold of zero are treated as settled. Ties
    keep the order the balances were given in. Emits at most
    len(creditors) + len(debtors) - 1 transfers.
    """
    creditors = []
    debtors = []  # Stored as positive amounts for easier calculation
    for pid, balance in balances:
        rounded = quantize_money(balance)
        if rounded > DUST_THRESHOLD:
            creditors.append([pid, rounded])
        elif rounded < -DUST_THRESHOLD:
            debtors.append([pid, -rounded])

    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    transfers: List[Settlement] = []
    cred_idx = 0
    debt_idx = 0

    while cred_idx < len(creditors) and debt_idx < len(debtors):
        creditor = creditors[cred_idx]
        debtor = debtors[debt_idx]

        transfer_amount = min(creditor[1], debtor[1])
        if transfer_amount <= DUST_THRESHOLD:
            break

        transfers.append(Settlement(from_id=debtor[0], to_id=creditor[0], amount=quantize_money(transfer_amount)))
        creditor[1] -= transfer_amount
        debtor[1] -= transfer_amount

        # A remainder at or under the dust threshold counts as settled
        if creditor[1] <= DUST_THRESHOLD:
            cred_idx += 1
        if debtor[1] <= DUST_THRESHOLD:
            debt_idx += 1

    return transfers


def optimize_settlements(
    expenses: Iterable,
    participants: Iterable,
    payments: Iterable = (),
) -> List[Settlement]:
    """Suggested transfers for the group, recorded payments included."""
    net_balances = compute_net_balances(expenses, participants, payments)
    transfers = minimize_transfers(list(net_balances.items()))
    logger.debug("Settlement plan for %d participants: %s", len(net_balances), transfers)
    return transfers


def summarize_group(
    expenses: Sequence,
    participants: Sequence,
    payments: Sequence = (),
) -> GroupSummary:
    """Totals, per-participant paid/owed/net and the settlement plan."""
    net_balances = compute_net_balances(expenses, participants, payments)
    totals = totals_by_participant(expenses)
    zero = Decimal("0.00")

    participant_summaries = [
        ParticipantSummary(
            participant_id=p.id,
            name=p.name,
            total_paid=totals.get(p.id, {}).get("paid", zero),
            total_owed=totals.get(p.id, {}).get("owed", zero),
            net_balance=net_balances.get(p.id, zero),
        )
        for p in participants
    ]

    return GroupSummary(
        total_expenses=get_total_expenses(expenses),
        participants=participant_summaries,
        settlements=minimize_transfers(list(net_balances.items())),
    )
