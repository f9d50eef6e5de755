"""
Split calculator: turns an expense total and a split policy into
per-participant owed amounts that add up to the total to the cent.
"""
from decimal import Decimal
from typing import Any, Hashable, List, Mapping, Optional, Sequence
from splitledger.core.errors import (
    DuplicateParticipant, EmptyParticipantSet, InvalidAmount, SplitMismatch, UnknownPolicy
)
from splitledger.core.utils import from_cents, is_positive_amount, to_cents, to_decimal
from splitledger.models.expense import SplitType
from splitledger.schemas.expense import ExpenseSplitData

PERCENT_TOLERANCE = Decimal("0.01")


def allocate_cents(total_cents: int, weights: Sequence[Decimal]) -> List[int]:
    """
    Largest-remainder distribution of total_cents proportionally to weights.

    Each slot first gets the floor of its exact quota; the leftover cents go
    one at a time to the slots with the largest fractional parts, ties going
    to the earlier slot. The result always sums to total_cents.
    """
    weight_sum = sum(weights, Decimal(0))
    if weight_sum <= 0:
        raise SplitMismatch("Split weights must add up to more than zero")

    floors = []
    remainders = []
    for index, weight in enumerate(weights):
        # Integer arithmetic on the numerator keeps quotas exact
        numerator = Decimal(total_cents) * weight
        quota, remainder = divmod(numerator, weight_sum)
        floors.append(int(quota))
        remainders.append((remainder, index))

    leftover = total_cents - sum(floors)
    remainders.sort(key=lambda item: (-item[0], item[1]))
    for _, index in remainders[:leftover]:
        floors[index] += 1
    return floors


def split_equal(total_cents: int, count: int) -> List[int]:
    """Floor-divide total_cents; the first `remainder` slots get one extra cent."""
    base, remainder = divmod(total_cents, count)
    return [base + 1 if i < remainder else base for i in range(count)]


def _param_values(
    participant_ids: Sequence[Hashable],
    policy_params: Optional[Mapping[Hashable, Any]],
    label: str,
) -> List[Any]:
    params = dict(policy_params or {})
    expected = set(participant_ids)
    missing = [pid for pid in participant_ids if params.get(pid) is None]
    extra = [pid for pid in params if pid not in expected]
    if missing or extra:
        raise SplitMismatch(
            f"{label} must be given for exactly the expense participants "
            f"(missing: {missing}, unexpected: {extra})"
        )
    return [params[pid] for pid in participant_ids]


def _non_negative(value: Any, label: str) -> Decimal:
    try:
        number = to_decimal(value)
    except TypeError:
        raise InvalidAmount(f"{label} must be a number") from None
    if not number.is_finite() or number < 0:
        raise InvalidAmount(f"{label} must be a finite number of at least 0")
    return number


def _amount_splits(total_cents: int, values: List[Any]) -> List[int]:
    cents = [to_cents(_non_negative(v, "Split amount")) for v in values]
    difference = total_cents - sum(cents)
    if abs(difference) > 1:
        raise SplitMismatch(
            f"Split amounts add up to {from_cents(sum(cents))}, expected {from_cents(total_cents)}"
        )
    if difference:
        # Absorb the stray cent in the largest split
        largest = max(range(len(cents)), key=lambda i: (cents[i], -i))
        cents[largest] += difference
    return cents


def _percentage_weights(values: List[Any]) -> List[Decimal]:
    weights = [_non_negative(v, "Percentage") for v in values]
    total = sum(weights, Decimal(0))
    if abs(total - 100) > PERCENT_TOLERANCE:
        raise SplitMismatch(f"Percentages add up to {total}, expected 100")
    return weights


def _share_weights(values: List[Any]) -> List[Decimal]:
    weights = []
    for value in values:
        number = _non_negative(value, "Shares")
        if number != number.to_integral_value():
            raise SplitMismatch("Shares must be whole numbers")
        weights.append(number)
    if sum(weights, Decimal(0)) <= 0:
        raise SplitMismatch("At least one participant must hold a share")
    return weights


def compute_splits(
    total_amount: Any,
    policy: Any,
    participant_ids: Sequence[Hashable],
    policy_params: Optional[Mapping[Hashable, Any]] = None,
) -> List[ExpenseSplitData]:
    """
    Compute the owed amount of each participant for one expense.

    policy_params maps participant id to the policy's value: an amount for
    "amount", a percentage for "percentage", an integer share count for
    "shares". It is ignored for "equal". The returned splits follow the
    order of participant_ids and their amounts sum exactly to total_amount.

    Raises InvalidAmount, EmptyParticipantSet, DuplicateParticipant,
    SplitMismatch or UnknownPolicy. Every one is a LedgerError carrying a
    stable code; the expense routes catch them and answer 400 with that code.
    """
    if not is_positive_amount(total_amount):
        raise InvalidAmount()
    try:
        policy = SplitType(policy)
    except ValueError:
        raise UnknownPolicy(f"Unknown split policy: {policy!r}") from None

    participant_ids = list(participant_ids)
    if not participant_ids:
        raise EmptyParticipantSet()
    if len(set(participant_ids)) != len(participant_ids):
        raise DuplicateParticipant()

    total_cents = to_cents(total_amount)
    percentages: List[Optional[Decimal]] = [None] * len(participant_ids)
    shares: List[Optional[int]] = [None] * len(participant_ids)

    if policy == SplitType.EQUAL:
        cents = split_equal(total_cents, len(participant_ids))
    elif policy == SplitType.AMOUNT:
        cents = _amount_splits(total_cents, _param_values(participant_ids, policy_params, "Amounts"))
    elif policy == SplitType.PERCENTAGE:
        weights = _percentage_weights(_param_values(participant_ids, policy_params, "Percentages"))
        cents = allocate_cents(total_cents, weights)
        percentages = weights
    else:
        weights = _share_weights(_param_values(participant_ids, policy_params, "Shares"))
        cents = allocate_cents(total_cents, weights)
        shares = [int(w) for w in weights]

    return [
        ExpenseSplitData(
            participant_id=pid,
            amount=from_cents(amount),
            percentage=percentages[i],
            shares=shares[i],
        )
        for i, (pid, amount) in enumerate(zip(participant_ids, cents))
    ]
