"""
Payment service: the payment guard and recording of settling payments.
"""
import logging
from decimal import Decimal
from typing import Any, Collection, Hashable, Mapping, Optional
from sqlalchemy.orm import Session
from splitledger.core.errors import (
    AmountExceedsOwed, InvalidAmount, LedgerError, NotAMember, RecipientNotOwed,
    SameParticipant, SenderNotOwing
)
from splitledger.core.utils import DUST_THRESHOLD, is_positive_amount, quantize_money, to_decimal
from splitledger.models.group import Group
from splitledger.models.payment import SettlementPayment
from splitledger.services.balance_service import compute_net_balances
from splitledger.services.group_service import load_snapshot

logger = logging.getLogger(__name__)


def validate_payment(
    from_id: Hashable,
    to_id: Hashable,
    amount: Any,
    net_balances: Mapping[Hashable, Decimal],
    member_ids: Optional[Collection[Hashable]] = None,
) -> Optional[LedgerError]:
    """
    Check a proposed payment against current net balances.

    Returns None when the payment may be recorded, otherwise the first rule
    it breaks. Membership is checked against member_ids when given, else
    against the participants present in net_balances. A payment may only
    move money from a net debtor to a net creditor, and never more than
    min(|net[from]|, net[to]) plus the dust threshold.
    """
    if from_id == to_id:
        return SameParticipant()
    if not is_positive_amount(amount):
        return InvalidAmount()

    members = net_balances if member_ids is None else member_ids
    if from_id not in members or to_id not in members:
        return NotAMember()

    net_from = net_balances.get(from_id, Decimal(0))
    net_to = net_balances.get(to_id, Decimal(0))
    if not net_from < -DUST_THRESHOLD:
        return SenderNotOwing()
    if not net_to > DUST_THRESHOLD:
        return RecipientNotOwed()

    max_amount = min(abs(net_from), net_to)
    if to_decimal(amount) > max_amount + DUST_THRESHOLD:
        return AmountExceedsOwed(quantize_money(max_amount))

    return None


def check_payment(group_id: int, from_id: int, to_id: int, amount: Any, db: Session) -> Optional[LedgerError]:
    """Run the payment guard against the group's current ledger."""
    snapshot = load_snapshot(group_id, db)
    net_balances = compute_net_balances(snapshot.expenses, snapshot.participants, snapshot.payments)
    return validate_payment(from_id, to_id, amount, net_balances)


def record_payment(
    group_id: int,
    from_id: int,
    to_id: int,
    amount: Decimal,
    created_by: int,
    note: Optional[str] = None,
    db: Session = None
) -> SettlementPayment:
    """
    Validate and insert a payment in one transaction.

    The group row is locked first so no other writer can change the group's
    balances between the check and the insert. Raises the guard's
    error (a PaymentError, or InvalidAmount) when the payment is rejected.
    """
    try:
        db.query(Group).filter(Group.id == group_id).with_for_update().one()
        error = check_payment(group_id, from_id, to_id, amount, db)
        if error is not None:
            logger.warning(
                "Rejected payment %s -> %s of %s in group %s: %s",
                from_id, to_id, amount, group_id, error.code,
            )
            raise error

        payment = SettlementPayment(
            group_id=group_id,
            from_id=from_id,
            to_id=to_id,
            amount=quantize_money(amount),
            note=note,
            created_by=created_by,
        )
        db.add(payment)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(payment)

    logger.info("Payment %s recorded in group %s: %s -> %s %s", payment.id, group_id, from_id, to_id, payment.amount)
    return payment


def can_delete_payment(payment: SettlementPayment, group: Group, user_id: int) -> bool:
    """Only the payment's author or the group's creator may cancel it."""
    return payment.created_by == user_id or group.created_by == user_id


def delete_payment(payment: SettlementPayment, db: Session):
    payment_id, group_id = payment.id, payment.group_id
    db.delete(payment)
    db.commit()
    logger.info("Payment %s deleted from group %s", payment_id, group_id)
