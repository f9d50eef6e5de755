"""
Expense service for expense-related business logic.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from splitledger.models.expense import Expense, ExpenseSplit, SplitType
from splitledger.schemas.expense import POLICY_FIELD, SplitInput
from splitledger.services.group_service import is_member
from splitledger.services.split_service import compute_splits

logger = logging.getLogger(__name__)


def _check_members(group_id: int, user_ids: List[int], db: Session):
    outsiders = [uid for uid in user_ids if not is_member(group_id, uid, db)]
    if outsiders:
        raise ValueError(f"Participants {outsiders} are not members of the group")


def build_splits(amount: Decimal, split_type: SplitType, splits: List[SplitInput]) -> List[ExpenseSplit]:
    """Run the split calculator over client input and return unsaved split rows."""
    participant_ids = [s.participant_id for s in splits]
    try:
        field = POLICY_FIELD.get(SplitType(split_type))
    except ValueError:
        field = None  # compute_splits rejects the policy below
    params = {s.participant_id: getattr(s, field) for s in splits} if field else None

    computed = compute_splits(amount, split_type, participant_ids, params)
    return [
        ExpenseSplit(
            participant_id=split.participant_id,
            position=position,
            amount=split.amount,
            percentage=split.percentage,
            shares=split.shares,
        )
        for position, split in enumerate(computed)
    ]


def create_expense_with_splits(
    group_id: int,
    paid_by: int,
    description: str,
    amount: Decimal,
    split_type: SplitType,
    splits: List[SplitInput],
    expense_date: Optional[datetime] = None,
    db: Session = None
) -> Expense:
    """
    Create an expense and its splits in one transaction.

    Raises ValueError for non-members and the split calculator's errors for
    bad amounts or policies; nothing is written in either case.
    """
    _check_members(group_id, [paid_by] + [s.participant_id for s in splits], db)
    split_rows = build_splits(amount, split_type, splits)

    expense = Expense(
        group_id=group_id,
        paid_by=paid_by,
        description=description,
        amount=amount,
        split_type=SplitType(split_type),
        date=expense_date or datetime.now(timezone.utc),
        splits=split_rows,
    )
    try:
        db.add(expense)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(expense)

    logger.info("Expense %s (%s, %s) created in group %s", expense.id, amount, split_type, group_id)
    return expense


def update_expense(expense: Expense, changes: dict, db: Session) -> Expense:
    """
    Apply changes to an expense. Splits are recomputed whenever the amount,
    policy or split inputs change, so the split sum always equals the amount.
    """
    split_inputs = changes.pop("splits", None)
    recompute = split_inputs is not None or "amount" in changes or "split_type" in changes

    if recompute and split_inputs is None:
        split_inputs = [
            SplitInput(
                participant_id=s.participant_id,
                amount=s.amount,
                percentage=s.percentage,
                shares=s.shares,
            )
            for s in expense.splits
        ]

    member_ids = [changes["paid_by"]] if "paid_by" in changes else []
    if split_inputs is not None:
        member_ids += [s.participant_id for s in split_inputs]
    _check_members(expense.group_id, member_ids, db)

    new_splits = None
    if recompute:
        new_splits = build_splits(
            changes.get("amount", expense.amount),
            changes.get("split_type", expense.split_type),
            split_inputs,
        )

    for field, value in changes.items():
        setattr(expense, field, value)
    try:
        if new_splits is not None:
            expense.splits = new_splits
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(expense)

    logger.info("Expense %s updated in group %s", expense.id, expense.group_id)
    return expense


def delete_expense(expense: Expense, db: Session):
    """Delete an expense together with its splits."""
    expense_id, group_id = expense.id, expense.group_id
    db.delete(expense)
    db.commit()
    logger.info("Expense %s deleted from group %s", expense_id, group_id)
