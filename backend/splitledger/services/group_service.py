"""
Group service: membership checks and ledger snapshots read from the database.

Snapshot loaders validate ORM rows into engine records so the balance and
settlement functions only ever see typed, well-formed data.
"""
import logging
from typing import List, NamedTuple, Optional
from sqlalchemy.orm import Session, selectinload
from splitledger.core.config import settings
from splitledger.core.utils import DUST_THRESHOLD
from splitledger.models.expense import Expense
from splitledger.models.group import Group, GroupMember
from splitledger.models.payment import SettlementPayment
from splitledger.models.user import User
from splitledger.schemas.expense import ExpenseData
from splitledger.schemas.group import ParticipantData
from splitledger.schemas.payment import PaymentData
from splitledger.services.balance_service import compute_net_balances

logger = logging.getLogger(__name__)


class LedgerSnapshot(NamedTuple):
    """Everything the engine needs for one group, read together."""
    participants: List[ParticipantData]
    expenses: List[ExpenseData]
    payments: List[PaymentData]


def create_group(name: str, creator: User, db: Session, currency: Optional[str] = None) -> Group:
    """Create a group with its creator as the first participant."""
    group = Group(
        name=name,
        currency=(currency or settings.DEFAULT_CURRENCY).upper(),
        created_by=creator.id,
    )
    db.add(group)
    db.flush()
    db.add(GroupMember(group_id=group.id, user_id=creator.id))
    db.commit()
    db.refresh(group)
    logger.info("Group %s created by user %s", group.id, creator.id)
    return group


def is_member(group_id: int, user_id: int, db: Session) -> bool:
    return db.query(GroupMember).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id
    ).first() is not None


def add_participant(group_id: int, user: User, db: Session) -> GroupMember:
    """Add a user to the group; raises ValueError if already a participant."""
    if is_member(group_id, user.id, db):
        raise ValueError(f"{user.username} is already a participant")
    member = GroupMember(group_id=group_id, user_id=user.id)
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("User %s added to group %s", user.id, group_id)
    return member


def remove_participant(group: Group, user_id: int, db: Session) -> bool:
    """
    Remove a participant whose balance is settled.

    The creator can only leave as the last participant, which deletes the
    group; returns True in that case. Raises ValueError when the
    participant still owes or is owed money.
    """
    if user_id == group.created_by:
        remaining = db.query(GroupMember).filter(GroupMember.group_id == group.id).count()
        if remaining > 1:
            raise ValueError("The creator cannot leave while other participants remain")
        delete_group(group, db)
        return True

    snapshot = load_snapshot(group.id, db)
    net = compute_net_balances(snapshot.expenses, snapshot.participants, snapshot.payments)
    if abs(net.get(user_id, 0)) > DUST_THRESHOLD:
        raise ValueError("Participant has an unsettled balance")

    db.query(GroupMember).filter(
        GroupMember.group_id == group.id,
        GroupMember.user_id == user_id
    ).delete()
    db.commit()
    logger.info("User %s removed from group %s", user_id, group.id)
    return False


def delete_group(group: Group, db: Session):
    group_id = group.id
    db.delete(group)
    db.commit()
    logger.info("Group %s deleted", group_id)


def load_participants(group_id: int, db: Session) -> List[ParticipantData]:
    rows = db.query(User).join(GroupMember, GroupMember.user_id == User.id).filter(
        GroupMember.group_id == group_id
    ).order_by(User.name, User.id).all()
    return [ParticipantData.model_validate(user) for user in rows]


def load_expenses(group_id: int, db: Session) -> List[ExpenseData]:
    rows = db.query(Expense).options(selectinload(Expense.splits)).filter(
        Expense.group_id == group_id
    ).order_by(Expense.date.desc(), Expense.id.desc()).all()
    return [ExpenseData.model_validate(expense) for expense in rows]


def load_payments(group_id: int, db: Session) -> List[PaymentData]:
    rows = db.query(SettlementPayment).filter(
        SettlementPayment.group_id == group_id
    ).order_by(SettlementPayment.created_at.desc(), SettlementPayment.id.desc()).all()
    return [PaymentData.model_validate(payment) for payment in rows]


def load_snapshot(group_id: int, db: Session) -> LedgerSnapshot:
    """Read participants, expenses and payments of a group in one session."""
    return LedgerSnapshot(
        participants=load_participants(group_id, db),
        expenses=load_expenses(group_id, db),
        payments=load_payments(group_id, db),
    )
