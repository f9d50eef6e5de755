"""Models package - Import all models for SQLAlchemy registration."""
from splitledger.models.user import User
from splitledger.models.group import Group, GroupMember
from splitledger.models.expense import Expense, ExpenseSplit, SplitType
from splitledger.models.payment import SettlementPayment

__all__ = [
    "User",
    "Group",
    "GroupMember",
    "Expense",
    "ExpenseSplit",
    "SplitType",
    "SettlementPayment",
]
