"""
Expense model for tracking spending and how it is split.
"""
import enum
from sqlalchemy import Column, Numeric, DateTime, ForeignKey, Integer, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel


class SplitType(str, enum.Enum):
    """Split policy enumeration."""
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    AMOUNT = "amount"
    SHARES = "shares"


class Expense(BaseModel):
    """Expense model representing a single spending event."""
    __tablename__ = "expenses"

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    paid_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    split_type = Column(
        SQLEnum(SplitType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SplitType.EQUAL,
    )
    date = Column(DateTime(timezone=True), nullable=False, index=True)

    # Relationships
    group = relationship("Group", back_populates="expenses")
    payer = relationship("User", foreign_keys=[paid_by])
    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.position",
    )


class ExpenseSplit(BaseModel):
    """One participant's portion of an expense."""
    __tablename__ = "expense_splits"

    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    participant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # Order the split was given in
    amount = Column(Numeric(15, 2), nullable=False)
    percentage = Column(Numeric(7, 4), nullable=True)  # percentage policy only
    shares = Column(Integer, nullable=True)  # shares policy only

    # Relationships
    expense = relationship("Expense", back_populates="splits")
    participant = relationship("User")
