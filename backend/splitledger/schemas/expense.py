"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from splitledger.models.expense import SplitType
from splitledger.schemas.group import ParticipantId


class ExpenseSplitData(BaseModel):
    """One participant's owed portion of an expense."""
    participant_id: ParticipantId
    amount: Decimal
    percentage: Optional[Decimal] = None  # Kept for display, never recomputed
    shares: Optional[int] = None

    model_config = {"from_attributes": True}


class ExpenseData(BaseModel):
    """An expense as consumed by the ledger engine."""
    id: Optional[int] = None
    group_id: Optional[int] = None
    description: str = ""
    amount: Decimal = Field(gt=0)
    paid_by: ParticipantId
    split_type: SplitType = SplitType.EQUAL
    splits: List[ExpenseSplitData] = []
    date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SplitInput(BaseModel):
    """
    Per-participant split parameter supplied by the client.
    Only the field matching the expense's split_type is read.
    """
    participant_id: int
    amount: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    shares: Optional[int] = None


POLICY_FIELD = {
    SplitType.AMOUNT: "amount",
    SplitType.PERCENTAGE: "percentage",
    SplitType.SHARES: "shares",
}


def require_policy_values(split_type: SplitType, splits: List[SplitInput]):
    """Non-equal policies need the matching value for every participant."""
    field = POLICY_FIELD.get(split_type)
    if field:
        missing = [s.participant_id for s in splits if getattr(s, field) is None]
        if missing:
            raise ValueError(f"'{field}' is required for participants {missing}")


class ExpenseCreate(BaseModel):
    """Schema for expense creation."""
    description: str = Field(min_length=1)
    amount: Decimal
    paid_by: int
    split_type: SplitType = SplitType.EQUAL
    splits: List[SplitInput]
    date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_split_values(self):
        require_policy_values(self.split_type, self.splits)
        return self


class ExpenseUpdate(BaseModel):
    """Schema for expense update; splits are recomputed when any input changes."""
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    paid_by: Optional[int] = None
    split_type: Optional[SplitType] = None
    splits: Optional[List[SplitInput]] = None
    date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_split_values(self):
        if self.split_type is not None and self.splits is not None:
            require_policy_values(self.split_type, self.splits)
        return self


class ExpenseResponse(ExpenseData):
    """Schema for expense response."""
    id: int
    group_id: int
    date: datetime
    created_at: datetime
    updated_at: datetime
