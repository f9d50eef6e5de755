"""
Pydantic schemas for balances and suggested settlements.
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal
from splitledger.schemas.group import ParticipantId


class Settlement(BaseModel):
    """Suggested transfer; computed on demand, never persisted."""
    from_id: ParticipantId
    to_id: ParticipantId
    amount: Decimal

    model_config = {"frozen": True}


class Balance(BaseModel):
    """Debtor to creditor obligation from the debt matrix view."""
    from_id: ParticipantId
    to_id: ParticipantId
    amount: Decimal

    model_config = {"frozen": True}


class NetBalance(BaseModel):
    """Signed balance of one participant; positive means owed money."""
    participant_id: ParticipantId
    name: str
    amount: Decimal


class ParticipantSummary(BaseModel):
    """Per-participant totals for the group overview."""
    participant_id: ParticipantId
    name: str
    total_paid: Decimal
    total_owed: Decimal
    net_balance: Decimal


class GroupSummary(BaseModel):
    """Group overview: totals, balances and what should happen next."""
    total_expenses: Decimal
    participants: List[ParticipantSummary]
    settlements: List[Settlement]
