"""
Pydantic schemas for settlement payments.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from splitledger.schemas.group import ParticipantId


class PaymentData(BaseModel):
    """A recorded payment as consumed by the ledger engine."""
    id: Optional[int] = None
    group_id: Optional[int] = None
    from_id: ParticipantId
    to_id: ParticipantId
    amount: Decimal
    note: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PaymentCreate(BaseModel):
    """Schema for recording a payment."""
    from_id: int
    to_id: int
    amount: Decimal
    note: Optional[str] = Field(default=None, max_length=500)


class PaymentResponse(PaymentData):
    """Schema for payment response."""
    id: int
    group_id: int
    created_by: int
    created_at: datetime


class PaymentCheckResponse(BaseModel):
    """Outcome of a payment pre-check."""
    ok: bool
    code: Optional[str] = None
    detail: Optional[str] = None
    max_amount: Optional[Decimal] = None
