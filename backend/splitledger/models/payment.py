"""
Settlement payment model: a completed real-world transfer between participants.
"""
from sqlalchemy import Column, Numeric, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel


class SettlementPayment(BaseModel):
    """Recorded payment from one participant to another."""
    __tablename__ = "settlement_payments"

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    from_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    to_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    note = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Relationships
    group = relationship("Group", back_populates="payments")
    sender = relationship("User", foreign_keys=[from_id])
    recipient = relationship("User", foreign_keys=[to_id])
