"""
Group model for shared-expense ledgers.
"""
from sqlalchemy import Column, String, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel


class Group(BaseModel):
    """A group of participants sharing expenses."""
    __tablename__ = "groups"

    name = Column(String(200), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by])
    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="group", cascade="all, delete-orphan")
    payments = relationship("SettlementPayment", back_populates="group", cascade="all, delete-orphan")


class GroupMember(BaseModel):
    """Junction table for Group and User; each row is one participant."""
    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    group = relationship("Group", back_populates="members")
    user = relationship("User", back_populates="memberships")
