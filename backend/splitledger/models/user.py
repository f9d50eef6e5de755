"""
User model for authentication and user management.
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel


class User(BaseModel):
    """User model; a user becomes a participant by joining a group."""
    __tablename__ = "users"

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    memberships = relationship("GroupMember", back_populates="user", cascade="all, delete-orphan")
