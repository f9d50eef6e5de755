"""
Pydantic schemas for Group and participant entities.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Union
from datetime import datetime

# Participants are identified by opaque ids; the database uses integers.
ParticipantId = Union[int, str]


class ParticipantData(BaseModel):
    """A group participant as seen by the ledger engine."""
    id: ParticipantId
    name: str

    model_config = {"from_attributes": True, "frozen": True}


class GroupCreate(BaseModel):
    """Schema for group creation."""
    name: str = Field(min_length=1, max_length=200)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class GroupResponse(BaseModel):
    """Schema for group response."""
    id: int
    name: str
    currency: str
    created_by: int
    created_at: datetime

    class Config:
        from_attributes = True


class GroupDetailResponse(GroupResponse):
    """Schema for detailed group response with participants."""
    participants: List[ParticipantData] = []


class ParticipantAdd(BaseModel):
    """Schema for adding a participant by username."""
    username: str
