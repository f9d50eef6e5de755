"""
Group management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from splitledger.db.session import get_db
from splitledger.models.user import User
from splitledger.models.group import Group, GroupMember
from splitledger.schemas.group import (
    GroupCreate, GroupResponse, GroupDetailResponse, ParticipantAdd, ParticipantData
)
from splitledger.api.dependencies import get_current_user, check_group_access
from splitledger.services import group_service
from splitledger.services.event_service import event_bus

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new group with the current user as its first participant."""
    return group_service.create_group(group_data.name, current_user, db, currency=group_data.currency)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all groups the current user participates in."""
    return db.query(Group).join(GroupMember).filter(
        GroupMember.user_id == current_user.id
    ).order_by(Group.created_at.desc()).all()


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get group details with participants."""
    group = check_group_access(group_id, current_user.id, db)
    participants = group_service.load_participants(group_id, db)
    return GroupDetailResponse(
        id=group.id,
        name=group.name,
        currency=group.currency,
        created_by=group.created_by,
        created_at=group.created_at,
        participants=participants
    )


@router.delete("/{group_id}")
async def delete_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a group. Only its creator may do so."""
    group = check_group_access(group_id, current_user.id, db)
    if group.created_by != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the group creator can delete the group"
        )
    group_service.delete_group(group, db)
    event_bus.publish(group_id, "group:deleted")
    return {"message": "Group deleted successfully"}


@router.get("/{group_id}/participants", response_model=List[ParticipantData])
async def list_participants(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the participants of a group."""
    check_group_access(group_id, current_user.id, db)
    return group_service.load_participants(group_id, db)


@router.post("/{group_id}/participants", response_model=ParticipantData, status_code=status.HTTP_201_CREATED)
async def add_participant(
    group_id: int,
    invite: ParticipantAdd,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a registered user to the group by username."""
    check_group_access(group_id, current_user.id, db)

    user = db.query(User).filter(User.username == invite.username).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    try:
        group_service.add_participant(group_id, user, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    event_bus.publish(group_id, "participant:added", participant_id=user.id)
    return ParticipantData.model_validate(user)


@router.delete("/{group_id}/participants/{participant_id}")
async def remove_participant(
    group_id: int,
    participant_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a participant with a settled balance; the creator leaving last deletes the group."""
    group = check_group_access(group_id, current_user.id, db)

    if not group_service.is_member(group_id, participant_id, db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Participant not found in group"
        )
    if participant_id == group.created_by and current_user.id != group.created_by:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the creator can remove themselves from the group"
        )

    try:
        group_deleted = group_service.remove_participant(group, participant_id, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if group_deleted:
        event_bus.publish(group_id, "group:deleted")
    else:
        event_bus.publish(group_id, "participant:removed", participant_id=participant_id)
    return {"message": "Participant removed", "group_deleted": group_deleted}
