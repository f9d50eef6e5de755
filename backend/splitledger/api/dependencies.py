"""
Shared route dependencies.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from splitledger.core.errors import LedgerError
from splitledger.core.security import decode_access_token
from splitledger.db.session import get_db
from splitledger.models.group import Group
from splitledger.models.user import User
from splitledger.services.group_service import is_member

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the bearer token to an active user."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = decode_access_token(token)
    if user_id is None:
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )
    return user


def check_group_access(group_id: int, user_id: int, db: Session) -> Group:
    """Check that the group exists and the user is one of its participants."""
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found"
        )

    if not is_member(group_id, user_id, db):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to this group"
        )

    return group


def ledger_error(error: LedgerError) -> HTTPException:
    """Map an engine rejection to a 400 carrying its code."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error.to_dict()
    )
