"""
Expense management routes.

The split calculator raises its LedgerErrors; they are caught here and turned
into 400 responses carrying the error code, the same shape the payment routes
return for the payment guard's rejections.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload
from typing import List
from splitledger.db.session import get_db
from splitledger.core.errors import LedgerError
from splitledger.models.user import User
from splitledger.models.expense import Expense
from splitledger.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseUpdate
from splitledger.api.dependencies import get_current_user, check_group_access, ledger_error
from splitledger.services import expense_service
from splitledger.services.event_service import event_bus

router = APIRouter(prefix="/groups/{group_id}/expenses", tags=["expenses"])


def get_expense_or_404(group_id: int, expense_id: int, db: Session) -> Expense:
    expense = db.query(Expense).filter(
        Expense.id == expense_id,
        Expense.group_id == group_id
    ).first()
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )
    return expense


@router.get("", response_model=List[ExpenseResponse])
async def list_expenses(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a group's expenses, newest first."""
    check_group_access(group_id, current_user.id, db)
    return db.query(Expense).options(selectinload(Expense.splits)).filter(
        Expense.group_id == group_id
    ).order_by(Expense.date.desc(), Expense.id.desc()).all()


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    group_id: int,
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create an expense; splits are computed from the chosen policy."""
    check_group_access(group_id, current_user.id, db)

    try:
        expense = expense_service.create_expense_with_splits(
            group_id=group_id,
            paid_by=expense_data.paid_by,
            description=expense_data.description,
            amount=expense_data.amount,
            split_type=expense_data.split_type,
            splits=expense_data.splits,
            expense_date=expense_data.date,
            db=db
        )
    except LedgerError as e:
        raise ledger_error(e)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    event_bus.publish(group_id, "expense:created", expense_id=expense.id)
    return expense


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    group_id: int,
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single expense with its splits."""
    check_group_access(group_id, current_user.id, db)
    return get_expense_or_404(group_id, expense_id, db)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    group_id: int,
    expense_id: int,
    expense_data: ExpenseUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update an expense; splits are recomputed when amount or split inputs change."""
    check_group_access(group_id, current_user.id, db)
    expense = get_expense_or_404(group_id, expense_id, db)

    changes = expense_data.model_dump(exclude_unset=True, exclude_none=True)
    if "splits" in changes:
        changes["splits"] = expense_data.splits
    try:
        expense = expense_service.update_expense(expense, changes, db)
    except LedgerError as e:
        raise ledger_error(e)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    event_bus.publish(group_id, "expense:updated", expense_id=expense.id)
    return expense


@router.delete("/{expense_id}")
async def delete_expense(
    group_id: int,
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an expense. Allowed for its payer and the group creator."""
    group = check_group_access(group_id, current_user.id, db)
    expense = get_expense_or_404(group_id, expense_id, db)

    if current_user.id not in (expense.paid_by, group.created_by):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to delete this expense"
        )

    expense_service.delete_expense(expense, db)
    event_bus.publish(group_id, "expense:deleted", expense_id=expense_id)
    return {"message": "Expense deleted successfully"}
