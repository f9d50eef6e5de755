"""
Settlement payment routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from splitledger.db.session import get_db
from splitledger.core.errors import LedgerError
from splitledger.models.user import User
from splitledger.models.payment import SettlementPayment
from splitledger.schemas.payment import PaymentCreate, PaymentResponse
from splitledger.api.dependencies import get_current_user, check_group_access, ledger_error
from splitledger.services import payment_service
from splitledger.services.group_service import load_payments
from splitledger.services.event_service import event_bus

router = APIRouter(prefix="/groups/{group_id}/payments", tags=["payments"])


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List recorded payments, newest first."""
    check_group_access(group_id, current_user.id, db)
    return load_payments(group_id, db)


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    group_id: int,
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record a settling payment after checking it against current balances."""
    check_group_access(group_id, current_user.id, db)

    try:
        payment = payment_service.record_payment(
            group_id=group_id,
            from_id=payment_data.from_id,
            to_id=payment_data.to_id,
            amount=payment_data.amount,
            created_by=current_user.id,
            note=payment_data.note,
            db=db
        )
    except LedgerError as e:
        raise ledger_error(e)

    event_bus.publish(group_id, "payment:created", payment_id=payment.id)
    return payment


@router.delete("/{payment_id}")
async def delete_payment(
    group_id: int,
    payment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel a payment. Allowed for its author and the group creator."""
    group = check_group_access(group_id, current_user.id, db)

    payment = db.query(SettlementPayment).filter(
        SettlementPayment.id == payment_id,
        SettlementPayment.group_id == group_id
    ).first()
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )

    if not payment_service.can_delete_payment(payment, group, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to cancel this payment"
        )

    payment_service.delete_payment(payment, db)
    event_bus.publish(group_id, "payment:deleted", payment_id=payment_id)
    return {"message": "Payment cancelled successfully"}
