"""
Balance and settlement routes. Everything here is recomputed from the
group's full expense and payment history on every request.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from splitledger.db.session import get_db
from splitledger.models.user import User
from splitledger.schemas.payment import PaymentCheckResponse, PaymentCreate
from splitledger.schemas.settlement import Balance, GroupSummary, NetBalance, Settlement
from splitledger.api.dependencies import get_current_user, check_group_access
from splitledger.services.balance_service import calculate_balances, compute_net_balances
from splitledger.services.group_service import load_snapshot
from splitledger.services.payment_service import validate_payment
from splitledger.services.settlement_service import optimize_settlements, summarize_group

router = APIRouter(prefix="/groups/{group_id}", tags=["settlement"])


@router.get("/balances", response_model=List[NetBalance])
async def get_net_balances(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Signed net balance per participant, payments included."""
    check_group_access(group_id, current_user.id, db)
    snapshot = load_snapshot(group_id, db)
    net_balances = compute_net_balances(snapshot.expenses, snapshot.participants, snapshot.payments)
    return [
        NetBalance(participant_id=p.id, name=p.name, amount=net_balances[p.id])
        for p in snapshot.participants
    ]


@router.get("/balances/matrix", response_model=List[Balance])
async def get_debt_matrix(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Debtor to creditor obligations from expenses alone."""
    check_group_access(group_id, current_user.id, db)
    snapshot = load_snapshot(group_id, db)
    return calculate_balances(snapshot.expenses, snapshot.participants)


@router.get("/settlements", response_model=List[Settlement])
async def get_settlements(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Suggested transfers that settle the group."""
    check_group_access(group_id, current_user.id, db)
    snapshot = load_snapshot(group_id, db)
    return optimize_settlements(snapshot.expenses, snapshot.participants, snapshot.payments)


@router.get("/summary", response_model=GroupSummary)
async def get_summary(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Totals, per-participant balances and suggested transfers."""
    check_group_access(group_id, current_user.id, db)
    snapshot = load_snapshot(group_id, db)
    return summarize_group(snapshot.expenses, snapshot.participants, snapshot.payments)


@router.post("/payment-check", response_model=PaymentCheckResponse)
async def check_payment(
    group_id: int,
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Dry-run the payment guard without recording anything."""
    check_group_access(group_id, current_user.id, db)
    snapshot = load_snapshot(group_id, db)
    net_balances = compute_net_balances(snapshot.expenses, snapshot.participants, snapshot.payments)

    error = validate_payment(payment_data.from_id, payment_data.to_id, payment_data.amount, net_balances)
    if error is None:
        return PaymentCheckResponse(ok=True)
    return PaymentCheckResponse(
        ok=False,
        code=error.code,
        detail=error.message,
        max_amount=getattr(error, "max_amount", None)
    )
