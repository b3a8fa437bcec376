# app/api/v1/routes/debts.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.debt import (
    DebtCreate,
    DebtDetail,
    DebtRead,
    DebtUpdate,
    PaymentCreate,
    PaymentRead,
    PaymentResult,
    PaymentUpdate,
)
from app.crud.debt import get_debt_by_id, get_debts_for_user, get_payment_by_id, get_payments_for_debt
from app.models.debt import DebtStatus
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_action_executor, get_current_user, unwrap
from app.services.action_executor import ActionExecutor

router = APIRouter(prefix="/debts", tags=["debts"])

async def _ensure_payment_of_debt(
    debt_id: uuid.UUID,
    payment_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
) -> None:
    payment = await get_payment_by_id(payment_id, user_id, db)
    if payment is None or payment.debt_id != debt_id:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND,
            detail={"code": "payment_not_found", "error": "Payment not found"},
        )

@router.get("", response_model=List[DebtRead])
async def read_debts(
    status_filter: Optional[List[DebtStatus]] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_debts_for_user(user.id, db, statuses=status_filter)

@router.post("", response_model=DebtRead, status_code=status.HTTP_201_CREATED)
async def create_debt(
    debt_in: DebtCreate,
    executor: ActionExecutor = Depends(get_action_executor),
):
    result = await executor.create_debt(**debt_in.model_dump())
    return unwrap(result)["debt"]

@router.get("/{debt_id}", response_model=DebtDetail)
async def read_debt(
    debt_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    debt = await get_debt_by_id(debt_id, user.id, db)
    if not debt:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Debt not found")
    payments = await get_payments_for_debt(debt.id, user.id, db)
    detail = DebtDetail.model_validate(debt)
    detail.payments = [PaymentRead.model_validate(p) for p in payments]
    return detail

@router.patch("/{debt_id}", response_model=DebtRead)
async def update_debt(
    debt_id: uuid.UUID,
    debt_in: DebtUpdate,
    executor: ActionExecutor = Depends(get_action_executor),
):
    result = await executor.update_debt(debt_id, **debt_in.model_dump(exclude_unset=True))
    return unwrap(result)["debt"]

@router.delete("/{debt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_debt(
    debt_id: uuid.UUID,
    executor: ActionExecutor = Depends(get_action_executor),
):
    unwrap(await executor.delete_debt(debt_id))
    return None

# ------------------------------------------------------------
# PAYMENTS
# ------------------------------------------------------------
@router.post("/{debt_id}/payments", response_model=PaymentResult, status_code=status.HTTP_201_CREATED)
async def add_payment(
    debt_id: uuid.UUID,
    payment_in: PaymentCreate,
    executor: ActionExecutor = Depends(get_action_executor),
):
    result = await executor.pay_debt(
        payment_in.amount,
        debt_id=debt_id,
        note=payment_in.notes,
        payment_date=payment_in.payment_date,
    )
    return unwrap(result)

@router.patch("/{debt_id}/payments/{payment_id}", response_model=PaymentResult)
async def update_payment(
    debt_id: uuid.UUID,
    payment_id: uuid.UUID,
    payment_in: PaymentUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    executor: ActionExecutor = Depends(get_action_executor),
):
    await _ensure_payment_of_debt(debt_id, payment_id, user.id, db)
    result = await executor.revise_payment(
        payment_id,
        amount=payment_in.amount,
        payment_date=payment_in.payment_date,
        note=payment_in.notes,
    )
    return unwrap(result)

@router.delete("/{debt_id}/payments/{payment_id}", response_model=DebtRead)
async def delete_payment(
    debt_id: uuid.UUID,
    payment_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    executor: ActionExecutor = Depends(get_action_executor),
):
    await _ensure_payment_of_debt(debt_id, payment_id, user.id, db)
    return unwrap(await executor.remove_payment(payment_id))["debt"]

# ------------------------------------------------------------
# STATUS ACTIONS
# ------------------------------------------------------------
@router.post("/{debt_id}/pause", response_model=DebtRead)
async def pause_debt(debt_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    return unwrap(await executor.set_debt_paused(debt_id, True))["debt"]

@router.post("/{debt_id}/resume", response_model=DebtRead)
async def resume_debt(debt_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    return unwrap(await executor.set_debt_paused(debt_id, False))["debt"]

@router.post("/{debt_id}/mark-paid", response_model=DebtRead)
async def mark_debt_paid(debt_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    """Settle the debt outside the payment ledger; the balance reads 0 from now on."""
    return unwrap(await executor.force_pay_debt(debt_id))["debt"]

@router.post("/{debt_id}/reopen", response_model=DebtRead)
async def reopen_debt(debt_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    return unwrap(await executor.reopen_debt(debt_id))["debt"]

@router.post("/{debt_id}/recompute", response_model=DebtRead)
async def recompute_debt(debt_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    return unwrap(await executor.recompute_debt(debt_id))["debt"]
