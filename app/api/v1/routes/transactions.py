# app/api/v1/routes/transactions.py
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.transaction import TransactionCreate, TransactionRead
from app.crud.transaction import get_transactions_for_user, get_transaction_by_id
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_action_executor, get_current_user, unwrap
from app.services.action_executor import ActionExecutor

router = APIRouter(prefix="/transactions", tags=["transactions"])

@router.get("", response_model=List[TransactionRead])
async def read_transactions(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_transactions_for_user(user.id, db, start=start, end=end)

@router.post("", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    tx_in: TransactionCreate,
    executor: ActionExecutor = Depends(get_action_executor),
):
    result = await executor.create_transaction(
        amount=tx_in.amount,
        concept=tx_in.concept,
        kind=tx_in.kind,
        category_id=tx_in.category_id,
        transaction_date=tx_in.transaction_date,
        description=tx_in.description,
    )
    return unwrap(result)["transaction"]

@router.get("/{transaction_id}", response_model=TransactionRead)
async def read_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await get_transaction_by_id(transaction_id, user.id, db)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return tx

@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction_endpoint(
    transaction_id: uuid.UUID,
    executor: ActionExecutor = Depends(get_action_executor),
):
    unwrap(await executor.delete_transaction(transaction_id))
    return None
