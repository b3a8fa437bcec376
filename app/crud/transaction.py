# app/crud/transaction.py
# Ledger writes here only add/flush; ActionExecutor owns commit and rollback.
from datetime import date
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func
from app.models.transaction import Transaction, TransactionKind
from typing import Dict, List, Optional, Tuple
import uuid

from app.utils.money import coerce_decimal

async def get_transactions_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Transaction]:
    stmt = select(Transaction).where(Transaction.user_id == user_id)
    if start is not None:
        stmt = stmt.where(Transaction.transaction_date >= start)
    if end is not None:
        stmt = stmt.where(Transaction.transaction_date <= end)
    result = await db.execute(stmt.order_by(desc(Transaction.transaction_date), desc(Transaction.created_at)))
    return list(result.scalars().all())

async def get_recent_transactions(db: AsyncSession, user_id: uuid.UUID, limit: int = 10) -> List[Transaction]:
    """Get the most recent transactions for a user with optional limit"""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(desc(Transaction.transaction_date), desc(Transaction.created_at))
        .limit(limit)
    )
    return list(result.scalars().all())

async def get_transaction_by_id(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Transaction]:
    result = await db.execute(
        select(Transaction).where(Transaction.id == transaction_id, Transaction.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def add_transaction(tx: Transaction, db: AsyncSession) -> Transaction:
    db.add(tx)
    await db.flush()
    return tx

async def delete_transaction(tx: Transaction, db: AsyncSession) -> None:
    await db.delete(tx)
    await db.flush()

async def sum_by_kind(
    user_id: uuid.UUID,
    start: date,
    end: date,
    db: AsyncSession,
) -> Dict[TransactionKind, Decimal]:
    """Totals per transaction kind between two dates (inclusive)."""
    result = await db.execute(
        select(Transaction.kind, func.sum(Transaction.amount))
        .where(
            Transaction.user_id == user_id,
            Transaction.transaction_date >= start,
            Transaction.transaction_date <= end,
        )
        .group_by(Transaction.kind)
    )
    totals = {kind: Decimal("0") for kind in TransactionKind}
    for kind, total in result.all():
        totals[TransactionKind(kind)] = coerce_decimal(total)
    return totals

async def sum_by_category(
    user_id: uuid.UUID,
    start: date,
    end: date,
    db: AsyncSession,
    kind: Optional[TransactionKind] = None,
) -> List[Tuple[Optional[uuid.UUID], Decimal, int]]:
    """(category_id, total, count) rows for the period, largest total first."""
    total = func.sum(Transaction.amount)
    stmt = select(Transaction.category_id, total, func.count(Transaction.id)).where(
        Transaction.user_id == user_id,
        Transaction.transaction_date >= start,
        Transaction.transaction_date <= end,
    )
    if kind is not None:
        stmt = stmt.where(Transaction.kind == kind)
    result = await db.execute(
        stmt.group_by(Transaction.category_id)
        .order_by(desc(total))
    )
    return [(row[0], coerce_decimal(row[1]), int(row[2])) for row in result.all()]
