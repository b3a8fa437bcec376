# app/crud/debt.py
# Ledger writes here only add/flush; ActionExecutor owns commit and rollback.
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, desc, func
from app.models.debt import Debt, DebtPayment, DebtStatus
from typing import Iterable, List, Optional
import uuid

from app.core.db_utils import contains_pattern
from app.utils.money import coerce_decimal

async def get_debts_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    statuses: Optional[Iterable[DebtStatus]] = None,
) -> List[Debt]:
    stmt = select(Debt).where(Debt.user_id == user_id)
    if statuses is not None:
        stmt = stmt.where(Debt.status.in_(list(statuses)))
    result = await db.execute(stmt.order_by(Debt.priority, desc(Debt.current_balance)))
    return list(result.scalars().all())

async def get_debt_by_id(
    debt_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
    for_update: bool = False,
) -> Optional[Debt]:
    stmt = select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()

async def find_debts_by_name(name: str, user_id: uuid.UUID, db: AsyncSession) -> List[Debt]:
    """Case-insensitive name lookup: exact matches if any, otherwise substring matches."""
    needle = name.strip().lower()
    if not needle:
        return []
    lowered = func.lower(Debt.name)
    result = await db.execute(select(Debt).where(Debt.user_id == user_id, lowered == needle))
    exact = list(result.scalars().all())
    if exact:
        return exact
    result = await db.execute(
        select(Debt)
        .where(Debt.user_id == user_id, lowered.like(contains_pattern(needle), escape="\\"))
        .order_by(Debt.name)
    )
    return list(result.scalars().all())

async def add_debt(debt: Debt, db: AsyncSession) -> Debt:
    db.add(debt)
    await db.flush()
    return debt

async def delete_debt(debt: Debt, db: AsyncSession) -> None:
    """Deletes the debt together with its payment ledger."""
    await db.execute(
        delete(DebtPayment).where(DebtPayment.debt_id == debt.id, DebtPayment.user_id == debt.user_id)
    )
    await db.delete(debt)
    await db.flush()

async def get_payments_for_debt(debt_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> List[DebtPayment]:
    result = await db.execute(
        select(DebtPayment)
        .where(DebtPayment.debt_id == debt_id, DebtPayment.user_id == user_id)
        .order_by(desc(DebtPayment.payment_date), desc(DebtPayment.created_at))
    )
    return list(result.scalars().all())

async def get_payment_by_id(payment_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[DebtPayment]:
    result = await db.execute(
        select(DebtPayment).where(DebtPayment.id == payment_id, DebtPayment.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def add_payment(payment: DebtPayment, db: AsyncSession) -> DebtPayment:
    db.add(payment)
    await db.flush()
    return payment

async def delete_payment(payment: DebtPayment, db: AsyncSession) -> None:
    await db.delete(payment)
    await db.flush()

async def sum_payments(debt_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(DebtPayment.amount), 0)).where(
            DebtPayment.debt_id == debt_id,
            DebtPayment.user_id == user_id,
        )
    )
    return coerce_decimal(result.scalar_one())
