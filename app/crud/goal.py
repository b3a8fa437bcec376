# app/crud/goal.py
# Ledger writes here only add/flush; ActionExecutor owns commit and rollback.
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, desc, func
from app.models.goal import SavingsGoal, SavingsContribution, GoalStatus
from typing import Iterable, List, Optional
import uuid

from app.core.db_utils import contains_pattern
from app.utils.money import coerce_decimal

async def get_goals_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    statuses: Optional[Iterable[GoalStatus]] = None,
) -> List[SavingsGoal]:
    stmt = select(SavingsGoal).where(SavingsGoal.user_id == user_id)
    if statuses is not None:
        stmt = stmt.where(SavingsGoal.status.in_(list(statuses)))
    result = await db.execute(stmt.order_by(SavingsGoal.priority, SavingsGoal.created_at))
    return list(result.scalars().all())

async def get_goal_by_id(
    goal_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
    for_update: bool = False,
) -> Optional[SavingsGoal]:
    stmt = select(SavingsGoal).where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
    if for_update:
        # Serializes concurrent writers on the same goal until commit
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()

async def find_goals_by_name(name: str, user_id: uuid.UUID, db: AsyncSession) -> List[SavingsGoal]:
    """Case-insensitive name lookup: exact matches if any, otherwise substring matches."""
    needle = name.strip().lower()
    if not needle:
        return []
    lowered = func.lower(SavingsGoal.name)
    result = await db.execute(
        select(SavingsGoal).where(SavingsGoal.user_id == user_id, lowered == needle)
    )
    exact = list(result.scalars().all())
    if exact:
        return exact
    result = await db.execute(
        select(SavingsGoal)
        .where(SavingsGoal.user_id == user_id, lowered.like(contains_pattern(needle), escape="\\"))
        .order_by(SavingsGoal.name)
    )
    return list(result.scalars().all())

async def add_goal(goal: SavingsGoal, db: AsyncSession) -> SavingsGoal:
    db.add(goal)
    await db.flush()
    return goal

async def delete_goal(goal: SavingsGoal, db: AsyncSession) -> None:
    """Deletes the goal together with its contribution ledger."""
    await db.execute(
        delete(SavingsContribution).where(
            SavingsContribution.savings_goal_id == goal.id,
            SavingsContribution.user_id == goal.user_id,
        )
    )
    await db.delete(goal)
    await db.flush()

async def get_contributions_for_goal(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> List[SavingsContribution]:
    result = await db.execute(
        select(SavingsContribution)
        .where(SavingsContribution.savings_goal_id == goal_id, SavingsContribution.user_id == user_id)
        .order_by(desc(SavingsContribution.contribution_date), desc(SavingsContribution.created_at))
    )
    return list(result.scalars().all())

async def get_contribution_by_id(contribution_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[SavingsContribution]:
    result = await db.execute(
        select(SavingsContribution).where(
            SavingsContribution.id == contribution_id,
            SavingsContribution.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()

async def add_contribution(contribution: SavingsContribution, db: AsyncSession) -> SavingsContribution:
    db.add(contribution)
    await db.flush()
    return contribution

async def delete_contribution(contribution: SavingsContribution, db: AsyncSession) -> None:
    await db.delete(contribution)
    await db.flush()

async def sum_contributions(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(SavingsContribution.amount), 0)).where(
            SavingsContribution.savings_goal_id == goal_id,
            SavingsContribution.user_id == user_id,
        )
    )
    return coerce_decimal(result.scalar_one())
