# app/services/goal_aggregate.py
"""Savings goal bookkeeping.

``current_amount`` and ``status`` are never patched incrementally: after every
ledger change the goal row is locked, the contribution ledger is summed and
both fields are derived again. All methods run inside the caller's
transaction and leave the session dirty on error, so the caller must roll
back when they raise.
"""
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ContributionNotFound,
    GoalNotFound,
    InvalidAmount,
    InvalidTransition,
    OverTarget,
    ValidationError,
)
from app.crud.goal import (
    add_contribution,
    delete_contribution,
    get_contribution_by_id,
    get_goal_by_id,
    sum_contributions,
)
from app.models.goal import GoalStatus, SavingsContribution, SavingsGoal
from app.utils.dates import utcnow
from app.utils.money import ZERO, coerce_decimal, validate_positive_amount

logger = logging.getLogger(__name__)

REVISABLE_GOAL_FIELDS = ("name", "description", "icon", "color", "target_amount", "target_date", "priority")
REQUIRED_GOAL_FIELDS = ("name", "icon", "color", "target_amount", "priority")


def derive_goal_status(
    status: GoalStatus,
    amount: Decimal,
    target_amount: Decimal,
    force_completed: bool,
    completed_at: Optional[datetime],
    now: datetime,
) -> Tuple[GoalStatus, Optional[datetime]]:
    """Status and completion timestamp for a freshly recomputed amount."""
    if status == GoalStatus.cancelled:
        return status, completed_at
    if force_completed or amount >= target_amount:
        return GoalStatus.completed, completed_at or now
    if status == GoalStatus.completed:
        return GoalStatus.active, None
    return status, completed_at


class GoalAggregate:
    def __init__(self, db: AsyncSession, user_id: uuid.UUID):
        self.db = db
        self.user_id = user_id

    async def load(self, goal_id: uuid.UUID) -> SavingsGoal:
        """Fetch the owner's goal and lock its row for the rest of the transaction."""
        goal = await get_goal_by_id(goal_id, self.user_id, self.db, for_update=True)
        if goal is None:
            raise GoalNotFound(goal_id)
        return goal

    async def _refresh(self, goal: SavingsGoal) -> SavingsGoal:
        total = await sum_contributions(goal.id, self.user_id, self.db)
        goal.current_amount = max(total, ZERO)
        goal.status, goal.completed_at = derive_goal_status(
            GoalStatus(goal.status),
            goal.current_amount,
            coerce_decimal(goal.target_amount),
            bool(goal.force_completed),
            goal.completed_at,
            utcnow(),
        )
        await self.db.flush()
        return goal

    async def _check_target(self, goal: SavingsGoal, added: Decimal) -> None:
        total = await sum_contributions(goal.id, self.user_id, self.db)
        target = coerce_decimal(goal.target_amount)
        if total > target:
            remaining = max(target - (total - added), ZERO)
            raise OverTarget(target, total, remaining)

    def _ensure_accepts_contributions(self, goal: SavingsGoal) -> None:
        if goal.status == GoalStatus.cancelled:
            raise InvalidTransition(goal.status.value, "contribute to a cancelled goal")
        if goal.status == GoalStatus.completed and goal.force_completed:
            raise InvalidTransition(goal.status.value, "contribute to a closed goal")

    async def recompute(self, goal_id: uuid.UUID) -> Tuple[Decimal, GoalStatus]:
        goal = await self._refresh(await self.load(goal_id))
        return goal.current_amount, goal.status

    async def apply_contribution(
        self,
        goal_id: uuid.UUID,
        amount: Any,
        contribution_date: Optional[date] = None,
        note: Optional[str] = None,
    ) -> SavingsContribution:
        value = validate_positive_amount(amount)
        goal = await self.load(goal_id)
        self._ensure_accepts_contributions(goal)

        contribution = SavingsContribution(
            user_id=self.user_id,
            savings_goal_id=goal.id,
            amount=value,
            contribution_date=contribution_date or date.today(),
            notes=note,
        )
        await add_contribution(contribution, self.db)
        await self._check_target(goal, value)
        await self._refresh(goal)
        logger.info(f"Contribution of {value} added to goal {goal.id}; now {goal.current_amount}/{goal.target_amount} ({goal.status.value})")
        return contribution

    async def _load_contribution(self, contribution_id: uuid.UUID) -> Tuple[SavingsContribution, SavingsGoal]:
        contribution = await get_contribution_by_id(contribution_id, self.user_id, self.db)
        if contribution is None:
            raise ContributionNotFound(contribution_id)
        goal = await self.load(contribution.savings_goal_id)
        return contribution, goal

    async def revise_contribution(
        self,
        contribution_id: uuid.UUID,
        new_amount: Any = None,
        new_date: Optional[date] = None,
        new_note: Optional[str] = None,
    ) -> SavingsContribution:
        contribution, goal = await self._load_contribution(contribution_id)
        added = ZERO
        if new_amount is not None:
            value = validate_positive_amount(new_amount)
            added = value - coerce_decimal(contribution.amount)
            contribution.amount = value
        if new_date is not None:
            contribution.contribution_date = new_date
        if new_note is not None:
            contribution.notes = new_note
        await self.db.flush()
        if added > ZERO:
            await self._check_target(goal, added)
        await self._refresh(goal)
        return contribution

    async def remove_contribution(self, contribution_id: uuid.UUID) -> SavingsGoal:
        contribution, goal = await self._load_contribution(contribution_id)
        await delete_contribution(contribution, self.db)
        return await self._refresh(goal)

    async def force_complete(self, goal_id: uuid.UUID) -> SavingsGoal:
        goal = await self.load(goal_id)
        if goal.status == GoalStatus.cancelled:
            raise InvalidTransition(goal.status.value, "complete a cancelled goal")
        goal.force_completed = True
        return await self._refresh(goal)

    async def set_paused(self, goal_id: uuid.UUID, paused: bool) -> SavingsGoal:
        goal = await self.load(goal_id)
        if goal.status in (GoalStatus.completed, GoalStatus.cancelled):
            raise InvalidTransition(goal.status.value, "pause" if paused else "resume")
        goal.status = GoalStatus.paused if paused else GoalStatus.active
        await self.db.flush()
        return goal

    async def cancel(self, goal_id: uuid.UUID) -> SavingsGoal:
        goal = await self.load(goal_id)
        if goal.status == GoalStatus.completed:
            raise InvalidTransition(goal.status.value, "cancel")
        goal.status = GoalStatus.cancelled
        await self.db.flush()
        return goal

    async def reopen(self, goal_id: uuid.UUID) -> SavingsGoal:
        """Undo a manual close or cancel; the amount rule decides the new status."""
        goal = await self.load(goal_id)
        if goal.status not in (GoalStatus.completed, GoalStatus.cancelled):
            raise InvalidTransition(goal.status.value, "reopen")
        goal.force_completed = False
        if goal.status == GoalStatus.cancelled:
            goal.status = GoalStatus.active
        return await self._refresh(goal)

    async def revise_goal(self, goal_id: uuid.UUID, **fields: Any) -> SavingsGoal:
        goal = await self.load(goal_id)
        for field, value in fields.items():
            if field not in REVISABLE_GOAL_FIELDS:
                raise ValidationError(f"Field cannot be edited: {field}")
            if value is None and field in REQUIRED_GOAL_FIELDS:
                raise ValidationError(f"{field} cannot be empty", field=field)
            if field == "target_amount":
                value = validate_positive_amount(value)
            elif field == "name" and not (value or "").strip():
                raise ValidationError("Name is required")
            elif field == "priority" and not 1 <= int(value) <= 5:
                raise ValidationError("Priority must be between 1 and 5")
            setattr(goal, field, value)
        return await self._refresh(goal)


def validate_new_goal(name: Optional[str], target_amount: Any) -> Tuple[str, Decimal]:
    """Validates the fields every new goal needs, whichever entry point creates it."""
    if not name or not name.strip():
        raise ValidationError("Name is required")
    try:
        target = validate_positive_amount(target_amount)
    except InvalidAmount:
        raise InvalidAmount(target_amount, message="Target amount must be greater than zero")
    return name.strip(), target
