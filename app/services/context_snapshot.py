# app/services/context_snapshot.py
"""Read-only financial summary for one user.

Only SELECTs are issued here. The snapshot is advisory context for the
assistant and the dashboard, so it does not need to be read in the same
transaction as any write.
"""
import logging
import uuid
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import User
from app.core.config import settings
from app.crud.category import get_categories_for_user
from app.crud.debt import get_debts_for_user
from app.crud.goal import get_goals_for_user
from app.crud.transaction import get_recent_transactions, sum_by_category, sum_by_kind
from app.models.debt import DebtStatus
from app.models.goal import GoalStatus
from app.models.transaction import TransactionKind
from app.schemas.snapshot import (
    CategoryRef,
    CategorySpend,
    DebtProgress,
    FinancialSnapshot,
    GoalProgress,
    MonthSummary,
    MonthTrend,
    ProfileSummary,
    RecentOperation,
)
from app.utils.budgeting import (
    daily_budget,
    days_remaining_in_month,
    debt_progress,
    goal_progress,
    rule_label,
    savings_rate,
)
from app.utils.dates import month_bounds, previous_months
from app.utils.money import coerce_decimal

logger = logging.getLogger(__name__)

TREND_MONTHS = 6
OPEN_GOAL_STATUSES = (GoalStatus.active, GoalStatus.paused)
OPEN_DEBT_STATUSES = (DebtStatus.active, DebtStatus.paused)
UNCATEGORIZED = "Uncategorized"


class ContextSnapshotBuilder:
    def __init__(self, db: AsyncSession, user: User, recent_limit: Optional[int] = None):
        self.db = db
        self.user = user
        self.user_id: uuid.UUID = user.id
        self.recent_limit = recent_limit or settings.CONTEXT_RECENT_OPERATIONS

    async def build(self, today: Optional[date] = None) -> FinancialSnapshot:
        today = today or date.today()
        all_categories = await get_categories_for_user(self.user_id, self.db)
        names: Dict[uuid.UUID, str] = {c.id: c.name for c in all_categories}

        snapshot = FinancialSnapshot(
            today=today,
            profile=self._profile(),
            current_month=await self._current_month(today),
            category_spend=await self._category_spend(today, names),
            categories=[
                CategoryRef(id=c.id, name=c.name, type=c.type, segment=c.segment)
                for c in all_categories
                if c.is_active
            ],
            goals=await self._goals(),
            debts=await self._debts(),
            recent_operations=await self._recent_operations(),
            monthly_trend=await self._trend(today),
        )
        logger.debug(f"Built financial snapshot for user {self.user_id} on {today}")
        return snapshot

    def _profile(self) -> ProfileSummary:
        return ProfileSummary(
            name=self.user.full_name or "User",
            currency=self.user.currency or "EUR",
            rule=rule_label(
                self.user.rule_needs_percent,
                self.user.rule_wants_percent,
                self.user.rule_savings_percent,
            ),
        )

    async def _current_month(self, today: date) -> MonthSummary:
        start, end = month_bounds(today)
        totals = await sum_by_kind(self.user_id, start, end, self.db)
        income = totals[TransactionKind.income]
        expenses = totals[TransactionKind.expense]
        balance = income - expenses
        remaining = days_remaining_in_month(today)
        return MonthSummary(
            start=start,
            end=end,
            income=income,
            expenses=expenses,
            savings=totals[TransactionKind.savings],
            balance=balance,
            savings_rate=savings_rate(income, expenses),
            days_remaining=remaining,
            daily_budget=daily_budget(balance, remaining),
        )

    async def _category_spend(self, today: date, names: Dict[uuid.UUID, str]) -> List[CategorySpend]:
        start, end = month_bounds(today)
        rows = await sum_by_category(self.user_id, start, end, self.db, kind=TransactionKind.expense)
        return [
            CategorySpend(
                category_id=category_id,
                name=names.get(category_id, UNCATEGORIZED) if category_id else UNCATEGORIZED,
                total=total,
                operation_count=count,
            )
            for category_id, total, count in rows
        ]

    async def _goals(self) -> List[GoalProgress]:
        goals = await get_goals_for_user(self.user_id, self.db, statuses=OPEN_GOAL_STATUSES)
        return [
            GoalProgress(
                id=g.id,
                name=g.name,
                target_amount=g.target_amount,
                current_amount=g.current_amount,
                progress=goal_progress(coerce_decimal(g.current_amount), coerce_decimal(g.target_amount)),
                status=g.status,
                target_date=g.target_date,
            )
            for g in goals
        ]

    async def _debts(self) -> List[DebtProgress]:
        debts = await get_debts_for_user(self.user_id, self.db, statuses=OPEN_DEBT_STATUSES)
        return [
            DebtProgress(
                id=d.id,
                name=d.name,
                original_amount=d.original_amount,
                current_balance=d.current_balance,
                interest_rate=d.interest_rate,
                progress=debt_progress(coerce_decimal(d.original_amount), coerce_decimal(d.current_balance)),
                status=d.status,
                due_date=d.due_date,
            )
            for d in debts
        ]

    async def _recent_operations(self) -> List[RecentOperation]:
        recent = await get_recent_transactions(self.db, self.user_id, limit=self.recent_limit)
        return [
            RecentOperation(
                id=tx.id,
                concept=tx.concept,
                amount=tx.amount,
                type=tx.kind,
                category=tx.category.name if tx.category else UNCATEGORIZED,
                date=tx.transaction_date,
            )
            for tx in recent
        ]

    async def _trend(self, today: date) -> List[MonthTrend]:
        trend = []
        for start, end in previous_months(today, TREND_MONTHS):
            totals = await sum_by_kind(self.user_id, start, end, self.db)
            trend.append(
                MonthTrend(
                    month=start.strftime("%Y-%m"),
                    income=totals[TransactionKind.income],
                    expenses=totals[TransactionKind.expense],
                )
            )
        return trend
