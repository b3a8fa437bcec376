# app/schemas/snapshot.py
from typing import List, Optional
from pydantic import BaseModel
from datetime import date
import uuid

from app.models.category import CategoryType, Segment
from app.models.debt import DebtStatus
from app.models.goal import GoalStatus
from app.models.transaction import TransactionKind
from app.schemas.common import Money

class ProfileSummary(BaseModel):
    name: str
    currency: str
    rule: str  # needs/wants/savings, e.g. "50/30/20"

class MonthSummary(BaseModel):
    start: date
    end: date
    income: Money
    expenses: Money
    savings: Money
    balance: Money
    savings_rate: int
    days_remaining: int
    daily_budget: Money

class CategorySpend(BaseModel):
    category_id: Optional[uuid.UUID] = None
    name: str
    total: Money
    operation_count: int

class CategoryRef(BaseModel):
    id: uuid.UUID
    name: str
    type: CategoryType
    segment: Optional[Segment] = None

class GoalProgress(BaseModel):
    id: uuid.UUID
    name: str
    target_amount: Money
    current_amount: Money
    progress: int
    status: GoalStatus
    target_date: Optional[date] = None

class DebtProgress(BaseModel):
    id: uuid.UUID
    name: str
    original_amount: Money
    current_balance: Money
    interest_rate: Money
    progress: int
    status: DebtStatus
    due_date: Optional[date] = None

class RecentOperation(BaseModel):
    id: uuid.UUID
    concept: str
    amount: Money
    type: TransactionKind
    category: str
    date: date

class MonthTrend(BaseModel):
    month: str  # YYYY-MM
    income: Money
    expenses: Money

class FinancialSnapshot(BaseModel):
    """Read-only summary of one user's finances, used as assistant context and by the dashboard."""
    today: date
    profile: ProfileSummary
    current_month: MonthSummary
    category_spend: List[CategorySpend]
    categories: List[CategoryRef]
    goals: List[GoalProgress]
    debts: List[DebtProgress]
    recent_operations: List[RecentOperation]
    monthly_trend: List[MonthTrend]
