# app/api/v1/routes/dashboard.py
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_current_user
from app.schemas.snapshot import FinancialSnapshot
from app.services.context_snapshot import ContextSnapshotBuilder

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/snapshot", response_model=FinancialSnapshot)
async def get_dashboard_snapshot(
    day: Optional[date] = Query(None, description="Reference day, defaults to today"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Returns the same financial summary the assistant works with:
    - Current month: income, expenses, savings, balance, savings rate, daily budget
    - Spending per category, open goals and debts with progress
    - Recent operations and a six-month income/expense trend
    """
    return await ContextSnapshotBuilder(db, user).build(today=day)
