# app/utils/budgeting.py
import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from app.utils.money import ZERO, quantize_money


# ────────────────────────────────────────────────────────────────────────────────
# PROGRESS
# ────────────────────────────────────────────────────────────────────────────────
def progress_percent(done: Decimal, total: Decimal) -> int:
    """Whole-number percentage of ``done`` over ``total``, 0 when total is not positive."""
    if total <= ZERO:
        return 0
    return int((done / total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def goal_progress(current_amount: Decimal, target_amount: Decimal) -> int:
    return progress_percent(current_amount, target_amount)


def debt_progress(original_amount: Decimal, current_balance: Decimal) -> int:
    """Share of the original amount already paid off."""
    return progress_percent(original_amount - current_balance, original_amount)


# ────────────────────────────────────────────────────────────────────────────────
# MONTH
# ────────────────────────────────────────────────────────────────────────────────
def savings_rate(income: Decimal, expenses: Decimal) -> int:
    """Percentage of the month's income that was not spent."""
    return progress_percent(income - expenses, income)


def days_remaining_in_month(today: date) -> int:
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    return days_in_month - today.day


def daily_budget(balance: Decimal, days_remaining: int) -> Decimal:
    """What can still be spent per day until the month ends.

    On the last day of the month there are no days left to spread the
    balance over, so the budget is 0.
    """
    if days_remaining <= 0:
        return ZERO
    return quantize_money(balance / days_remaining)


def rule_label(needs: Optional[int], wants: Optional[int], savings: Optional[int]) -> str:
    return f"{needs or 50}/{wants or 30}/{savings or 20}"
