# app/services/debt_aggregate.py
"""Debt bookkeeping, the mirror image of GoalAggregate.

``current_balance`` is ``original_amount`` minus the payment ledger, clamped
to ``[0, original_amount]``, and is derived again after every change.
"""
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    DebtNotFound,
    InvalidAmount,
    InvalidTransition,
    PaymentNotFound,
    ValidationError,
)
from app.crud.debt import (
    add_payment,
    delete_payment,
    get_debt_by_id,
    get_payment_by_id,
    sum_payments,
)
from app.models.debt import Debt, DebtPayment, DebtStatus
from app.utils.dates import utcnow
from app.utils.money import MAX_AMOUNT, ZERO, coerce_decimal, quantize_money, validate_positive_amount

logger = logging.getLogger(__name__)

MAX_INTEREST_RATE = Decimal("1000")

REVISABLE_DEBT_FIELDS = (
    "name", "description", "creditor", "debt_type", "original_amount", "interest_rate",
    "monthly_payment", "start_date", "due_date", "priority",
)
REQUIRED_DEBT_FIELDS = ("name", "debt_type", "original_amount", "interest_rate", "start_date", "priority")


def derive_debt_balance(original_amount: Decimal, paid_total: Decimal, force_paid: bool) -> Decimal:
    if force_paid:
        return ZERO
    return min(max(original_amount - paid_total, ZERO), original_amount)


def derive_debt_status(
    status: DebtStatus,
    balance: Decimal,
    force_paid: bool,
    paid_at: Optional[datetime],
    now: datetime,
) -> Tuple[DebtStatus, Optional[datetime]]:
    if force_paid or balance <= ZERO:
        return DebtStatus.paid, paid_at or now
    if status == DebtStatus.paid:
        return DebtStatus.active, None
    return status, paid_at


class DebtAggregate:
    def __init__(self, db: AsyncSession, user_id: uuid.UUID):
        self.db = db
        self.user_id = user_id

    async def load(self, debt_id: uuid.UUID) -> Debt:
        debt = await get_debt_by_id(debt_id, self.user_id, self.db, for_update=True)
        if debt is None:
            raise DebtNotFound(debt_id)
        return debt

    async def _refresh(self, debt: Debt) -> Debt:
        paid_total = await sum_payments(debt.id, self.user_id, self.db)
        debt.current_balance = derive_debt_balance(
            coerce_decimal(debt.original_amount), paid_total, bool(debt.force_paid)
        )
        debt.status, debt.paid_at = derive_debt_status(
            DebtStatus(debt.status),
            debt.current_balance,
            bool(debt.force_paid),
            debt.paid_at,
            utcnow(),
        )
        await self.db.flush()
        return debt

    async def recompute(self, debt_id: uuid.UUID) -> Tuple[Decimal, DebtStatus]:
        debt = await self._refresh(await self.load(debt_id))
        return debt.current_balance, debt.status

    async def apply_payment(
        self,
        debt_id: uuid.UUID,
        amount: Any,
        payment_date: Optional[date] = None,
        note: Optional[str] = None,
    ) -> DebtPayment:
        value = validate_positive_amount(amount)
        debt = await self.load(debt_id)
        if debt.status == DebtStatus.paid:
            raise InvalidTransition(debt.status.value, "pay a debt that is already paid")

        payment = DebtPayment(
            user_id=self.user_id,
            debt_id=debt.id,
            amount=value,
            payment_date=payment_date or date.today(),
            notes=note,
        )
        await add_payment(payment, self.db)
        await self._refresh(debt)
        logger.info(f"Payment of {value} added to debt {debt.id}; balance {debt.current_balance} ({debt.status.value})")
        return payment

    async def _load_payment(self, payment_id: uuid.UUID) -> Tuple[DebtPayment, Debt]:
        payment = await get_payment_by_id(payment_id, self.user_id, self.db)
        if payment is None:
            raise PaymentNotFound(payment_id)
        debt = await self.load(payment.debt_id)
        return payment, debt

    async def revise_payment(
        self,
        payment_id: uuid.UUID,
        new_amount: Any = None,
        new_date: Optional[date] = None,
        new_note: Optional[str] = None,
    ) -> DebtPayment:
        payment, debt = await self._load_payment(payment_id)
        if new_amount is not None:
            payment.amount = validate_positive_amount(new_amount)
        if new_date is not None:
            payment.payment_date = new_date
        if new_note is not None:
            payment.notes = new_note
        await self.db.flush()
        await self._refresh(debt)
        return payment

    async def remove_payment(self, payment_id: uuid.UUID) -> Debt:
        payment, debt = await self._load_payment(payment_id)
        await delete_payment(payment, self.db)
        return await self._refresh(debt)

    async def force_paid(self, debt_id: uuid.UUID) -> Debt:
        debt = await self.load(debt_id)
        debt.force_paid = True
        return await self._refresh(debt)

    async def set_paused(self, debt_id: uuid.UUID, paused: bool) -> Debt:
        debt = await self.load(debt_id)
        if debt.status == DebtStatus.paid:
            raise InvalidTransition(debt.status.value, "pause" if paused else "resume")
        debt.status = DebtStatus.paused if paused else DebtStatus.active
        await self.db.flush()
        return debt

    async def reopen(self, debt_id: uuid.UUID) -> Debt:
        """Undo a manual settlement; the payment ledger decides the new status."""
        debt = await self.load(debt_id)
        if not debt.force_paid:
            raise InvalidTransition(debt.status.value, "reopen a debt that was not marked as paid")
        debt.force_paid = False
        return await self._refresh(debt)

    async def revise_debt(self, debt_id: uuid.UUID, **fields: Any) -> Debt:
        debt = await self.load(debt_id)
        for field, value in fields.items():
            if field not in REVISABLE_DEBT_FIELDS:
                raise ValidationError(f"Field cannot be edited: {field}")
            if value is None and field in REQUIRED_DEBT_FIELDS:
                raise ValidationError(f"{field} cannot be empty", field=field)
            if field == "original_amount":
                value = validate_positive_amount(value)
            elif field in ("interest_rate", "monthly_payment") and value is not None:
                value = validate_non_negative(field, value)
            elif field == "name" and not (value or "").strip():
                raise ValidationError("Name is required")
            elif field == "priority" and not 1 <= int(value) <= 5:
                raise ValidationError("Priority must be between 1 and 5")
            setattr(debt, field, value)
        return await self._refresh(debt)


def validate_non_negative(field: str, value: Any) -> Decimal:
    """Parse a rate or instalment; ``interest_rate`` is stored as Numeric(5, 2)."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} is not a number", field=field, value=str(value))
    try:
        amount = coerce_decimal(value)
        if amount.is_finite():
            amount = quantize_money(amount)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} is not a number", field=field, value=str(value))
    if not amount.is_finite() or amount < ZERO:
        raise ValidationError(f"{field} cannot be negative", field=field, value=str(value))
    limit = MAX_INTEREST_RATE if field == "interest_rate" else MAX_AMOUNT
    if amount >= limit:
        raise ValidationError(f"{field} must be below {limit:,.0f}", field=field, value=str(value))
    return amount


def validate_new_debt(name: Optional[str], original_amount: Any) -> Tuple[str, Decimal]:
    if not name or not name.strip():
        raise ValidationError("Name is required")
    try:
        original = validate_positive_amount(original_amount)
    except InvalidAmount:
        raise InvalidAmount(original_amount, message="Initial amount must be greater than zero")
    return name.strip(), original
