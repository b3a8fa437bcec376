# app/services/action_executor.py
"""The single mutation surface shared by the REST routes and the assistant.

Every public coroutine is one unit of work: it runs in one database
transaction, commits on success, rolls back on any error and never raises
for domain failures. Callers always get an ``ActionResult`` back.
"""
import logging
import uuid
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db_utils import with_db_retry
from app.core.errors import (
    AmbiguousDebt,
    AmbiguousGoal,
    CategoryNotFound,
    DebtNotFound,
    FinanceError,
    GoalNotFound,
    TransactionNotFound,
    ValidationError,
)
from app.crud.category import get_category_by_id
from app.crud.debt import add_debt, delete_debt, find_debts_by_name
from app.crud.goal import add_goal, delete_goal, find_goals_by_name
from app.crud.transaction import add_transaction, delete_transaction, get_transaction_by_id
from app.models.debt import Debt, DebtStatus, DebtType
from app.models.goal import GoalStatus, SavingsGoal
from app.models.transaction import Transaction, TransactionKind
from app.schemas.actions import ActionResult
from app.schemas.debt import DebtRead, PaymentRead
from app.schemas.goal import ContributionRead, GoalRead
from app.schemas.transaction import TransactionRead
from app.services.debt_aggregate import DebtAggregate, validate_new_debt, validate_non_negative
from app.services.goal_aggregate import GoalAggregate, validate_new_goal
from app.utils.dates import parse_iso_date
from app.utils.money import ZERO, validate_positive_amount

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "The operation could not be completed, please try again later"


def _coerce_uuid(value: Any, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"{field} is not a valid id", field=field, value=str(value))


def _coerce_date(value: Any, field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format", field=field, value=str(value))


def _coerce_priority(value: Any) -> int:
    try:
        priority = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Priority must be between 1 and 5", value=str(value))
    if not 1 <= priority <= 5:
        raise ValidationError("Priority must be between 1 and 5", value=str(value))
    return priority


def goal_payload(goal: SavingsGoal) -> Dict[str, Any]:
    return GoalRead.model_validate(goal).model_dump(mode="json")


def debt_payload(debt: Debt) -> Dict[str, Any]:
    return DebtRead.model_validate(debt).model_dump(mode="json")


class ActionExecutor:
    def __init__(self, db: AsyncSession, user_id: uuid.UUID):
        self.db = db
        self.user_id = user_id
        self.goals = GoalAggregate(db, user_id)
        self.debts = DebtAggregate(db, user_id)

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------
    @with_db_retry()
    async def _atomic(self, work: Callable[[], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
        try:
            data = await work()
            await self.db.commit()
            return data
        except BaseException:
            await self.db.rollback()
            raise

    async def _run(self, action: str, work: Callable[[], Awaitable[Dict[str, Any]]]) -> ActionResult:
        try:
            data = await self._atomic(work)
        except FinanceError as e:
            logger.warning(f"Action {action} rejected for user {self.user_id}: [{e.code}] {e.message}")
            return ActionResult(
                action=action,
                success=False,
                error=e.message,
                code=e.code,
                details=e.details or None,
                http_status=e.http_status,
            )
        except Exception:
            logger.exception(f"Action {action} failed for user {self.user_id}")
            return ActionResult(
                action=action,
                success=False,
                error=GENERIC_FAILURE,
                code="internal_error",
                http_status=500,
            )
        logger.info(f"Action {action} executed for user {self.user_id}")
        return ActionResult(action=action, success=True, data=data)

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------
    async def _resolve_goal_id(self, goal_id: Any = None, goal_name: Optional[str] = None) -> uuid.UUID:
        if goal_id:
            return _coerce_uuid(goal_id, "goal_id")
        if not goal_name or not str(goal_name).strip():
            raise ValidationError("A savings goal id or name is required")
        matches = await find_goals_by_name(str(goal_name), self.user_id, self.db)
        if not matches:
            raise GoalNotFound(goal_name)
        if len(matches) > 1:
            raise AmbiguousGoal(str(goal_name), [g.name for g in matches])
        return matches[0].id

    async def _resolve_debt_id(self, debt_id: Any = None, debt_name: Optional[str] = None) -> uuid.UUID:
        if debt_id:
            return _coerce_uuid(debt_id, "debt_id")
        if not debt_name or not str(debt_name).strip():
            raise ValidationError("A debt id or name is required")
        matches = await find_debts_by_name(str(debt_name), self.user_id, self.db)
        if not matches:
            raise DebtNotFound(debt_name)
        if len(matches) > 1:
            raise AmbiguousDebt(str(debt_name), [d.name for d in matches])
        return matches[0].id

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    async def create_transaction(
        self,
        amount: Any,
        concept: Optional[str],
        kind: Any,
        category_id: Any,
        transaction_date: Any,
        description: Optional[str] = None,
    ) -> ActionResult:
        async def work() -> Dict[str, Any]:
            value = validate_positive_amount(amount)
            if not concept or not str(concept).strip():
                raise ValidationError("Concept is required")
            try:
                tx_kind = TransactionKind(kind)
            except ValueError:
                raise ValidationError(
                    "Type must be one of: income, expense, savings", field="type", value=str(kind)
                )
            when = _coerce_date(transaction_date, "operation_date")
            if when is None:
                raise ValidationError("operation_date is required", field="operation_date")
            cat_id = _coerce_uuid(category_id, "category_id")
            category = await get_category_by_id(cat_id, self.user_id, self.db)
            if category is None:
                raise CategoryNotFound(category_id)

            tx = await add_transaction(
                Transaction(
                    user_id=self.user_id,
                    category_id=category.id,
                    kind=tx_kind,
                    amount=value,
                    concept=str(concept).strip(),
                    description=description,
                    transaction_date=when,
                ),
                self.db,
            )
            payload = TransactionRead.model_validate(tx).model_dump(mode="json")
            payload["category_name"] = category.name
            return {"transaction": payload}

        return await self._run("create_transaction", work)

    async def delete_transaction(self, transaction_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            tx_id = _coerce_uuid(transaction_id, "operation_id")
            tx = await get_transaction_by_id(tx_id, self.user_id, self.db)
            if tx is None:
                raise TransactionNotFound(transaction_id)
            deleted = {
                "id": str(tx.id),
                "concept": tx.concept,
                "amount": float(tx.amount),
                "type": tx.kind.value,
                "date": tx.transaction_date.isoformat(),
            }
            await delete_transaction(tx, self.db)
            return {"deleted": deleted}

        return await self._run("delete_transaction", work)

    # ------------------------------------------------------------------
    # Savings goals
    # ------------------------------------------------------------------
    async def create_goal(
        self,
        name: Optional[str],
        target_amount: Any,
        target_date: Any = None,
        description: Optional[str] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        priority: Any = 3,
    ) -> ActionResult:
        async def work() -> Dict[str, Any]:
            goal_name, target = validate_new_goal(name, target_amount)
            goal = SavingsGoal(
                user_id=self.user_id,
                name=goal_name,
                description=description,
                target_amount=target,
                current_amount=ZERO,
                target_date=_coerce_date(target_date, "target_date"),
                status=GoalStatus.active,
                priority=_coerce_priority(priority),
            )
            if icon:
                goal.icon = icon
            if color:
                goal.color = color
            await add_goal(goal, self.db)
            return {"goal": goal_payload(goal)}

        return await self._run("create_goal", work)

    async def contribute_to_goal(
        self,
        amount: Any,
        goal_id: Any = None,
        goal_name: Optional[str] = None,
        note: Optional[str] = None,
        contribution_date: Any = None,
    ) -> ActionResult:
        async def work() -> Dict[str, Any]:
            value = validate_positive_amount(amount)
            resolved = await self._resolve_goal_id(goal_id, goal_name)
            contribution = await self.goals.apply_contribution(
                resolved, value, _coerce_date(contribution_date, "contribution_date"), note
            )
            goal = await self.goals.load(resolved)
            return {
                "contribution": ContributionRead.model_validate(contribution).model_dump(mode="json"),
                "goal": goal_payload(goal),
            }

        return await self._run("contribute_to_goal", work)

    async def update_goal(self, goal_id: Any, **fields: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            goal = await self.goals.revise_goal(_coerce_uuid(goal_id, "goal_id"), **fields)
            return {"goal": goal_payload(goal)}

        return await self._run("update_goal", work)

    async def delete_goal(self, goal_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            goal = await self.goals.load(_coerce_uuid(goal_id, "goal_id"))
            deleted = {"id": str(goal.id), "name": goal.name}
            await delete_goal(goal, self.db)
            return {"deleted": deleted}

        return await self._run("delete_goal", work)

    async def revise_contribution(
        self,
        contribution_id: Any,
        amount: Any = None,
        contribution_date: Any = None,
        note: Optional[str] = None,
    ) -> ActionResult:
        async def work() -> Dict[str, Any]:
            contribution = await self.goals.revise_contribution(
                _coerce_uuid(contribution_id, "contribution_id"),
                amount,
                _coerce_date(contribution_date, "contribution_date"),
                note,
            )
            goal = await self.goals.load(contribution.savings_goal_id)
            return {
                "contribution": ContributionRead.model_validate(contribution).model_dump(mode="json"),
                "goal": goal_payload(goal),
            }

        return await self._run("revise_contribution", work)

    async def remove_contribution(self, contribution_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            goal = await self.goals.remove_contribution(_coerce_uuid(contribution_id, "contribution_id"))
            return {"goal": goal_payload(goal)}

        return await self._run("remove_contribution", work)

    async def force_complete_goal(self, goal_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            goal = await self.goals.force_complete(_coerce_uuid(goal_id, "goal_id"))
            return {"goal": goal_payload(goal)}

        return await self._run("force_complete_goal", work)

    async def set_goal_paused(self, goal_id: Any, paused: bool) -> ActionResult:
        async def work() -> Dict[str, Any]:
            goal = await self.goals.set_paused(_coerce_uuid(goal_id, "goal_id"), paused)
            return {"goal": goal_payload(goal)}

        return await self._run("pause_goal" if paused else "resume_goal", work)

    async def cancel_goal(self, goal_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            goal = await self.goals.cancel(_coerce_uuid(goal_id, "goal_id"))
            return {"goal": goal_payload(goal)}

        return await self._run("cancel_goal", work)

    async def reopen_goal(self, goal_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            goal = await self.goals.reopen(_coerce_uuid(goal_id, "goal_id"))
            return {"goal": goal_payload(goal)}

        return await self._run("reopen_goal", work)

    async def recompute_goal(self, goal_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            resolved = _coerce_uuid(goal_id, "goal_id")
            await self.goals.recompute(resolved)
            return {"goal": goal_payload(await self.goals.load(resolved))}

        return await self._run("recompute_goal", work)

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------
    async def create_debt(
        self,
        name: Optional[str],
        original_amount: Any,
        interest_rate: Any = None,
        due_date: Any = None,
        monthly_payment: Any = None,
        start_date: Any = None,
        creditor: Optional[str] = None,
        description: Optional[str] = None,
        debt_type: Any = None,
        priority: Any = 3,
    ) -> ActionResult:
        async def work() -> Dict[str, Any]:
            debt_name, original = validate_new_debt(name, original_amount)
            try:
                kind = DebtType(debt_type) if debt_type else DebtType.other
            except ValueError:
                raise ValidationError("Unknown debt type", field="debt_type", value=str(debt_type))
            debt = Debt(
                user_id=self.user_id,
                name=debt_name,
                description=description,
                creditor=creditor,
                debt_type=kind,
                original_amount=original,
                current_balance=original,
                interest_rate=validate_non_negative("interest_rate", interest_rate) if interest_rate is not None else ZERO,
                monthly_payment=validate_non_negative("monthly_payment", monthly_payment) if monthly_payment is not None else None,
                start_date=_coerce_date(start_date, "start_date") or date.today(),
                due_date=_coerce_date(due_date, "due_date"),
                status=DebtStatus.active,
                priority=_coerce_priority(priority),
            )
            await add_debt(debt, self.db)
            return {"debt": debt_payload(debt)}

        return await self._run("create_debt", work)

    async def pay_debt(
        self,
        amount: Any,
        debt_id: Any = None,
        debt_name: Optional[str] = None,
        note: Optional[str] = None,
        payment_date: Any = None,
    ) -> ActionResult:
        async def work() -> Dict[str, Any]:
            value = validate_positive_amount(amount)
            resolved = await self._resolve_debt_id(debt_id, debt_name)
            payment = await self.debts.apply_payment(
                resolved, value, _coerce_date(payment_date, "payment_date"), note
            )
            debt = await self.debts.load(resolved)
            return {
                "payment": PaymentRead.model_validate(payment).model_dump(mode="json"),
                "debt": debt_payload(debt),
            }

        return await self._run("pay_debt", work)

    async def update_debt(self, debt_id: Any, **fields: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            debt = await self.debts.revise_debt(_coerce_uuid(debt_id, "debt_id"), **fields)
            return {"debt": debt_payload(debt)}

        return await self._run("update_debt", work)

    async def delete_debt(self, debt_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            debt = await self.debts.load(_coerce_uuid(debt_id, "debt_id"))
            deleted = {"id": str(debt.id), "name": debt.name}
            await delete_debt(debt, self.db)
            return {"deleted": deleted}

        return await self._run("delete_debt", work)

    async def revise_payment(
        self,
        payment_id: Any,
        amount: Any = None,
        payment_date: Any = None,
        note: Optional[str] = None,
    ) -> ActionResult:
        async def work() -> Dict[str, Any]:
            payment = await self.debts.revise_payment(
                _coerce_uuid(payment_id, "payment_id"),
                amount,
                _coerce_date(payment_date, "payment_date"),
                note,
            )
            debt = await self.debts.load(payment.debt_id)
            return {
                "payment": PaymentRead.model_validate(payment).model_dump(mode="json"),
                "debt": debt_payload(debt),
            }

        return await self._run("revise_payment", work)

    async def remove_payment(self, payment_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            debt = await self.debts.remove_payment(_coerce_uuid(payment_id, "payment_id"))
            return {"debt": debt_payload(debt)}

        return await self._run("remove_payment", work)

    async def force_pay_debt(self, debt_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            debt = await self.debts.force_paid(_coerce_uuid(debt_id, "debt_id"))
            return {"debt": debt_payload(debt)}

        return await self._run("force_pay_debt", work)

    async def set_debt_paused(self, debt_id: Any, paused: bool) -> ActionResult:
        async def work() -> Dict[str, Any]:
            debt = await self.debts.set_paused(_coerce_uuid(debt_id, "debt_id"), paused)
            return {"debt": debt_payload(debt)}

        return await self._run("pause_debt" if paused else "resume_debt", work)

    async def reopen_debt(self, debt_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            debt = await self.debts.reopen(_coerce_uuid(debt_id, "debt_id"))
            return {"debt": debt_payload(debt)}

        return await self._run("reopen_debt", work)

    async def recompute_debt(self, debt_id: Any) -> ActionResult:
        async def work() -> Dict[str, Any]:
            resolved = _coerce_uuid(debt_id, "debt_id")
            await self.debts.recompute(resolved)
            return {"debt": debt_payload(await self.debts.load(resolved))}

        return await self._run("recompute_debt", work)
