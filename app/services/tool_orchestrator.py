# app/services/tool_orchestrator.py
"""Two-round-trip chat turn with function calling.

1. build the financial snapshot and the system prompt,
2. first pass with the tool schema attached,
3. run every requested tool call in order through the ActionExecutor,
4. second pass with the tool results, whose text is the reply.

The model only ever sees the JSON payloads produced in step 3.
"""
import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional

import pydantic
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import User
from app.schemas.actions import ActionResult
from app.schemas.snapshot import FinancialSnapshot
from app.services.action_executor import ActionExecutor
from app.services.context_snapshot import ContextSnapshotBuilder
from app.services.llm_client import LLMClient
from app.services.tool_schema import (
    TOOL_ARGS,
    TOOLS,
    AddDebtPaymentArgs,
    AddSavingsContributionArgs,
    CreateDebtArgs,
    CreateOperationArgs,
    CreateSavingsGoalArgs,
    DeleteOperationArgs,
    ToolArgs,
)

logger = logging.getLogger(__name__)

NO_REPLY = "Sorry, I could not come up with an answer."
DONE_REPLY = "Done!"


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


def build_system_prompt(snapshot: FinancialSnapshot) -> str:
    profile = snapshot.profile
    month = snapshot.current_month
    currency = profile.currency

    trend = " | ".join(
        f"{m.month}: {_money(m.income)} in, {_money(m.expenses)} out" for m in snapshot.monthly_trend
    )
    spend = " | ".join(
        f"{c.name}: {_money(c.total)} {currency} ({c.operation_count} ops)" for c in snapshot.category_spend[:10]
    ) or "No data"
    categories = "\n".join(
        f'- "{c.name}" ({c.type.value}, ID: {c.id})' for c in snapshot.categories
    ) or "- none"
    goals = " | ".join(
        f"{g.name}: {_money(g.current_amount)}/{_money(g.target_amount)} {currency} ({g.progress}%, {g.status.value})"
        for g in snapshot.goals
    ) or "No goals"
    debts = " | ".join(
        f"{d.name}: owes {_money(d.current_balance)} of {_money(d.original_amount)} {currency} ({d.progress}% paid, {d.status.value})"
        for d in snapshot.debts
    ) or "No debts"
    recent = " | ".join(
        f"[ID:{op.id}] {op.date.isoformat()}: {op.concept} {'-' if op.type.value == 'expense' else '+'}{_money(op.amount)} {currency} ({op.category})"
        for op in snapshot.recent_operations
    ) or "No operations"

    return f"""ROLE: You are FinyBot, the personal finance buddy of {profile.name} in FinyBuddy. \
You talk like a smart friend who knows numbers: informal, warm and straight to the point. Today is {snapshot.today.isoformat()}.

TONE:
- Short paragraphs, like a message to a friend. No corporate greetings and no robotic phrases.
- Never judge. If money is tight, be supportive and suggest something concrete; if it goes well, celebrate.
- Answer in the language the user writes in. At most 2-3 short paragraphs.

FINANCIAL DATA OF {profile.name.upper()}:

CURRENT MONTH ({month.start.isoformat()} to {month.end.isoformat()}):
- Income: {_money(month.income)} {currency}
- Expenses: {_money(month.expenses)} {currency}
- Saved: {_money(month.savings)} {currency}
- Balance: {_money(month.balance)} {currency}
- Savings rate: {month.savings_rate}%
- Personal rule (needs/wants/savings): {profile.rule}
- Days left in the month: {month.days_remaining}
- Daily budget: {_money(month.daily_budget)} {currency}/day

6-MONTH TREND:
{trend}

SPENDING BY CATEGORY THIS MONTH:
{spend}

AVAILABLE CATEGORIES:
{categories}

SAVINGS GOALS:
{goals}

DEBTS:
{debts}

RECENT OPERATIONS (with ID, needed to delete them):
{recent}

ACTIONS:
You can record and delete operations, create savings goals and debts, add contributions to goals and \
payments to debts with the available functions. When the user asks for one of these, CALL THE FUNCTION; \
never pretend something was saved.
- Always use a category_id from AVAILABLE CATEGORIES. If nothing fits, use the most generic one or ask.
- To delete, find the operation in RECENT OPERATIONS by concept, amount or date. If several match, ask which one.
- Goals and debts are referenced by name. If a function answers that the name is ambiguous or not found, \
ask the user to clarify instead of guessing.
- If a function fails, explain the error in plain words. When it succeeds, confirm briefly with the amount and category.
- Investments (crypto, stocks, real estate) are out of scope: decline kindly.
"""


ToolHandler = Callable[[ActionExecutor, Any], Awaitable[ActionResult]]


async def _create_operation(executor: ActionExecutor, args: CreateOperationArgs) -> ActionResult:
    return await executor.create_transaction(
        amount=args.amount,
        concept=args.concept,
        kind=args.type,
        category_id=args.category_id,
        transaction_date=args.operation_date,
    )


async def _delete_operation(executor: ActionExecutor, args: DeleteOperationArgs) -> ActionResult:
    return await executor.delete_transaction(args.operation_id)


async def _create_savings_goal(executor: ActionExecutor, args: CreateSavingsGoalArgs) -> ActionResult:
    return await executor.create_goal(args.name, args.target_amount, target_date=args.target_date)


async def _add_savings_contribution(executor: ActionExecutor, args: AddSavingsContributionArgs) -> ActionResult:
    return await executor.contribute_to_goal(args.amount, goal_name=args.savings_goal_name, note=args.note)


async def _create_debt(executor: ActionExecutor, args: CreateDebtArgs) -> ActionResult:
    return await executor.create_debt(
        args.name,
        args.initial_amount,
        interest_rate=args.interest_rate,
        due_date=args.due_date,
    )


async def _add_debt_payment(executor: ActionExecutor, args: AddDebtPaymentArgs) -> ActionResult:
    return await executor.pay_debt(args.amount, debt_name=args.debt_name, note=args.note)


HANDLERS: Dict[str, ToolHandler] = {
    "create_operation": _create_operation,
    "delete_operation": _delete_operation,
    "create_savings_goal": _create_savings_goal,
    "add_savings_contribution": _add_savings_contribution,
    "create_debt": _create_debt,
    "add_debt_payment": _add_debt_payment,
}


def _tool_error(error: str, code: str, **details: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"success": False, "error": error, "code": code}
    if details:
        payload["details"] = details
    return payload


class ToolOrchestrator:
    def __init__(
        self,
        db: AsyncSession,
        user: User,
        llm: Optional[LLMClient] = None,
        executor: Optional[ActionExecutor] = None,
    ):
        self.snapshots = ContextSnapshotBuilder(db, user)
        self.executor = executor or ActionExecutor(db, user.id)
        self.llm = llm or LLMClient()

    async def respond(self, history: List[Dict[str, Any]], today: Optional[date] = None) -> str:
        snapshot = await self.snapshots.build(today)
        messages: List[Dict[str, Any]] = [{"role": "system", "content": build_system_prompt(snapshot)}, *history]

        assistant = await self.llm.complete(messages, tools=TOOLS)
        tool_calls = assistant.get("tool_calls") or []
        if not tool_calls:
            return assistant.get("content") or NO_REPLY

        # Sequential on purpose: calls in one turn may touch the same goal or debt
        tool_messages = []
        for call in tool_calls:
            result = await self.dispatch(call)
            tool_messages.append({
                "role": "tool",
                "tool_call_id": call.get("id") if isinstance(call, dict) else None,
                "content": json.dumps(result, default=str),
            })

        assistant_turn = {
            "role": "assistant",
            "content": assistant.get("content"),
            "tool_calls": tool_calls,
        }
        follow_up = await self.llm.complete([*messages, assistant_turn, *tool_messages])
        return follow_up.get("content") or DONE_REPLY

    async def dispatch(self, call: Dict[str, Any]) -> Dict[str, Any]:
        """Run one tool call and return the JSON payload the model gets back."""
        function = call.get("function") if isinstance(call, dict) else None
        name = function.get("name") if isinstance(function, dict) else None
        handler = HANDLERS.get(name) if isinstance(name, str) else None
        if handler is None:
            logger.warning(f"Model requested unknown tool: {name}")
            return _tool_error(f"Unknown tool: {name}", "unknown_tool")

        raw = function.get("arguments") or "{}"
        try:
            parsed = json.loads(raw) if isinstance(raw, str) else raw
        except json.JSONDecodeError:
            logger.warning(f"Malformed arguments for tool {name}: {raw!r}")
            return _tool_error("Arguments are not valid JSON", "invalid_arguments")
        if not isinstance(parsed, dict):
            return _tool_error("Arguments must be a JSON object", "invalid_arguments")

        try:
            args: ToolArgs = TOOL_ARGS[name].model_validate(parsed)
        except pydantic.ValidationError as e:
            problems = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            logger.warning(f"Invalid arguments for tool {name}: {problems}")
            return _tool_error(f"Invalid arguments for {name}", "invalid_arguments", errors=problems)

        logger.info(f"Dispatching tool {name}")
        result = await handler(self.executor, args)
        return result.tool_payload()
