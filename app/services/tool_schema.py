# app/services/tool_schema.py
"""Functions the assistant may call, in chat-completions ``tools`` format.

Tool names and argument names are a contract with the model; the pydantic
models below validate the untrusted arguments before anything is executed.
"""
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class CreateOperationArgs(ToolArgs):
    amount: Decimal
    concept: str = Field(..., min_length=1)
    type: Literal["expense", "income", "savings"]
    category_id: str
    operation_date: str


class DeleteOperationArgs(ToolArgs):
    operation_id: str


class CreateSavingsGoalArgs(ToolArgs):
    name: str = Field(..., min_length=1)
    target_amount: Decimal
    target_date: Optional[str] = None


class AddSavingsContributionArgs(ToolArgs):
    savings_goal_name: str = Field(..., min_length=1)
    amount: Decimal
    note: Optional[str] = None


class CreateDebtArgs(ToolArgs):
    name: str = Field(..., min_length=1)
    initial_amount: Decimal
    interest_rate: Optional[Decimal] = None
    due_date: Optional[str] = None


class AddDebtPaymentArgs(ToolArgs):
    debt_name: str = Field(..., min_length=1)
    amount: Decimal
    note: Optional[str] = None


TOOL_ARGS: Dict[str, Type[ToolArgs]] = {
    "create_operation": CreateOperationArgs,
    "delete_operation": DeleteOperationArgs,
    "create_savings_goal": CreateSavingsGoalArgs,
    "add_savings_contribution": AddSavingsContributionArgs,
    "create_debt": CreateDebtArgs,
    "add_debt_payment": AddDebtPaymentArgs,
}


def _function(name: str, description: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


_DATE = {"type": "string", "description": "Date in YYYY-MM-DD format. If the user says 'today', use today's date."}

TOOLS: List[Dict[str, Any]] = [
    _function(
        "create_operation",
        "Records a new expense, income or savings operation for the user. "
        "Use it whenever the user wants to log money going out or coming in.",
        {
            "amount": {"type": "number", "description": "Amount of the operation, always positive"},
            "concept": {"type": "string", "description": "Short description, e.g. 'Clothes at Zara', 'December salary'"},
            "type": {
                "type": "string",
                "enum": ["expense", "income", "savings"],
                "description": "expense, income or savings",
            },
            "category_id": {
                "type": "string",
                "description": "Id of one of the user's available categories listed in the context",
            },
            "operation_date": _DATE,
        },
        ["amount", "concept", "type", "category_id", "operation_date"],
    ),
    _function(
        "delete_operation",
        "Deletes an operation the user recorded earlier. Take the id from the RECENT OPERATIONS "
        "in the context; if several operations match, ask the user which one first.",
        {"operation_id": {"type": "string", "description": "Id of the operation to delete"}},
        ["operation_id"],
    ),
    _function(
        "create_savings_goal",
        "Creates a new savings goal with a target amount.",
        {
            "name": {"type": "string", "description": "Name of the goal, e.g. 'Trip to Japan'"},
            "target_amount": {"type": "number", "description": "Amount to save, greater than zero"},
            "target_date": _DATE,
        },
        ["name", "target_amount"],
    ),
    _function(
        "add_savings_contribution",
        "Adds money to one of the user's savings goals, identified by name. "
        "Fails if the name matches several goals or if the goal target would be exceeded.",
        {
            "savings_goal_name": {"type": "string", "description": "Name (or part of the name) of the goal"},
            "amount": {"type": "number", "description": "Amount to contribute, greater than zero"},
            "note": {"type": "string", "description": "Optional note"},
        },
        ["savings_goal_name", "amount"],
    ),
    _function(
        "create_debt",
        "Registers a new debt the user owes.",
        {
            "name": {"type": "string", "description": "Name of the debt, e.g. 'Car loan'"},
            "initial_amount": {"type": "number", "description": "Amount owed, greater than zero"},
            "interest_rate": {"type": "number", "description": "Annual interest rate in percent"},
            "due_date": _DATE,
        },
        ["name", "initial_amount"],
    ),
    _function(
        "add_debt_payment",
        "Records a payment against one of the user's debts, identified by name. "
        "Fails if the name matches several debts.",
        {
            "debt_name": {"type": "string", "description": "Name (or part of the name) of the debt"},
            "amount": {"type": "number", "description": "Amount paid, greater than zero"},
            "note": {"type": "string", "description": "Optional note"},
        },
        ["debt_name", "amount"],
    ),
]
