# app/core/errors.py
"""Domain errors raised by the aggregates and the action executor.

Every error carries a stable ``code`` (sent to the assistant and to API
clients) and the HTTP status the REST routes answer with.
"""
from typing import Any, Dict, List, Optional

from fastapi import status


class FinanceError(Exception):
    code = "error"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details


# Validation

class ValidationError(FinanceError):
    code = "validation_error"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidAmount(ValidationError):
    code = "invalid_amount"

    def __init__(self, amount: Any = None, message: Optional[str] = None):
        super().__init__(message or "Amount must be greater than zero", amount=str(amount))


# Not found

class NotFoundError(FinanceError):
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND


class GoalNotFound(NotFoundError):
    code = "goal_not_found"

    def __init__(self, reference: Any):
        super().__init__(f"Savings goal not found: {reference}", reference=str(reference))


class DebtNotFound(NotFoundError):
    code = "debt_not_found"

    def __init__(self, reference: Any):
        super().__init__(f"Debt not found: {reference}", reference=str(reference))


class CategoryNotFound(NotFoundError):
    code = "category_not_found"

    def __init__(self, reference: Any):
        super().__init__(f"Category not found: {reference}", reference=str(reference))


class TransactionNotFound(NotFoundError):
    code = "transaction_not_found"

    def __init__(self, reference: Any):
        super().__init__("Operation not found or it does not belong to you", reference=str(reference))


class ContributionNotFound(NotFoundError):
    code = "contribution_not_found"

    def __init__(self, reference: Any):
        super().__init__(f"Contribution not found: {reference}", reference=str(reference))


class PaymentNotFound(NotFoundError):
    code = "payment_not_found"

    def __init__(self, reference: Any):
        super().__init__(f"Payment not found: {reference}", reference=str(reference))


# Ambiguous fuzzy references

class AmbiguousReferenceError(FinanceError):
    code = "ambiguous_reference"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, kind: str, reference: str, candidates: List[str]):
        super().__init__(
            f"'{reference}' matches more than one {kind}: {', '.join(candidates)}",
            reference=reference,
            candidates=candidates,
        )


class AmbiguousGoal(AmbiguousReferenceError):
    code = "ambiguous_goal"

    def __init__(self, reference: str, candidates: List[str]):
        super().__init__("savings goal", reference, candidates)


class AmbiguousDebt(AmbiguousReferenceError):
    code = "ambiguous_debt"

    def __init__(self, reference: str, candidates: List[str]):
        super().__init__("debt", reference, candidates)


# Invariants

class InvariantViolationError(FinanceError):
    code = "invariant_violation"
    http_status = status.HTTP_409_CONFLICT


class OverTarget(InvariantViolationError):
    code = "over_target"

    def __init__(self, target_amount: Any, resulting_amount: Any, remaining: Any):
        super().__init__(
            f"Contribution would exceed the goal target ({resulting_amount} > {target_amount}); "
            f"at most {remaining} can still be added",
            target_amount=str(target_amount),
            resulting_amount=str(resulting_amount),
            remaining=str(remaining),
        )


class InvalidTransition(InvariantViolationError):
    code = "invalid_transition"

    def __init__(self, current_status: str, action: str):
        super().__init__(
            f"Cannot {action} while status is '{current_status}'",
            status=current_status,
            action=action,
        )


# Infrastructure

class ExternalServiceError(FinanceError):
    code = "external_service_error"
    http_status = status.HTTP_502_BAD_GATEWAY
