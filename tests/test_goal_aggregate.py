"""Savings goal ledger: derived amount, status transitions and the target cap."""

import uuid
from decimal import Decimal

import pytest

from app.core.errors import InvalidAmount, InvalidTransition, OverTarget
from app.crud.goal import get_goal_by_id, sum_contributions
from app.models.goal import GoalStatus
from app.services.goal_aggregate import GoalAggregate, derive_goal_status
from app.utils.dates import utcnow


async def _new_goal(executor, name="Trip to Japan", target="1000"):
    result = await executor.create_goal(name, target)
    assert result.success, result.error
    return uuid.UUID(result.data["goal"]["id"])


async def _reload(db, user, goal_id):
    goal = await get_goal_by_id(goal_id, user.id, db)
    await db.refresh(goal)
    return goal


def test_derive_status_completes_at_target_and_reverts_below() -> None:
    """Reaching the target completes the goal; dropping below reopens it."""
    now = utcnow()
    status, completed_at = derive_goal_status(
        GoalStatus.active, Decimal("1000"), Decimal("1000"), False, None, now
    )
    assert status == GoalStatus.completed
    assert completed_at == now

    status, completed_at = derive_goal_status(
        GoalStatus.completed, Decimal("999"), Decimal("1000"), False, now, now
    )
    assert status == GoalStatus.active
    assert completed_at is None


def test_derive_status_keeps_paused_and_cancelled() -> None:
    now = utcnow()
    assert derive_goal_status(GoalStatus.paused, Decimal("10"), Decimal("100"), False, None, now) == (
        GoalStatus.paused,
        None,
    )
    assert derive_goal_status(GoalStatus.cancelled, Decimal("100"), Decimal("100"), False, None, now)[0] == (
        GoalStatus.cancelled
    )


def test_derive_status_forced_completion_ignores_amount() -> None:
    status, _ = derive_goal_status(GoalStatus.active, Decimal("0"), Decimal("1000"), True, None, utcnow())
    assert status == GoalStatus.completed


async def test_new_goal_starts_active_at_zero(executor) -> None:
    result = await executor.create_goal("Emergency fund", "3000", target_date="2027-06-30")

    assert result.success
    goal = result.data["goal"]
    assert goal["current_amount"] == 0
    assert goal["status"] == "active"
    assert goal["target_date"] == "2027-06-30"


async def test_contribution_over_target_is_rejected_and_amount_kept(db, user, executor) -> None:
    """Contribute 400 then 700 to a 1000 goal: the second one is refused."""
    goal_id = await _new_goal(executor)

    first = await executor.contribute_to_goal("400", goal_id=goal_id)
    assert first.success
    assert first.data["goal"]["current_amount"] == 400
    assert first.data["goal"]["status"] == "active"

    second = await executor.contribute_to_goal("700", goal_id=goal_id)
    assert not second.success
    assert second.code == OverTarget.code
    assert second.http_status == 409
    assert Decimal(second.details["remaining"]) == Decimal("600")

    goal = await _reload(db, user, goal_id)
    assert goal.current_amount == Decimal("400")
    assert await sum_contributions(goal.id, user.id, db) == Decimal("400")


async def test_reaching_target_completes_and_removal_reverts(db, user, executor) -> None:
    """Contribute the full target, then delete that contribution again."""
    goal_id = await _new_goal(executor)

    result = await executor.contribute_to_goal(1000, goal_id=goal_id)
    assert result.success
    assert result.data["goal"]["status"] == "completed"
    assert result.data["goal"]["completed_at"] is not None

    removed = await executor.remove_contribution(result.data["contribution"]["id"])
    assert removed.success
    goal = removed.data["goal"]
    assert goal["current_amount"] == 0
    assert goal["status"] == "active"
    assert goal["completed_at"] is None


async def test_revising_contribution_rederives_amount(db, user, executor) -> None:
    goal_id = await _new_goal(executor)
    first = await executor.contribute_to_goal(300, goal_id=goal_id)
    await executor.contribute_to_goal(200, goal_id=goal_id)

    revised = await executor.revise_contribution(first.data["contribution"]["id"], amount=800)
    assert revised.success
    assert revised.data["goal"]["current_amount"] == 1000
    assert revised.data["goal"]["status"] == "completed"

    too_much = await executor.revise_contribution(first.data["contribution"]["id"], amount=900)
    assert too_much.code == OverTarget.code
    goal = await _reload(db, user, goal_id)
    assert goal.current_amount == Decimal("1000")


@pytest.mark.parametrize("amount", [0, -5, "abc", None, "0.001", float("nan"), "1e30", "10000000000"])
async def test_non_positive_or_invalid_contribution_is_rejected(executor, amount) -> None:
    goal_id = await _new_goal(executor)

    result = await executor.contribute_to_goal(amount, goal_id=goal_id)

    assert not result.success
    assert result.code == InvalidAmount.code
    assert result.http_status == 422


async def test_pause_resume_and_pause_rejected_when_completed(executor) -> None:
    goal_id = await _new_goal(executor, target="100")

    paused = await executor.set_goal_paused(goal_id, True)
    assert paused.data["goal"]["status"] == "paused"
    resumed = await executor.set_goal_paused(goal_id, False)
    assert resumed.data["goal"]["status"] == "active"

    await executor.contribute_to_goal(100, goal_id=goal_id)
    refused = await executor.set_goal_paused(goal_id, True)
    assert refused.code == InvalidTransition.code


async def test_force_complete_and_reopen(executor) -> None:
    """A goal closed early stays completed until it is reopened."""
    goal_id = await _new_goal(executor)
    await executor.contribute_to_goal(250, goal_id=goal_id)

    closed = await executor.force_complete_goal(goal_id)
    assert closed.data["goal"]["status"] == "completed"
    assert closed.data["goal"]["force_completed"] is True
    assert closed.data["goal"]["current_amount"] == 250

    refused = await executor.contribute_to_goal(10, goal_id=goal_id)
    assert refused.code == InvalidTransition.code

    reopened = await executor.reopen_goal(goal_id)
    assert reopened.data["goal"]["status"] == "active"
    assert reopened.data["goal"]["force_completed"] is False
    assert reopened.data["goal"]["completed_at"] is None


async def test_cancelled_goal_refuses_contributions_until_reopened(executor) -> None:
    goal_id = await _new_goal(executor)

    cancelled = await executor.cancel_goal(goal_id)
    assert cancelled.data["goal"]["status"] == "cancelled"
    assert (await executor.contribute_to_goal(10, goal_id=goal_id)).code == InvalidTransition.code
    assert (await executor.force_complete_goal(goal_id)).code == InvalidTransition.code

    reopened = await executor.reopen_goal(goal_id)
    assert reopened.data["goal"]["status"] == "active"
    assert (await executor.contribute_to_goal(10, goal_id=goal_id)).success


async def test_lowering_target_completes_goal(executor) -> None:
    goal_id = await _new_goal(executor)
    await executor.contribute_to_goal(600, goal_id=goal_id)

    result = await executor.update_goal(goal_id, target_amount="600", name="Japan 2027")

    assert result.success
    assert result.data["goal"]["name"] == "Japan 2027"
    assert result.data["goal"]["status"] == "completed"


async def test_update_goal_rejects_unknown_and_empty_fields(executor) -> None:
    goal_id = await _new_goal(executor)

    assert (await executor.update_goal(goal_id, current_amount=500)).code == "validation_error"
    assert (await executor.update_goal(goal_id, name=None)).code == "validation_error"
    assert (await executor.update_goal(goal_id, priority=9)).code == "validation_error"


async def test_recompute_is_idempotent(db, user, executor) -> None:
    goal_id = await _new_goal(executor)
    await executor.contribute_to_goal(1000, goal_id=goal_id)

    aggregate = GoalAggregate(db, user.id)
    first = await aggregate.recompute(goal_id)
    await db.commit()
    second = await aggregate.recompute(goal_id)
    await db.commit()

    assert first == second == (Decimal("1000"), GoalStatus.completed)


async def test_recompute_repairs_a_drifted_amount(db, user, executor) -> None:
    """The stored amount is only a cache of the contribution ledger."""
    goal_id = await _new_goal(executor)
    await executor.contribute_to_goal(300, goal_id=goal_id)

    goal = await _reload(db, user, goal_id)
    goal.current_amount = Decimal("999")
    await db.commit()

    result = await executor.recompute_goal(goal_id)
    assert result.data["goal"]["current_amount"] == 300


async def test_delete_goal_removes_its_ledger(db, user, executor) -> None:
    goal_id = await _new_goal(executor)
    await executor.contribute_to_goal(100, goal_id=goal_id)

    result = await executor.delete_goal(goal_id)

    assert result.success
    assert await get_goal_by_id(goal_id, user.id, db) is None
    assert await sum_contributions(goal_id, user.id, db) == Decimal("0")
