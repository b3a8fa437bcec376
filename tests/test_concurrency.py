"""Two writers contributing to the same goal at the same time."""

import asyncio
import uuid
from decimal import Decimal

from app.crud.goal import get_goal_by_id, sum_contributions
from app.services.action_executor import ActionExecutor


async def _contribute_in_own_session(session_factory, user_id, goal_id, amount):
    async with session_factory() as session:
        return await ActionExecutor(session, user_id).contribute_to_goal(amount, goal_id=goal_id)


async def _goal_state(session_factory, user_id, goal_id):
    async with session_factory() as session:
        goal = await get_goal_by_id(goal_id, user_id, session)
        return goal.current_amount, goal.status.value, await sum_contributions(goal_id, user_id, session)


async def test_racing_contributions_near_the_target(session_factory, user, executor) -> None:
    """900 of 1000 saved and two +100 contributions race: exactly one lands."""
    created = await executor.create_goal("Viaje", 1000)
    goal_id = uuid.UUID(created.data["goal"]["id"])
    assert (await executor.contribute_to_goal(900, goal_id=goal_id)).success

    results = await asyncio.gather(
        _contribute_in_own_session(session_factory, user.id, goal_id, 100),
        _contribute_in_own_session(session_factory, user.id, goal_id, 100),
    )

    assert sorted(r.success for r in results) == [False, True]
    rejected = next(r for r in results if not r.success)
    assert rejected.code == "over_target"
    assert await _goal_state(session_factory, user.id, goal_id) == (
        Decimal("1000"),
        "completed",
        Decimal("1000"),
    )


async def test_racing_contributions_with_room_both_land(session_factory, user, executor) -> None:
    created = await executor.create_goal("Coche", 1000)
    goal_id = uuid.UUID(created.data["goal"]["id"])

    results = await asyncio.gather(
        _contribute_in_own_session(session_factory, user.id, goal_id, 100),
        _contribute_in_own_session(session_factory, user.id, goal_id, 100),
    )

    assert all(r.success for r in results)
    assert await _goal_state(session_factory, user.id, goal_id) == (
        Decimal("200"),
        "active",
        Decimal("200"),
    )
