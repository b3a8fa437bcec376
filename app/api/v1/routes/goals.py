# app/api/v1/routes/goals.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.goal import (
    ContributionCreate,
    ContributionRead,
    ContributionResult,
    ContributionUpdate,
    GoalCreate,
    GoalDetail,
    GoalRead,
    GoalUpdate,
)
from app.crud.goal import get_contribution_by_id, get_contributions_for_goal, get_goal_by_id, get_goals_for_user
from app.models.goal import GoalStatus
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_action_executor, get_current_user, unwrap
from app.services.action_executor import ActionExecutor

router = APIRouter(prefix="/goals", tags=["goals"])

async def _ensure_contribution_of_goal(
    goal_id: uuid.UUID,
    contribution_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
) -> None:
    contribution = await get_contribution_by_id(contribution_id, user_id, db)
    if contribution is None or contribution.savings_goal_id != goal_id:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND,
            detail={"code": "contribution_not_found", "error": "Contribution not found"},
        )

@router.get("", response_model=List[GoalRead])
async def read_goals(
    status_filter: Optional[List[GoalStatus]] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_goals_for_user(user.id, db, statuses=status_filter)

@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    executor: ActionExecutor = Depends(get_action_executor),
):
    result = await executor.create_goal(**goal_in.model_dump())
    return unwrap(result)["goal"]

@router.get("/{goal_id}", response_model=GoalDetail)
async def read_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """A goal together with its contribution ledger, newest first."""
    goal = await get_goal_by_id(goal_id, user.id, db)
    if not goal:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Savings goal not found")
    contributions = await get_contributions_for_goal(goal.id, user.id, db)
    detail = GoalDetail.model_validate(goal)
    detail.contributions = [ContributionRead.model_validate(c) for c in contributions]
    return detail

@router.patch("/{goal_id}", response_model=GoalRead)
async def update_goal(
    goal_id: uuid.UUID,
    goal_in: GoalUpdate,
    executor: ActionExecutor = Depends(get_action_executor),
):
    result = await executor.update_goal(goal_id, **goal_in.model_dump(exclude_unset=True))
    return unwrap(result)["goal"]

@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: uuid.UUID,
    executor: ActionExecutor = Depends(get_action_executor),
):
    unwrap(await executor.delete_goal(goal_id))
    return None

# ------------------------------------------------------------
# CONTRIBUTIONS
# ------------------------------------------------------------
@router.post("/{goal_id}/contributions", response_model=ContributionResult, status_code=status.HTTP_201_CREATED)
async def add_contribution(
    goal_id: uuid.UUID,
    contribution_in: ContributionCreate,
    executor: ActionExecutor = Depends(get_action_executor),
):
    result = await executor.contribute_to_goal(
        contribution_in.amount,
        goal_id=goal_id,
        note=contribution_in.notes,
        contribution_date=contribution_in.contribution_date,
    )
    return unwrap(result)

@router.patch("/{goal_id}/contributions/{contribution_id}", response_model=ContributionResult)
async def update_contribution(
    goal_id: uuid.UUID,
    contribution_id: uuid.UUID,
    contribution_in: ContributionUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    executor: ActionExecutor = Depends(get_action_executor),
):
    await _ensure_contribution_of_goal(goal_id, contribution_id, user.id, db)
    result = await executor.revise_contribution(
        contribution_id,
        amount=contribution_in.amount,
        contribution_date=contribution_in.contribution_date,
        note=contribution_in.notes,
    )
    return unwrap(result)

@router.delete("/{goal_id}/contributions/{contribution_id}", response_model=GoalRead)
async def delete_contribution(
    goal_id: uuid.UUID,
    contribution_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    executor: ActionExecutor = Depends(get_action_executor),
):
    await _ensure_contribution_of_goal(goal_id, contribution_id, user.id, db)
    return unwrap(await executor.remove_contribution(contribution_id))["goal"]

# ------------------------------------------------------------
# STATUS ACTIONS
# ------------------------------------------------------------
@router.post("/{goal_id}/pause", response_model=GoalRead)
async def pause_goal(goal_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    return unwrap(await executor.set_goal_paused(goal_id, True))["goal"]

@router.post("/{goal_id}/resume", response_model=GoalRead)
async def resume_goal(goal_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    return unwrap(await executor.set_goal_paused(goal_id, False))["goal"]

@router.post("/{goal_id}/complete", response_model=GoalRead)
async def complete_goal(goal_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    """Close the goal as completed even if the target was not reached."""
    return unwrap(await executor.force_complete_goal(goal_id))["goal"]

@router.post("/{goal_id}/cancel", response_model=GoalRead)
async def cancel_goal(goal_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    return unwrap(await executor.cancel_goal(goal_id))["goal"]

@router.post("/{goal_id}/reopen", response_model=GoalRead)
async def reopen_goal(goal_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    return unwrap(await executor.reopen_goal(goal_id))["goal"]

@router.post("/{goal_id}/recompute", response_model=GoalRead)
async def recompute_goal(goal_id: uuid.UUID, executor: ActionExecutor = Depends(get_action_executor)):
    """Derive amount and status from the contribution ledger again."""
    return unwrap(await executor.recompute_goal(goal_id))["goal"]
