# app/api/v1/routes/users.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.auth import User, UserRead, UserUpdate
from app.core.database import get_async_session
from app.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["User Management"])

RULE_FIELDS = ("rule_needs_percent", "rule_wants_percent", "rule_savings_percent")

# 1) GET /users/me
@router.get("/me", response_model=UserRead)
async def read_own_profile(user: User = Depends(get_current_user)):
    """Get current user's profile"""
    return user

# 2) PATCH /users/me
@router.patch("/me", response_model=UserRead)
async def update_own_profile(
    user_update: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update profile fields: name, currency and the needs/wants/savings rule."""
    update_dict = user_update.model_dump(
        exclude_unset=True,
        include={"full_name", "currency", *RULE_FIELDS},
    )
    if not update_dict:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update"
        )

    if any(field in update_dict for field in RULE_FIELDS):
        rule = [update_dict.get(field, getattr(user, field)) for field in RULE_FIELDS]
        if any(part is None or part < 0 for part in rule) or sum(rule) != 100:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Needs, wants and savings percentages must add up to 100"
            )

    user_id = user.id
    try:
        await db.execute(update(User).where(User.id == user_id).values(**update_dict))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Profile update failed for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while updating profile"
        )

    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalars().first()
