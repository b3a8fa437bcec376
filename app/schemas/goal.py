# app/schemas/goal.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
import uuid

from app.models.goal import GoalStatus
from app.schemas.common import Money

class GoalCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    target_amount: Money
    target_date: Optional[date] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    priority: int = Field(3, ge=1, le=5)

class GoalUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    target_amount: Optional[Money] = None
    target_date: Optional[date] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    priority: Optional[int] = Field(None, ge=1, le=5)

class GoalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    icon: str
    color: str
    target_amount: Money
    current_amount: Money
    target_date: Optional[date] = None
    status: GoalStatus
    priority: int
    force_completed: bool
    completed_at: Optional[datetime] = None

class ContributionCreate(BaseModel):
    amount: Money
    contribution_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=500)

class ContributionUpdate(BaseModel):
    amount: Optional[Money] = None
    contribution_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=500)

class ContributionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    savings_goal_id: uuid.UUID
    amount: Money
    contribution_date: date
    notes: Optional[str] = None

class GoalDetail(GoalRead):
    contributions: List[ContributionRead] = []

class ContributionResult(BaseModel):
    contribution: ContributionRead
    goal: GoalRead
