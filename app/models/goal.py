# app/models/goal.py
import enum
import uuid
from decimal import Decimal
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Boolean, Integer, Enum, Uuid
from app.core.database import Base
from app.utils.dates import utcnow

class GoalStatus(str, enum.Enum):
    active = "active"
    paused = "paused"
    completed = "completed"
    cancelled = "cancelled"

class SavingsGoal(Base):
    __tablename__ = "savings_goals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=150), nullable=False)
    description = Column(String(length=500), nullable=True)
    icon = Column(String(length=50), nullable=False, default="piggy-bank")
    color = Column(String(length=20), nullable=False, default="#10b981")
    target_amount = Column(Numeric(12, 2), nullable=False)
    # Derived from savings_contributions, written only by GoalAggregate
    current_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    target_date = Column(Date, nullable=True)
    status = Column(Enum(GoalStatus, native_enum=False, length=20), nullable=False, default=GoalStatus.active)
    priority = Column(Integer, nullable=False, default=3)
    # Set when the owner closes the goal before reaching the target
    force_completed = Column(Boolean(), nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    completed_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<SavingsGoal name={self.name} {self.current_amount}/{self.target_amount} status={self.status}>"

class SavingsContribution(Base):
    __tablename__ = "savings_contributions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    savings_goal_id = Column(Uuid(as_uuid=True), ForeignKey("savings_goals.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    contribution_date = Column(Date, nullable=False)
    notes = Column(String(length=500), nullable=True)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<SavingsContribution goal={self.savings_goal_id} amount={self.amount}>"
