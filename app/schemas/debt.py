# app/schemas/debt.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
import uuid

from app.models.debt import DebtStatus, DebtType
from app.schemas.common import Money

class DebtCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    original_amount: Money
    interest_rate: Optional[Money] = None
    monthly_payment: Optional[Money] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    creditor: Optional[str] = None
    description: Optional[str] = None
    debt_type: DebtType = DebtType.other
    priority: int = Field(3, ge=1, le=5)

class DebtUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    original_amount: Optional[Money] = None
    interest_rate: Optional[Money] = None
    monthly_payment: Optional[Money] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    creditor: Optional[str] = None
    description: Optional[str] = None
    debt_type: Optional[DebtType] = None
    priority: Optional[int] = Field(None, ge=1, le=5)

class DebtRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    creditor: Optional[str] = None
    debt_type: DebtType
    original_amount: Money
    current_balance: Money
    interest_rate: Money
    monthly_payment: Optional[Money] = None
    start_date: date
    due_date: Optional[date] = None
    status: DebtStatus
    priority: int
    force_paid: bool
    paid_at: Optional[datetime] = None

class PaymentCreate(BaseModel):
    amount: Money
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=500)

class PaymentUpdate(BaseModel):
    amount: Optional[Money] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=500)

class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    debt_id: uuid.UUID
    amount: Money
    payment_date: date
    notes: Optional[str] = None

class DebtDetail(DebtRead):
    payments: List[PaymentRead] = []

class PaymentResult(BaseModel):
    payment: PaymentRead
    debt: DebtRead
