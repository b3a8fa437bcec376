# app/schemas/transaction.py
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import date
import uuid

from app.models.transaction import TransactionKind
from app.schemas.common import Money

class TransactionBase(BaseModel):
    amount: Money = Field(..., description="Always positive; the kind carries the direction")
    concept: str = Field(..., min_length=1, max_length=255, description="E.g. Ropa en Zara")
    kind: TransactionKind
    category_id: uuid.UUID
    transaction_date: date = Field(..., description="YYYY-MM-DD")
    description: Optional[str] = None

class TransactionCreate(TransactionBase):
    pass

class TransactionRead(TransactionBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    category_id: Optional[uuid.UUID] = None
