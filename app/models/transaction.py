# app/models/transaction.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, Numeric, Date, DateTime, Enum, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.dates import utcnow

class TransactionKind(str, enum.Enum):
    income = "income"
    expense = "expense"
    savings = "savings"

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    kind = Column(Enum(TransactionKind, native_enum=False, length=20), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    concept = Column(String(length=255), nullable=False)
    description = Column(String(length=500), nullable=True)
    transaction_date = Column(Date, nullable=False, index=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    category = relationship("Category", lazy="joined")

    def __repr__(self):
        return f"<Transaction kind={self.kind} amount={self.amount} date={self.transaction_date} user_id={self.user_id}>"
