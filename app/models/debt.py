# app/models/debt.py
import enum
import uuid
from decimal import Decimal
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Boolean, Integer, Enum, Uuid
from app.core.database import Base
from app.utils.dates import utcnow

class DebtStatus(str, enum.Enum):
    active = "active"
    paused = "paused"
    paid = "paid"

class DebtType(str, enum.Enum):
    mortgage = "mortgage"
    car_loan = "car_loan"
    personal_loan = "personal_loan"
    credit_card = "credit_card"
    student_loan = "student_loan"
    other = "other"

class Debt(Base):
    __tablename__ = "debts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=150), nullable=False)
    description = Column(String(length=500), nullable=True)
    creditor = Column(String(length=150), nullable=True)
    debt_type = Column(Enum(DebtType, native_enum=False, length=20), nullable=False, default=DebtType.other)
    original_amount = Column(Numeric(12, 2), nullable=False)
    # Derived from debt_payments, written only by DebtAggregate
    current_balance = Column(Numeric(12, 2), nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    monthly_payment = Column(Numeric(12, 2), nullable=True)
    start_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    status = Column(Enum(DebtStatus, native_enum=False, length=20), nullable=False, default=DebtStatus.active)
    priority = Column(Integer, nullable=False, default=3)
    # Set when the owner settles the debt outside the payment ledger
    force_paid = Column(Boolean(), nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    paid_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Debt name={self.name} balance={self.current_balance}/{self.original_amount} status={self.status}>"

class DebtPayment(Base):
    __tablename__ = "debt_payments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    debt_id = Column(Uuid(as_uuid=True), ForeignKey("debts.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    notes = Column(String(length=500), nullable=True)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<DebtPayment debt={self.debt_id} amount={self.amount}>"
