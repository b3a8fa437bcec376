# app/models/category.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime, Enum, Uuid
from app.core.database import Base
from app.utils.dates import utcnow

class CategoryType(str, enum.Enum):
    income = "income"
    expense = "expense"
    savings = "savings"

class Segment(str, enum.Enum):
    needs = "needs"
    wants = "wants"
    savings = "savings"

class Category(Base):
    __tablename__ = "categories"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=100), nullable=False)
    icon = Column(String(length=50), nullable=False, default="tag")
    color = Column(String(length=20), nullable=False, default="#6b7280")
    type = Column(Enum(CategoryType, native_enum=False, length=20), nullable=False, default=CategoryType.expense)
    # 50/30/20 bucket the category counts towards
    segment = Column(Enum(Segment, native_enum=False, length=20), nullable=True)
    is_active = Column(Boolean(), nullable=False, default=True)
    is_default = Column(Boolean(), nullable=False, default=False)  # True for seeded categories

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Category name={self.name} type={self.type} user_id={self.user_id}>"
