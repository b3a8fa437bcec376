# app/schemas/category.py
from typing import Optional
from pydantic import BaseModel, ConfigDict
import uuid

from app.models.category import CategoryType, Segment

class CategoryBase(BaseModel):
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    type: CategoryType = CategoryType.expense
    segment: Optional[Segment] = None

class CategoryCreate(CategoryBase):
    pass

class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    type: Optional[CategoryType] = None
    segment: Optional[Segment] = None
    is_active: Optional[bool] = None

class CategoryRead(CategoryBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    icon: str
    color: str
    is_active: bool
    is_default: bool
