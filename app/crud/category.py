# app/crud/category.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from app.models.category import Category, CategoryType, Segment
from typing import List, Optional
import uuid
from app.schemas.category import CategoryCreate, CategoryUpdate

async def get_categories_for_user(user_id: uuid.UUID, db: AsyncSession, active_only: bool = False) -> List[Category]:
    stmt = select(Category).where(Category.user_id == user_id)
    if active_only:
        stmt = stmt.where(Category.is_active.is_(True))
    result = await db.execute(stmt.order_by(Category.name))
    return list(result.scalars().all())

async def get_category_by_id(category_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_category_for_user(user_id: uuid.UUID, cat_in: CategoryCreate, db: AsyncSession) -> Category:
    new_cat = Category(**cat_in.model_dump(exclude_none=True), user_id=user_id)
    db.add(new_cat)
    await db.commit()
    await db.refresh(new_cat)
    return new_cat

async def update_category(category: Category, cat_in: CategoryUpdate, db: AsyncSession) -> Category:
    for field, value in cat_in.model_dump(exclude_unset=True).items():
        setattr(category, field, value)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category

async def delete_category(category: Category, db: AsyncSession) -> None:
    await db.delete(category)
    await db.commit()


async def get_category_by_name_for_user(name: str, user_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    """Case-insensitive lookup of a category by name for a given user."""
    result = await db.execute(
        select(Category).where(
            Category.user_id == user_id,
            func.lower(Category.name) == func.lower(name),
        )
    )
    return result.scalars().first()


# Default categories to be created for every new user
DEFAULT_CATEGORIES: List[dict] = [
    {"name": "Nomina", "type": CategoryType.income, "segment": None, "icon": "briefcase"},
    {"name": "Otros ingresos", "type": CategoryType.income, "segment": None, "icon": "plus-circle"},
    {"name": "Vivienda", "type": CategoryType.expense, "segment": Segment.needs, "icon": "home"},
    {"name": "Supermercado", "type": CategoryType.expense, "segment": Segment.needs, "icon": "shopping-cart"},
    {"name": "Transporte", "type": CategoryType.expense, "segment": Segment.needs, "icon": "car"},
    {"name": "Suministros", "type": CategoryType.expense, "segment": Segment.needs, "icon": "zap"},
    {"name": "Restaurantes", "type": CategoryType.expense, "segment": Segment.wants, "icon": "utensils"},
    {"name": "Ocio", "type": CategoryType.expense, "segment": Segment.wants, "icon": "film"},
    {"name": "Compras", "type": CategoryType.expense, "segment": Segment.wants, "icon": "shopping-bag"},
    {"name": "Ahorro", "type": CategoryType.savings, "segment": Segment.savings, "icon": "piggy-bank"},
]

async def seed_default_categories_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    """Ensure the user has the default categories; create missing ones.

    Returns the list of categories that were created (empty if none were needed).
    """
    result = await db.execute(select(Category.name).where(Category.user_id == user_id))
    existing_names_lower = {row[0].lower() for row in result.all()}

    categories_to_create: List[Category] = []
    for cat in DEFAULT_CATEGORIES:
        if cat["name"].lower() not in existing_names_lower:
            categories_to_create.append(
                Category(
                    user_id=user_id,
                    name=cat["name"],
                    type=cat["type"],
                    segment=cat["segment"],
                    icon=cat["icon"],
                    is_default=True,
                )
            )

    if categories_to_create:
        db.add_all(categories_to_create)
        await db.commit()
        for c in categories_to_create:
            await db.refresh(c)

    return categories_to_create
