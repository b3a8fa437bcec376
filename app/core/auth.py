# app/core/auth.py

import uuid
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, BaseUserManager, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users import schemas

from sqlalchemy import Column, String, Boolean, Integer, DateTime, Uuid
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base, get_async_session
from .config import settings
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

# Audience fastapi-users stamps on its JWTs; get_current_user checks it too
TOKEN_AUDIENCE = ["fastapi-users:auth"]

# 1. User DB model
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(length=320), unique=True, index=True, nullable=False)
    hashed_password = Column(String(length=1024), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # Profile fields
    full_name = Column(String, nullable=True)
    currency = Column(String(length=3), nullable=False, default="EUR")
    # Personal budgeting rule, needs/wants/savings percentages
    rule_needs_percent = Column(Integer, nullable=False, default=50)
    rule_wants_percent = Column(Integer, nullable=False, default=30)
    rule_savings_percent = Column(Integer, nullable=False, default=20)

    created_at = Column(DateTime, default=utcnow)


# 2. Pydantic schemas
class UserRead(schemas.BaseUser[uuid.UUID]):
    full_name: Optional[str] = None
    currency: str = "EUR"
    rule_needs_percent: int = 50
    rule_wants_percent: int = 30
    rule_savings_percent: int = 20

class UserCreate(schemas.BaseUserCreate):
    full_name: Optional[str] = None
    currency: str = "EUR"

class UserUpdate(schemas.BaseUserUpdate):
    full_name: Optional[str] = None
    currency: Optional[str] = None
    rule_needs_percent: Optional[int] = None
    rule_wants_percent: Optional[int] = None
    rule_savings_percent: Optional[int] = None

# 3. User Manager
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has registered. Seeding default categories…")
        from app.crud.category import seed_default_categories_for_user

        created = await seed_default_categories_for_user(user.id, self.user_db.session)
        logger.info(f"Seeded {len(created)} default categories for {user.email}")


# 4. User Database
async def get_user_db(session: AsyncSession = Depends(get_async_session)):
    yield SQLAlchemyUserDatabase(session, User)

# 5. User Manager dependency
async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)

# 6. Authentication
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")

def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        token_audience=TOKEN_AUDIENCE,
        algorithm=settings.ALGORITHM,
    )

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

# 7. FastAPI Users instance
fastapi_users = FastAPIUsers[User, uuid.UUID](get_user_manager, [auth_backend])

# Export for other modules
__all__ = [
    "fastapi_users",
    "auth_backend",
    "get_user_db",
    "get_user_manager",
    "User",
    "UserRead",
    "UserCreate",
    "UserUpdate",
    "TOKEN_AUDIENCE",
]
