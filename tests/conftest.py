"""Shared fixtures: a throwaway SQLite database per test and seeded users."""

import os

# Settings are read when app.core.config is first imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-entropy")
os.environ.setdefault("LLM_API_KEY", "test-llm-key")
os.environ.setdefault("DB_RETRY_DELAY", "0.05")

import uuid  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from app.core.auth import User  # noqa: E402
from app.core.database import Base, build_engine  # noqa: E402
from app.crud.category import get_categories_for_user, seed_default_categories_for_user  # noqa: E402
from app.models import category, debt, goal, transaction  # noqa: E402,F401
from app.services.action_executor import ActionExecutor  # noqa: E402


@pytest.fixture
async def engine(tmp_path):
    test_engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"timeout": 15},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def _create_user(session_factory, email: str, full_name: str) -> User:
    """Users live in their own session so rollbacks in ``db`` never expire them."""
    user = User(
        id=uuid.uuid4(),
        email=email,
        hashed_password="not-a-real-hash",
        is_active=True,
        is_superuser=False,
        is_verified=True,
        full_name=full_name,
    )
    async with session_factory() as session:
        session.add(user)
        await session.commit()
        await seed_default_categories_for_user(user.id, session)
    return user


@pytest.fixture
async def user(session_factory):
    return await _create_user(session_factory, "ana@example.com", "Ana")


@pytest.fixture
async def other_user(session_factory):
    return await _create_user(session_factory, "luis@example.com", "Luis")


@pytest.fixture
def executor(db, user):
    return ActionExecutor(db, user.id)


@pytest.fixture
async def categories(session_factory, user):
    """The user's seeded categories keyed by name, detached from ``db``."""
    async with session_factory() as session:
        return {c.name: c for c in await get_categories_for_user(user.id, session)}
