from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from hrdesk.core.config import get_settings
from hrdesk.core.security import create_access_token
from hrdesk.db.base import SQLModel
from hrdesk.deps import get_db_session
from hrdesk.main import create_app
from hrdesk.models import AllowedIP, Task, TaskPriority, TaskStatus, User, UserRole
from hrdesk.services import UserService

ALLOWED_IP = "203.0.113.5"
ALLOWED_HEADERS = {"X-Forwarded-For": ALLOWED_IP}

UserFactory = Callable[..., Awaitable[User]]


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine: AsyncEngine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest_asyncio.fixture
async def allowlist(session: AsyncSession) -> AllowedIP:
    entry = AllowedIP(ip_address=ALLOWED_IP, description="Office")
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return entry


@pytest_asyncio.fixture
async def make_user(session: AsyncSession) -> UserFactory:
    service = UserService(session)

    async def _make_user(
        email: str,
        *,
        full_name: str | None = None,
        role: UserRole = UserRole.USER,
        password: str = "StrongPass123!",
    ) -> User:
        return await service.create_user(
            email=email,
            password=password,
            full_name=full_name,
            role=role,
        )

    return _make_user


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(
            subject=user.id,
            roles=[user.role.value],
            settings=get_settings(),
        )
        return {**ALLOWED_HEADERS, "Authorization": f"Bearer {token.token}"}

    return _headers


@pytest_asyncio.fixture
async def make_task(session: AsyncSession) -> Callable[..., Awaitable[Task]]:
    async def _make_task(
        *,
        creator: User,
        assignee: User,
        title: str = "Quarterly review",
        status: TaskStatus = TaskStatus.PENDING,
        deadline: datetime | None = None,
    ) -> Task:
        task = Task(
            title=title,
            deadline=deadline or datetime.now(timezone.utc) + timedelta(days=7),
            priority=TaskPriority.MEDIUM,
            status=status,
            created_by=creator.email,
            assigned_to=assignee.email,
            user_id=creator.id,
        )
        session.add(task)
        await session.commit()
        await session.refresh(task)
        return task

    return _make_task


@pytest_asyncio.fixture
async def app(session: AsyncSession) -> AsyncIterator[FastAPI]:
    get_settings.cache_clear()
    application = create_app()

    async def _override_db_session() -> AsyncIterator[AsyncSession]:
        yield session

    application.dependency_overrides[get_db_session] = _override_db_session
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
