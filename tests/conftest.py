"""
测试配置：内存 SQLite 数据库、API 客户端与测试数据工厂
"""
import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.database import Base, get_db
from app.models import Creator, Work, Workshop
from app.utils.auth import create_access_token, hash_password
from main import app


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def api(session_factory):
    """通过 ASGI 直接调用应用的 HTTP 客户端，每个请求使用独立的会话"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def auth_headers(user_id: int) -> dict:
    token = create_access_token({"sub": str(user_id)}, expires_delta=timedelta(hours=1))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def make_creator(session_factory):
    """创建创作者"""

    async def _make(username: str = "potter", email: str = None, password: str = "secret123", **fields) -> Creator:
        async with session_factory() as session:
            creator = Creator(
                username=username,
                email=email or f"{username}@example.com",
                password_hash=hash_password(password),
                followers_count=fields.pop("followers_count", 0),
                works_count=fields.pop("works_count", 0),
                **fields
            )
            session.add(creator)
            await session.commit()
            await session.refresh(creator)
            return creator

    return _make


@pytest.fixture
def make_work(session_factory):
    """创建作品"""

    async def _make(creator_id: int, title: str = "青瓷茶杯", category: str = "陶艺", **fields) -> Work:
        async with session_factory() as session:
            work = Work(
                title=title,
                description=fields.pop("description", "手工拉坯"),
                category=category,
                cover_image=fields.pop("cover_image", "https://images.example.com/cup.jpg"),
                images=fields.pop("images", []),
                price=fields.pop("price", Decimal("128.00")),
                likes_count=fields.pop("likes_count", 0),
                creator_id=creator_id,
                **fields
            )
            session.add(work)
            await session.commit()
            await session.refresh(work)
            return work

    return _make


@pytest.fixture
def make_workshop(session_factory):
    """创建工作坊活动"""

    async def _make(title: str = "周末陶艺体验", days: int = 7, **fields) -> Workshop:
        async with session_factory() as session:
            workshop = Workshop(
                title=title,
                description=fields.pop("description", "零基础可参加"),
                date=datetime.now(timezone.utc) + timedelta(days=days),
                location=fields.pop("location", "杭州"),
                cover_image=fields.pop("cover_image", "https://images.example.com/workshop.jpg"),
                **fields
            )
            session.add(workshop)
            await session.commit()
            await session.refresh(workshop)
            return workshop

    return _make
