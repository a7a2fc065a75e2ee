"""测试公共 Fixtures —— 内存 SQLite + 独立 TestClient + 假图床"""

import uuid
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from bookworm.adapters.base import ImageStore, ImageStoreError
from bookworm.database import Base, get_db
from bookworm.models.book import Book
from bookworm.models.user import User
from bookworm.utils.deps import get_image_store
from bookworm.utils.security import hash_password, create_access_token


# ──────────── 假图床 ────────────

class FakeImageStore(ImageStore):
    """记录上传 / 删除调用，可通过开关模拟失败"""

    name = "fake"
    host = "https://images.fake-cdn.test"

    def __init__(self):
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False

    def owns(self, url: str) -> bool:
        return url.startswith(self.host)

    async def upload(self, image: str) -> str:
        if self.fail_upload:
            raise ImageStoreError("upload refused")
        self.uploaded.append(image)
        return f"{self.host}/books/{len(self.uploaded)}.png"

    async def delete(self, url: str) -> None:
        if self.fail_delete:
            raise ImageStoreError("destroy refused")
        self.deleted.append(url)


# ──────────── 内存数据库引擎 ────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def session_factory():
    """每个测试独立的内存库：建表 → 测试 → 销毁"""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


# ──────────── FastAPI TestClient ────────────

@pytest_asyncio.fixture
async def client(session_factory, image_store):
    from bookworm.main import app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_image_store] = lambda: image_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ──────────── 测试用户 ────────────

async def make_user(session_factory, username: str, email: str, password: str = "password123") -> User:
    async with session_factory() as db:
        user = User(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            password_hash=hash_password(password),
            profile_image=f"https://avatars.example.com/{username}.svg",
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user


@pytest_asyncio.fixture
async def test_user(session_factory) -> User:
    return await make_user(session_factory, "reader", "test@example.com")


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    return await make_user(session_factory, "stranger", "other@example.com")


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(other_user: User) -> dict:
    token = create_access_token(other_user.id)
    return {"Authorization": f"Bearer {token}"}


# ──────────── 预置书评 ────────────

@pytest_asyncio.fixture
async def make_books(session_factory):
    """按给定顺序创建书评，created_at 依次递增一分钟"""

    async def _make(user: User, count: int, image_prefix: str = FakeImageStore.host) -> list[Book]:
        base = datetime(2025, 1, 1, 12, 0, 0)
        created = []
        async with session_factory() as db:
            for i in range(count):
                book = Book(
                    title=f"Book {i + 1}",
                    caption=f"Caption {i + 1}",
                    rating=(i % 5) + 1,
                    image=f"{image_prefix}/books/seed-{i + 1}.png",
                    user_id=user.id,
                    created_at=base + timedelta(minutes=i),
                )
                db.add(book)
                created.append(book)
            await db.commit()
            for book in created:
                await db.refresh(book)
        return created

    return _make
