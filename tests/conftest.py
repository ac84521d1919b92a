import time
import uuid
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import StaticPool, event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from collabhub.config import settings
from collabhub.database import get_db
from collabhub.dependencies import get_current_user
from collabhub.main import app
from collabhub.models import Base, Profile
from collabhub.storage import MemoryStorage
from collabhub.store import EntityStore, UserContext

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakePipeline:
    def __init__(self, redis: "FakeRedis"):
        self._redis = redis
        self._ops: list = []

    def zremrangebyscore(self, key: str, low: float, high: float):
        self._ops.append(("zremrangebyscore", key, low, high))
        return self

    def zadd(self, key: str, mapping: dict):
        self._ops.append(("zadd", key, mapping))
        return self

    def zcard(self, key: str):
        self._ops.append(("zcard", key))
        return self

    def expire(self, key: str, seconds: int):
        self._ops.append(("expire", key, seconds))
        return self

    async def execute(self) -> list:
        results = []
        for op, key, *args in self._ops:
            zset = self._redis._zsets.setdefault(key, {})
            if op == "zremrangebyscore":
                low, high = args
                stale = [m for m, s in zset.items() if low <= s <= high]
                for m in stale:
                    del zset[m]
                results.append(len(stale))
            elif op == "zadd":
                zset.update(args[0])
                results.append(len(args[0]))
            elif op == "zcard":
                results.append(len(zset))
            else:
                self._redis._ttls[key] = args[0]
                results.append(True)
        self._ops.clear()
        return results


class FakeRedis:
    """In-memory Redis mock for testing."""

    def __init__(self):
        self._store: dict[str, str] = {}
        self._zsets: dict[str, dict[str, float]] = {}
        self._ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self._store[key] = str(value)
        if ex:
            self._ttls[key] = ex

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass


def make_token(user_id: uuid.UUID, email: str | None = None, username: str | None = None, **claims) -> str:
    payload = {
        "sub": str(user_id),
        "aud": settings.JWT_AUDIENCE,
        "exp": int(time.time()) + 3600,
        "email": email,
        "user_metadata": {"username": username} if username else {},
    }
    payload.update(claims)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


async def _make_profile(db_session: AsyncSession, username: str, email: str) -> UserContext:
    profile = Profile(id=uuid.uuid4(), username=username, skills=[])
    db_session.add(profile)
    await db_session.commit()
    return UserContext(user_id=profile.id, email=email, username=username)


@pytest.fixture
async def alice(db_session: AsyncSession) -> UserContext:
    return await _make_profile(db_session, "alice", "alice@example.com")


@pytest.fixture
async def bob(db_session: AsyncSession) -> UserContext:
    return await _make_profile(db_session, "bob", "bob@example.com")


@pytest.fixture
async def carol(db_session: AsyncSession) -> UserContext:
    return await _make_profile(db_session, "carol", "carol@example.com")


@pytest.fixture
def store_for(db_session: AsyncSession):
    """Build a store bound to the given identity on the shared test session."""

    def _store(context: UserContext) -> EntityStore:
        return EntityStore(db_session, context)

    return _store


@pytest.fixture
def alice_store(store_for, alice: UserContext) -> EntityStore:
    return store_for(alice)


@pytest.fixture
def bob_store(store_for, bob: UserContext) -> EntityStore:
    return store_for(bob)


@pytest.fixture
def carol_store(store_for, carol: UserContext) -> EntityStore:
    return store_for(carol)


@pytest.fixture
async def client(db_engine, alice: UserContext) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client authenticated as alice."""
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_current_user():
        return alice

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.state.redis = FakeRedis()
    app.state.storage = MemoryStorage()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def token_for():
    return make_token


@pytest.fixture
async def token_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """Client that authenticates with real bearer tokens."""
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.redis = FakeRedis()
    app.state.storage = MemoryStorage()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
