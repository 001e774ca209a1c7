"""
Pytest fixtures для тестов.

Предоставляет:
- test_engine: SQLite in-memory БД, таблицы пересоздаются для каждого теста
- test_db: сессия для тестов репозиториев и unit of work
- test_client: HTTP клиент для тестирования API endpoints
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tagnotes.api.dependencies import get_db  # тот же объект, что tagnotes.core.database.get_db
from tagnotes.core.config import settings
from tagnotes.core.database import build_engine, build_session_factory, drop_db, init_db
from tagnotes.main import app

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """
    Создаёт async engine для тестовой БД (SQLite in-memory).

    StaticPool обеспечивает что используется одно и то же соединение,
    что критично для in-memory БД (иначе данные теряются).
    """
    engine = build_engine(TEST_DATABASE_URL)
    await drop_db(engine)
    await init_db(engine)

    yield engine

    await drop_db(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Фабрика сессий с теми же настройками, что AsyncSessionLocal."""
    return build_session_factory(test_engine)


@pytest_asyncio.fixture
async def test_db(session_factory):
    """
    Предоставляет async session для работы с тестовой БД.

    Каждый тест получает чистую БД.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTP клиент для тестирования API endpoints.

    get_db подменяется сессией тестовой БД; заголовок X-API-Key
    добавляется ко всем запросам.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-API-Key": settings.API_KEY},
    ) as client:
        yield client

    app.dependency_overrides.clear()


# Pytest configuration
@pytest.fixture(scope="session")
def anyio_backend():
    """Используем asyncio для всех async тестов."""
    return "asyncio"
