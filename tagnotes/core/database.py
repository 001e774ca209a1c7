"""Async engine, session factory and the per-request session dependency."""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from .config import settings


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for PostgreSQL (asyncpg) or SQLite (aiosqlite).

    SQLite gets a StaticPool so an in-memory database survives between
    sessions; PostgreSQL runs without pooling.
    """
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(url, echo=echo, poolclass=NullPool)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Sessions used by repositories and the unit of work.

    autoflush is off: repositories flush explicitly, so a lookup never
    writes half-built state.
    """
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session.

    One session per request; repositories and the unit of work of the
    request share it. Work left outside an explicit transaction is
    committed when the request succeeds.

    Usage in FastAPI:
        @app.get("/records")
        async def get_records(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_connection() -> None:
    """Run SELECT 1; raises SQLAlchemyError/OSError when the database is down."""
    async with AsyncSessionLocal() as session:
        await session.execute(text("SELECT 1"))


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables (local runs and tests; production uses alembic)."""
    from ..models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """Drop all tables (use with caution!)."""
    from ..models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
