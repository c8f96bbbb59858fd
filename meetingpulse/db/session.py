# meetingpulse/db/session.py
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from meetingpulse.core.config import get_settings
from meetingpulse.db.base import Base

# Register ORM models on Base.metadata before any create_all.
from meetingpulse.models import feedback, magic_link_token, meeting, team  # noqa: F401

settings = get_settings()

# Tests drive the engine from several event loops (TestClient + pytest-asyncio),
# so connections must not be pooled across them.
_USE_NULL_POOL = (settings.APP_ENV or "").lower() == "test" or settings.DB_URL.startswith(
    "sqlite"
)

engine = create_async_engine(
    settings.DB_URL,
    echo=False,
    poolclass=NullPool if _USE_NULL_POOL else None,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async SQLAlchemy session.

    The session is automatically closed when the request is completed.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_db_for_startup() -> None:
    """
    Create any missing tables on application startup.

    Typically you'd eventually replace this with Alembic migrations.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db() -> None:
    """
    TEST-ONLY: reset the database schema.

    Drops all tables and recreates them using the current models.
    Do NOT call this from production code. Only from tests/fixtures.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
