"""Database engine and session factory."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from backend.docchat.config import Settings


def normalize_async_url(database_url: str) -> str:
    """Rewrite sync driver URLs to their async equivalents.

    postgresql:// -> postgresql+asyncpg://, sqlite:// -> sqlite+aiosqlite://
    """
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def create_async_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create async SQLAlchemy engine from settings.

    Raises:
        ValueError: If DATABASE_URL is unset or empty.
    """
    if not settings.database_url:
        raise ValueError(
            "DATABASE_URL must be set to a valid connection string. "
            "Leave it unset to use the in-memory stores instead."
        )

    return create_async_engine(
        normalize_async_url(settings.database_url), pool_pre_ping=True, echo=False
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create sessionmaker for request-scoped async sessions.

    expire_on_commit=False keeps ORM attributes readable after commit
    without an implicit (async-unsafe) refresh.
    """
    return async_sessionmaker(bind=engine, expire_on_commit=False)
