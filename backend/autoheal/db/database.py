import logging

from fastapi import Request
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from autoheal.config import Settings
from autoheal.exceptions import StorageError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def async_database_url(url: str) -> str:
    """Point a plain database URL at the matching async driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


class Database:
    """Owns the process-wide engine (and its connection pool) and session factory.

    connect() and disconnect() are idempotent; the engine itself is the
    record of whether the pool is open.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        connect_timeout: float = 3.0,
        idle_timeout: int = 45,
    ):
        self.url = async_database_url(url)
        self.echo = echo
        self.pool_size = pool_size
        self.connect_timeout = connect_timeout
        self.idle_timeout = idle_timeout
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.db_echo,
            pool_size=settings.db_pool_size,
            connect_timeout=settings.db_connect_timeout,
            idle_timeout=settings.db_idle_timeout,
        )

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StorageError("Database is not connected")
        return self._engine

    def _engine_options(self) -> dict:
        options = {"echo": self.echo}
        if self.url.startswith("postgresql"):
            options.update(
                pool_size=self.pool_size,
                pool_timeout=self.connect_timeout,
                pool_recycle=self.idle_timeout,
                pool_pre_ping=True,
                connect_args={"timeout": self.connect_timeout},
            )
        return options

    async def connect(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.url, **self._engine_options())
        self._sessionmaker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        logger.info("Database engine created for %s", self._engine.url.render_as_string(hide_password=True))

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database engine disposed")

    async def create_all(self) -> None:
        # Import models so every table is registered on Base.metadata
        import autoheal.models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (OSError, sa_exc.OperationalError) as e:
            raise StorageError("Could not reach the database", original_error=e) from e

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise StorageError("Database is not connected")
        return self._sessionmaker()


async def get_db(request: Request):
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
