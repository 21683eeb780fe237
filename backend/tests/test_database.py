import pytest

from autoheal.db.database import Database, async_database_url
from autoheal.exceptions import StorageError


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgresql://u:p@localhost/autoheal", "postgresql+asyncpg://u:p@localhost/autoheal"),
        ("sqlite:///./autoheal.db", "sqlite+aiosqlite:///./autoheal.db"),
        ("postgresql+asyncpg://u:p@db/autoheal", "postgresql+asyncpg://u:p@db/autoheal"),
    ],
)
def test_async_database_url(url: str, expected: str) -> None:
    assert async_database_url(url) == expected


def test_pool_options_only_apply_to_postgres() -> None:
    postgres = Database("postgresql://u:p@localhost/autoheal", pool_size=5, connect_timeout=2.0, idle_timeout=30)
    sqlite = Database("sqlite:///./autoheal.db")

    options = postgres._engine_options()
    assert options["pool_size"] == 5
    assert options["pool_timeout"] == 2.0
    assert options["pool_recycle"] == 30
    assert options["connect_args"] == {"timeout": 2.0}
    assert sqlite._engine_options() == {"echo": False}


@pytest.mark.asyncio
async def test_connect_and_disconnect_are_idempotent(database_url: str) -> None:
    database = Database(database_url)
    assert not database.is_connected

    await database.connect()
    engine = database.engine
    await database.connect()
    assert database.engine is engine

    await database.disconnect()
    await database.disconnect()
    assert not database.is_connected


@pytest.mark.asyncio
async def test_session_requires_connection(database_url: str) -> None:
    database = Database(database_url)

    with pytest.raises(StorageError):
        database.session()
    with pytest.raises(StorageError):
        await database.create_all()


@pytest.mark.asyncio
async def test_unreachable_database_raises_storage_error(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'autoheal.db'}")
    await database.connect()

    try:
        with pytest.raises(StorageError):
            await database.create_all()
    finally:
        await database.disconnect()
