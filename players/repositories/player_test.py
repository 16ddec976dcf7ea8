import asyncio
import logging

import asyncpg
import pytest
import pytest_asyncio

from players.repositories.player import (
    PlayerNotFoundError,
    PlayerRepository,
    make_player_repository,
)

# ------------------------
# Setup logging
# ------------------------
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

pytestmark = pytest.mark.asyncio(loop_scope="module")

PLAYERS_DDL = """
CREATE TABLE IF NOT EXISTS players (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    name TEXT NOT NULL CHECK (name <> ''),
    age DOUBLE PRECISION NOT NULL CHECK (age >= 17),
    available BOOLEAN NOT NULL DEFAULT TRUE
);
"""


# ------------------------
# PostgreSQL container fixture
# ------------------------
@pytest_asyncio.fixture(scope="module", loop_scope="module")
async def postgres_pool():
    try:
        from testcontainers.postgres import PostgresContainer

        container = PostgresContainer("postgres:15")
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    dsn = container.get_connection_url().replace("+psycopg2", "")
    logger.info(f"PostgreSQL container DSN: {dsn}")

    # Wait until Postgres is ready
    pool = None
    for i in range(30):
        try:
            pool = await asyncpg.create_pool(dsn=dsn, min_size=1, max_size=5)
            async with pool.acquire() as conn:
                await conn.execute("SELECT 1;")
            break
        except Exception as e:
            logger.debug(f"Attempt {i + 1}: PostgreSQL not ready yet ({e})")
            await asyncio.sleep(1)
    else:
        container.stop()
        raise RuntimeError("PostgreSQL container did not start in time")

    async with pool.acquire() as conn:
        await conn.execute(PLAYERS_DDL)

    yield pool

    await pool.close()
    container.stop()


@pytest_asyncio.fixture(loop_scope="module")
async def player_repo(postgres_pool: asyncpg.Pool):
    repo = make_player_repository(pool=postgres_pool)
    yield repo
    async with postgres_pool.acquire() as conn:
        await conn.execute("TRUNCATE TABLE players;")


# ------------------------
# Tests
# ------------------------
async def test_create_assigns_id_and_default_availability(player_repo: PlayerRepository):
    player = await player_repo.create({"name": "Ada", "age": 30})
    assert isinstance(player["id"], str) and player["id"]
    assert player["name"] == "Ada"
    assert player["age"] == 30
    assert player["available"] is True


async def test_find_many_orders_by_name(player_repo: PlayerRepository):
    for name in ["Charlie", "Alice", "Bob"]:
        await player_repo.create({"name": name, "age": 20})

    players = await player_repo.find_many(order_by="name")
    assert [p["name"] for p in players] == ["Alice", "Bob", "Charlie"]


async def test_find_many_rejects_unknown_column(player_repo: PlayerRepository):
    with pytest.raises(ValueError):
        await player_repo.find_many(order_by="name; DROP TABLE players")


async def test_find_first(player_repo: PlayerRepository):
    created = await player_repo.create({"name": "Ada", "age": 30})
    assert await player_repo.find_first(created["id"]) == created
    assert await player_repo.find_first("not-a-player") is None


async def test_update_applies_partial_changes(player_repo: PlayerRepository):
    created = await player_repo.create({"name": "Ada", "age": 30})
    updated = await player_repo.update(created["id"], {"available": False})
    assert updated == {**created, "available": False}


async def test_update_missing_player(player_repo: PlayerRepository):
    with pytest.raises(PlayerNotFoundError):
        await player_repo.update("not-a-player", {"age": 40})


async def test_delete_twice(player_repo: PlayerRepository):
    created = await player_repo.create({"name": "Ada", "age": 30})
    deleted = await player_repo.delete(created["id"])
    assert deleted["id"] == created["id"]
    with pytest.raises(PlayerNotFoundError):
        await player_repo.delete(created["id"])
