import logging
from typing import Any, Dict, List, Optional

import asyncpg

log: logging.Logger = logging.getLogger(__name__)

PLAYER_COLUMNS = ("id", "name", "age", "available")
WRITABLE_COLUMNS = ("name", "age", "available")


class PlayerNotFoundError(Exception):
    pass


class PlayerRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool: asyncpg.Pool = pool

    async def find_many(self, order_by: str = "name") -> List[Dict]:
        if order_by not in PLAYER_COLUMNS:
            raise ValueError(f"Cannot order players by {order_by!r}")
        query = f"""
        SELECT id, name, age, available
        FROM players
        ORDER BY {order_by} ASC
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query)
            results = [dict(row) for row in rows]
            log.info(f"Found {len(results)} players ordered by {order_by}")
            return results

    async def create(self, data: Dict[str, Any]) -> Dict:
        columns = [c for c in WRITABLE_COLUMNS if c in data]
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = f"""
        INSERT INTO players ({", ".join(columns)})
        VALUES ({placeholders})
        RETURNING id, name, age, available
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *(data[c] for c in columns))
        player = dict(row)
        log.info(f"Created player {player['id']}")
        return player

    async def find_first(self, player_id: str) -> Optional[Dict]:
        query = """
        SELECT id, name, age, available
        FROM players
        WHERE id = $1
        LIMIT 1
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, player_id)
            if row:
                log.info(f"Found player {player_id}")
                return dict(row)
            log.info(f"Player {player_id} not found")
            return None

    async def update(self, player_id: str, data: Dict[str, Any]) -> Dict:
        columns = [c for c in WRITABLE_COLUMNS if c in data]
        if not columns:
            raise ValueError("Nothing to update")
        assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))
        query = f"""
        UPDATE players
        SET {assignments}
        WHERE id = $1
        RETURNING id, name, age, available
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, player_id, *(data[c] for c in columns))
        if row is None:
            raise PlayerNotFoundError(player_id)
        log.info(f"Updated player {player_id}: {', '.join(columns)}")
        return dict(row)

    async def delete(self, player_id: str) -> Dict:
        query = """
        DELETE FROM players
        WHERE id = $1
        RETURNING id, name, age, available
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, player_id)
        if row is None:
            raise PlayerNotFoundError(player_id)
        log.info(f"Deleted player {player_id}")
        return dict(row)


def make_player_repository(pool: asyncpg.Pool) -> PlayerRepository:
    return PlayerRepository(pool)
