"""
PostgreSQL store adapter - Implements KeyValueStore protocol.

This module provides the PostgreSQL implementation of the domain's
key-value port using psycopg3 (async) with raw SQL.

Expiry Model:
-------------
Every row carries an absolute expires_at computed with database time
(NOW() + ttl). Reads filter on expires_at > NOW(), so an expired row is
invisible even before it is purged. purge_expired() deletes dead rows
and runs at startup.

Writes are plain upserts: last write wins, which is all the gate needs
for sessions and abuse counters.
"""

import logging
from pathlib import Path

import psycopg
from psycopg_pool import AsyncConnectionPool

from src.domain.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


class PostgresKeyValueStore:
    """
    Implements KeyValueStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries. Driver errors surface as
    StoreUnavailable.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
        """
        self._pool = pool

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        sql = """
            INSERT INTO gate_kv (key, value, expires_at)
            VALUES (%s, %s, NOW() + %s * INTERVAL '1 second')
            ON CONFLICT (key) DO UPDATE
            SET value = EXCLUDED.value,
                expires_at = EXCLUDED.expires_at
        """
        try:
            async with self._pool.connection() as conn:
                await conn.execute(sql, (key, value, ttl_seconds))
                await conn.commit()
        except psycopg.Error as e:
            logger.error(f"Store write failed: {e.__class__.__name__}")
            raise StoreUnavailable() from e

    async def get(self, key: str) -> str | None:
        sql = """
            SELECT value FROM gate_kv
            WHERE key = %s AND expires_at > NOW()
        """
        try:
            async with self._pool.connection() as conn:
                cursor = await conn.execute(sql, (key,))
                row = await cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Store read failed: {e.__class__.__name__}")
            raise StoreUnavailable() from e
        return row[0] if row is not None else None

    async def delete(self, key: str) -> None:
        try:
            async with self._pool.connection() as conn:
                await conn.execute("DELETE FROM gate_kv WHERE key = %s", (key,))
                await conn.commit()
        except psycopg.Error as e:
            logger.error(f"Store delete failed: {e.__class__.__name__}")
            raise StoreUnavailable() from e

    async def purge_expired(self) -> int:
        """Delete expired rows and return how many were removed."""
        async with self._pool.connection() as conn:
            cursor = await conn.execute("DELETE FROM gate_kv WHERE expires_at <= NOW()")
            await conn.commit()
            return cursor.rowcount


async def run_migrations(pool: AsyncConnectionPool, directory: Path = MIGRATIONS_DIR) -> int:
    """
    Apply every *.sql file in directory, in filename order, atomically.

    All files run in one transaction: a failing file rolls back the
    whole batch, so the schema is never left half-applied. Files must be
    idempotent (IF NOT EXISTS) since every startup runs them again.

    Returns:
        Number of files applied

    Raises:
        StoreUnavailable: If any file fails
    """
    sql_files = sorted(directory.glob("*.sql"))
    if not sql_files:
        logger.warning("No migrations found in %s", directory)
        return 0

    current = None
    try:
        async with pool.connection() as conn:
            async with conn.transaction():
                for current in sql_files:
                    await conn.execute(current.read_text())
    except psycopg.Error as e:
        name = current.name if current is not None else "?"
        logger.error("Migration %s failed: %s", name, e.__class__.__name__)
        raise StoreUnavailable(f"Database migration failed: {name}") from e

    logger.info("Applied %d migration file(s)", len(sql_files))
    return len(sql_files)
