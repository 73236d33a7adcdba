"""
Async PostgreSQL access helpers (raw SQL) using asyncpg.

This module owns the connection pool. The FastAPI lifespan opens it on
startup and closes it on shutdown (see `api/main.py`). The pool is shared by
all concurrent requests; every helper acquires a connection for exactly one
statement, so no transaction spans more than one statement.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from . import config

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


def database_url() -> str:
    url = config.env_str("DATABASE_URL", "")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return url


def pool_max_size() -> int:
    return max(1, config.env_int("DB_POOL_MAX", 5))


def command_timeout_s() -> float:
    return config.env_float("DB_COMMAND_TIMEOUT_S", 15.0)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    logger.info("db_pool_opening max_size=%s", pool_max_size())
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=1,
        max_size=pool_max_size(),
        command_timeout=command_timeout_s(),
    )
    logger.info("db_pool_ready")


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None
    logger.info("db_pool_closed")


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool().fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool().fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return asyncpg's status tag,
    e.g. "DELETE 0".
    """
    return await pool().execute(sql, *args)


async def ping(timeout_s: float) -> None:
    """
    Round-trip a trivial query. Both the pool acquire and the query are bounded
    by `timeout_s`.
    """
    async with pool().acquire(timeout=timeout_s) as conn:
        await conn.fetchval("SELECT 1", timeout=timeout_s)
