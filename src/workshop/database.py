"""
═══════════════════════════════════════════════════════════════════════════════
Workshop — Пул соединений к базе данных (Database Connection Pool)
═══════════════════════════════════════════════════════════════════════════════

Пул соединений к PostgreSQL с параметрами из ``workshop.config.get_settings()``.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import AsyncGenerator

import asyncpg

from workshop.config import get_settings

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Глобальная переменная пула (module-level singleton)
# ═══════════════════════════════════════════════════════════════════════════════
_pool: asyncpg.Pool | None = None


def _json_default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


async def _init_connection(conn: asyncpg.Connection) -> None:
    """JSONB-колонки (photos, attachments) читаются и пишутся как Python-объекты."""
    await conn.set_type_codec(
        "jsonb",
        encoder=lambda v: json.dumps(v, default=_json_default),
        decoder=json.loads,
        schema="pg_catalog",
    )


async def get_pool() -> asyncpg.Pool:
    """
    Возвращает глобальный пул соединений к PostgreSQL.

    Создаёт пул при первом вызове с параметрами из WorkshopSettings.
    """
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.database_pool_min,
            max_size=settings.database_pool_max,
            command_timeout=60,
            init=_init_connection,
        )
        logger.info(
            f"Workshop DB pool created "
            f"(min={settings.database_pool_min}, max={settings.database_pool_max})"
        )
    return _pool


async def close_pool() -> None:
    """Закрывает глобальный пул соединений."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Workshop DB pool closed")


@asynccontextmanager
async def get_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    """
    Выдаёт соединение из пула и возвращает его обратно.

    Использование::

        from workshop.database import get_connection

        async with get_connection() as conn:
            row = await conn.fetchrow("SELECT * FROM orders WHERE id = $1", order_id)
    """
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


async def check_connection() -> bool:
    """Проверяет доступность PostgreSQL (health check)."""
    try:
        async with get_connection() as conn:
            result = await conn.fetchval("SELECT 1")
            return result == 1
    except Exception as e:
        logger.error(f"Workshop DB health check failed: {e}")
        return False
