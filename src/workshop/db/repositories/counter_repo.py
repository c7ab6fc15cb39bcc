"""
workshop/db/repositories/counter_repo.py — Годовые счётчики номеров заказов.

Одна строка на календарный год, создаётся при первом заказе года.
"""

from __future__ import annotations

from workshop.database import get_connection


async def increment_year_counter(year: int) -> int:
    """
    Атомарно увеличить счётчик года и вернуть новое значение.

    Один оператор: вставка со значением 1 либо инкремент существующей
    строки. Конкурентные вызовы сериализуются блокировкой строки.
    """
    async with get_connection() as conn:
        return await conn.fetchval(
            """
            INSERT INTO year_counters (year, sequence)
            VALUES ($1, 1)
            ON CONFLICT (year) DO UPDATE
                SET sequence = year_counters.sequence + 1
            RETURNING sequence
            """,
            year,
        )


async def get_year_counter(year: int) -> int:
    """Текущее значение счётчика (0, если в этом году заказов ещё не было)."""
    async with get_connection() as conn:
        value = await conn.fetchval(
            "SELECT sequence FROM year_counters WHERE year = $1", year
        )
        return value or 0
