"""
workshop/services/numbering.py — Номера заказов «ЗК-ГГГГ-ННН».

Порядковый номер выдаётся per-year счётчиком в хранилище одной атомарной
операцией (upsert + increment + read). Номер, выданный под заказ, который
затем не сохранился, считается израсходованным: пропуски допустимы.
"""

from __future__ import annotations

import logging
import re

from workshop.db.repositories import counter_repo
from workshop.exceptions import StorageError, ValidationError, WorkshopError

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "ЗК"

_ORDER_NUMBER_RE = re.compile(rf"^{ORDER_NUMBER_PREFIX}-(\d{{4}})-(\d{{3,}})$")


def format_order_number(year: int, sequence: int) -> str:
    """``format_order_number(2025, 7) == "ЗК-2025-007"``; длинные номера не обрезаются."""
    return f"{ORDER_NUMBER_PREFIX}-{year:04d}-{sequence:03d}"


def parse_order_number(order_number: str) -> tuple[int, int]:
    """Обратная операция: ``"ЗК-2025-1042"`` → ``(2025, 1042)``."""
    match = _ORDER_NUMBER_RE.match(order_number or "")
    if not match:
        raise ValidationError(
            f"Malformed order number: {order_number!r}",
            details={"field": "order_number"},
        )
    return int(match.group(1)), int(match.group(2))


async def next_sequence(year: int) -> int:
    """
    Следующий порядковый номер для года (≥ 1).

    Raises:
        StorageError: хранилище недоступно, заказ создавать нельзя.
    """
    try:
        sequence = await counter_repo.increment_year_counter(year)
    except WorkshopError:
        raise
    except Exception as exc:
        logger.error("Year counter increment failed for %s: %s", year, exc)
        raise StorageError(
            "Could not allocate an order number", details={"year": year}
        ) from exc
    return sequence


async def next_order_number(year: int) -> str:
    """Выдаёт новый номер заказа для года."""
    return format_order_number(year, await next_sequence(year))
