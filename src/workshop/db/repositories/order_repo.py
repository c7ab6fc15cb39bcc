"""
workshop/db/repositories/order_repo.py — Репозиторий заказов.

Фото и вложения хранятся в JSONB-колонках заказа: заказ ими владеет
единолично. Запись списка фото: «последняя запись побеждает».
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

import asyncpg

from workshop.database import get_connection
from workshop.exceptions import ConflictError

_UPDATABLE_COLUMNS = {
    "status", "description", "product_type", "price", "price_range",
    "price_min", "price_max", "deadline", "assigned_to", "photos", "attachments",
}


async def create_order(
    order_number: str,
    client_id: UUID,
    status: str = "new",
    description: str | None = None,
    product_type: str | None = None,
    price: float | None = None,
    price_range: str | None = None,
    price_min: float | None = None,
    price_max: float | None = None,
    deadline: datetime | None = None,
    assigned_to: UUID | None = None,
    photos: list[dict] | None = None,
    attachments: list[dict] | None = None,
) -> dict:
    """Создать заказ."""
    async with get_connection() as conn:
        try:
            row = await conn.fetchrow(
                """
                INSERT INTO orders (
                    order_number, client_id, assigned_to, status, description,
                    product_type, price, price_range, price_min, price_max,
                    deadline, photos, attachments
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
                RETURNING *
                """,
                order_number, client_id, assigned_to, status, description,
                product_type, price, price_range, price_min, price_max,
                deadline, photos or [], attachments or [],
            )
        except asyncpg.UniqueViolationError as exc:
            raise ConflictError(
                f"Order number '{order_number}' already exists",
                details={"field": "order_number"},
            ) from exc
        return dict(row) if row else {}


async def get_order_by_id(order_id: UUID) -> dict | None:
    """Найти заказ по UUID."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM orders WHERE order_id = $1", order_id
        )
        return dict(row) if row else None


async def update_order(order_id: UUID, changes: dict) -> dict | None:
    """Обновить перечисленные колонки заказа; ``None``, если заказа нет."""
    columns = [c for c in changes if c in _UPDATABLE_COLUMNS]
    if not columns:
        return await get_order_by_id(order_id)
    assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"UPDATE orders SET {assignments}, updated_at = NOW() "
            f"WHERE order_id = $1 RETURNING *",
            order_id, *(changes[c] for c in columns),
        )
        return dict(row) if row else None


async def list_orders(
    client_id: UUID | None = None,
    assigned_to: UUID | None = None,
    status: str | None = None,
    statuses: list[str] | None = None,
    search: str | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    offset: int = 0,
    limit: int | None = None,
) -> tuple[list[dict], int]:
    """
    Заказы по фильтру, новые сверху.

    ``search``: подстрока номера заказа, имени клиента или мастера.
    Возвращает (страница, общее число совпадений).
    """
    async with get_connection() as conn:
        rows = await conn.fetch(
            """
            SELECT o.*, COUNT(*) OVER () AS _total
            FROM orders o
            LEFT JOIN users c ON c.user_id = o.client_id
            LEFT JOIN users m ON m.user_id = o.assigned_to
            WHERE ($1::uuid IS NULL OR o.client_id = $1)
              AND ($2::uuid IS NULL OR o.assigned_to = $2)
              AND ($3::text IS NULL OR o.status = $3)
              AND ($4::text[] IS NULL OR o.status = ANY($4))
              AND ($5::text IS NULL
                   OR o.order_number ILIKE '%' || $5 || '%'
                   OR c.full_name ILIKE '%' || $5 || '%'
                   OR m.full_name ILIKE '%' || $5 || '%')
              AND ($6::timestamptz IS NULL OR o.created_at >= $6)
              AND ($7::timestamptz IS NULL OR o.created_at <= $7)
            ORDER BY o.created_at DESC
            OFFSET $8
            LIMIT $9
            """,
            client_id, assigned_to, status, statuses, search,
            created_from, created_to, offset, limit,
        )
    total = rows[0]["_total"] if rows else 0
    result = []
    for r in rows:
        d = dict(r)
        d.pop("_total", None)
        result.append(d)
    return result, total
