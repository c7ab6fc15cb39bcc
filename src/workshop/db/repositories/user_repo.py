"""
workshop/db/repositories/user_repo.py — Репозиторий пользователей.

Строки возвращаются как dict, включая ``password_hash``; сервисы
не выпускают его наружу.
"""

from __future__ import annotations

from uuid import UUID

import asyncpg

from workshop.database import get_connection
from workshop.exceptions import ConflictError


async def create_user(
    email: str,
    password_hash: str,
    full_name: str,
    phone: str | None = None,
    role: str = "client",
) -> dict:
    """Создать нового пользователя."""
    async with get_connection() as conn:
        try:
            row = await conn.fetchrow(
                """
                INSERT INTO users (email, password_hash, full_name, phone, role)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING *
                """,
                email, password_hash, full_name, phone, role,
            )
        except asyncpg.UniqueViolationError as exc:
            raise ConflictError(
                f"User with email '{email}' already exists",
                details={"field": "email"},
            ) from exc
        return dict(row) if row else {}


async def get_user_by_id(user_id: UUID) -> dict | None:
    """Найти пользователя по UUID."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM users WHERE user_id = $1", user_id
        )
        return dict(row) if row else None


async def get_user_by_email(email: str) -> dict | None:
    """Найти пользователя по email (без учёта регистра)."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM users WHERE email = $1", email.lower()
        )
        return dict(row) if row else None


async def get_users_by_ids(user_ids: list[UUID]) -> dict[UUID, dict]:
    """Пакетная загрузка пользователей для встраивания в заказы."""
    if not user_ids:
        return {}
    async with get_connection() as conn:
        rows = await conn.fetch(
            "SELECT * FROM users WHERE user_id = ANY($1::uuid[])", list(user_ids)
        )
        return {r["user_id"]: dict(r) for r in rows}


async def list_users(role: str | None = None, search: str | None = None) -> list[dict]:
    """Пользователи с фильтром по роли и подстроке в имени/email."""
    async with get_connection() as conn:
        rows = await conn.fetch(
            """
            SELECT * FROM users
            WHERE ($1::text IS NULL OR role = $1)
              AND ($2::text IS NULL
                   OR full_name ILIKE '%' || $2 || '%'
                   OR email ILIKE '%' || $2 || '%')
            ORDER BY created_at DESC
            """,
            role, search,
        )
        return [dict(r) for r in rows]


async def update_user(user_id: UUID, changes: dict) -> dict | None:
    """Обновить перечисленные колонки пользователя."""
    allowed = {"full_name", "phone", "role", "password_hash"}
    columns = [c for c in changes if c in allowed]
    if not columns:
        return await get_user_by_id(user_id)
    assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"UPDATE users SET {assignments}, updated_at = NOW() "
            f"WHERE user_id = $1 RETURNING *",
            user_id, *(changes[c] for c in columns),
        )
        return dict(row) if row else None
