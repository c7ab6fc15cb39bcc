"""
═══════════════════════════════════════════════════════════════════════════════
Workshop — In-Memory хранилище (замена БД для локальной разработки и тестов)
═══════════════════════════════════════════════════════════════════════════════

In-memory реализации user_repo, order_repo и counter_repo +
функция ``activate_memory_store()`` для monkey-patching.

Инкремент годового счётчика не содержит точек ожидания между чтением
и записью, поэтому атомарен в пределах event loop.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID, uuid4

from workshop.exceptions import ConflictError

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Хранилища данных
# ═══════════════════════════════════════════════════════════════════════════════
_users: dict[UUID, dict] = {}
_orders: dict[UUID, dict] = {}
_year_counters: dict[int, int] = {}

_now = lambda: datetime.now(timezone.utc)  # noqa: E731


def reset_memory_store() -> None:
    """Очищает все in-memory данные."""
    _users.clear()
    _orders.clear()
    _year_counters.clear()


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


# ═══════════════════════════════════════════════════════════════════════════════
# counter_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def increment_year_counter(year: int) -> int:
    _year_counters[year] = _year_counters.get(year, 0) + 1
    return _year_counters[year]


async def get_year_counter(year: int) -> int:
    return _year_counters.get(year, 0)


# ═══════════════════════════════════════════════════════════════════════════════
# user_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def create_user(
    email: str,
    password_hash: str,
    full_name: str,
    phone: str | None = None,
    role: str = "client",
) -> dict:
    """Создаёт нового пользователя в памяти."""
    email = email.lower()
    if await get_user_by_email(email):
        raise ConflictError(
            f"User with email '{email}' already exists", details={"field": "email"}
        )
    uid = uuid4()
    now = _now()
    user = {
        "user_id": uid, "email": email, "password_hash": password_hash,
        "full_name": full_name, "phone": phone, "role": role,
        "created_at": now, "updated_at": now,
    }
    _users[uid] = user
    logger.info("Memory store: created user %s <%s>", full_name, email)
    return dict(user)


async def get_user_by_id(user_id: UUID) -> dict | None:
    user = _users.get(user_id)
    return dict(user) if user else None


async def get_user_by_email(email: str) -> dict | None:
    for u in _users.values():
        if u["email"] == email.lower():
            return dict(u)
    return None


async def get_users_by_ids(user_ids: list[UUID]) -> dict[UUID, dict]:
    return {uid: dict(_users[uid]) for uid in user_ids if uid in _users}


async def list_users(role: str | None = None, search: str | None = None) -> list[dict]:
    result = [
        dict(u) for u in _users.values()
        if (role is None or u["role"] == role)
        and (search is None or _contains(u["full_name"], search) or _contains(u["email"], search))
    ]
    result.sort(key=lambda u: u["created_at"], reverse=True)
    return result


async def update_user(user_id: UUID, changes: dict) -> dict | None:
    user = _users.get(user_id)
    if user is None:
        return None
    for key in ("full_name", "phone", "role", "password_hash"):
        if key in changes:
            user[key] = changes[key]
    user["updated_at"] = _now()
    return dict(user)


# ═══════════════════════════════════════════════════════════════════════════════
# order_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

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
    """Создаёт заказ в памяти."""
    if any(o["order_number"] == order_number for o in _orders.values()):
        raise ConflictError(
            f"Order number '{order_number}' already exists",
            details={"field": "order_number"},
        )
    oid = uuid4()
    now = _now()
    order = {
        "order_id": oid, "order_number": order_number, "client_id": client_id,
        "assigned_to": assigned_to, "status": status, "description": description,
        "product_type": product_type, "price": price, "price_range": price_range,
        "price_min": price_min, "price_max": price_max, "deadline": deadline,
        "photos": list(photos or []), "attachments": list(attachments or []),
        "created_at": now, "updated_at": now,
    }
    _orders[oid] = order
    logger.info("Memory store: created order %s", order_number)
    return dict(order)


async def get_order_by_id(order_id: UUID) -> dict | None:
    order = _orders.get(order_id)
    return dict(order) if order else None


async def update_order(order_id: UUID, changes: dict) -> dict | None:
    order = _orders.get(order_id)
    if order is None:
        return None
    for key, value in changes.items():
        if key in order and key not in ("order_id", "order_number", "client_id", "created_at"):
            order[key] = value
    order["updated_at"] = _now()
    return dict(order)


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
    def _matches(o: dict) -> bool:
        if client_id is not None and o["client_id"] != client_id:
            return False
        if assigned_to is not None and o["assigned_to"] != assigned_to:
            return False
        if status is not None and o["status"] != status:
            return False
        if statuses is not None and o["status"] not in statuses:
            return False
        if created_from is not None and o["created_at"] < created_from:
            return False
        if created_to is not None and o["created_at"] > created_to:
            return False
        if search:
            client = _users.get(o["client_id"]) or {}
            master = _users.get(o["assigned_to"]) or {}
            if not (
                _contains(o["order_number"], search)
                or _contains(client.get("full_name"), search)
                or _contains(master.get("full_name"), search)
            ):
                return False
        return True

    matched = sorted(
        (dict(o) for o in _orders.values() if _matches(o)),
        key=lambda o: o["created_at"],
        reverse=True,
    )
    end = None if limit is None else offset + limit
    return matched[offset:end], len(matched)


# ═══════════════════════════════════════════════════════════════════════════════
# Активация in-memory хранилища (monkey-patching)
# ═══════════════════════════════════════════════════════════════════════════════

def activate_memory_store() -> None:
    """
    Подменяет функции в workshop.db.repositories.* на in-memory реализации.

    Вызывается из workshop.main → lifespan() при недоступности БД.
    """
    from workshop.db.repositories import counter_repo, order_repo, user_repo

    # ── counter_repo ──
    counter_repo.increment_year_counter = increment_year_counter
    counter_repo.get_year_counter = get_year_counter

    # ── user_repo ──
    user_repo.create_user = create_user
    user_repo.get_user_by_id = get_user_by_id
    user_repo.get_user_by_email = get_user_by_email
    user_repo.get_users_by_ids = get_users_by_ids
    user_repo.list_users = list_users
    user_repo.update_user = update_user

    # ── order_repo ──
    order_repo.create_order = create_order
    order_repo.get_order_by_id = get_order_by_id
    order_repo.update_order = update_order
    order_repo.list_orders = list_orders

    logger.warning(
        "🧠 Workshop memory store ACTIVATED: all data is in-memory (lost on restart)."
    )
