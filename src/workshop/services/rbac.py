"""
workshop/services/rbac.py — Политика доступа к заказам и пользователям.

Чистые функции без I/O: (роль и id действующего лица, заказ, действие)
→ разрешено / запрещено. ``ensure_*``-варианты поднимают
AuthorizationError, но не NotFoundError: существование заказа
уже установлено вызывающей стороной.

Роль ``manager`` во всех проверках равна ``admin``. Единственное
исключение: понижение администратора, это может сделать только admin.

Действующее лицо: любой объект с атрибутами ``user_id`` и ``role``
(например, UserRead). Заказ: строка репозитория с ключами
``client_id`` и ``assigned_to``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import Depends

from workshop.exceptions import AuthorizationError
from workshop.models.enums import UserRole

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Роли
# ═══════════════════════════════════════════════════════════════════════════════

STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.MANAGER})

# Поля заказа, доступные для обновления; assigned_to требует права назначать мастера.
ORDER_UPDATE_FIELDS = frozenset({
    "status", "price", "deadline", "description", "product_type", "assigned_to",
})


def effective_role(role: Any) -> UserRole:
    """Приводит роль к канонической: MANAGER → ADMIN."""
    role = UserRole(role)
    return UserRole.ADMIN if role in STAFF_ROLES else role


def is_staff(actor) -> bool:
    return effective_role(actor.role) is UserRole.ADMIN


def _is_client_of(actor, order: Mapping[str, Any]) -> bool:
    return order.get("client_id") == actor.user_id


def _is_master_of(actor, order: Mapping[str, Any]) -> bool:
    return order.get("assigned_to") is not None and order.get("assigned_to") == actor.user_id


# ═══════════════════════════════════════════════════════════════════════════════
# Решения
# ═══════════════════════════════════════════════════════════════════════════════

def can_create_order(actor, client_id=None) -> bool:
    """Клиент создаёт заказ только на себя, персонал на любого клиента, мастер не создаёт."""
    role = effective_role(actor.role)
    if role is UserRole.ADMIN:
        return True
    if role is UserRole.CLIENT:
        return client_id is None or client_id == actor.user_id
    return False


def can_read_order(actor, order: Mapping[str, Any]) -> bool:
    role = effective_role(actor.role)
    if role is UserRole.ADMIN:
        return True
    if role is UserRole.CLIENT:
        return _is_client_of(actor, order)
    return _is_master_of(actor, order)


def order_list_scope(actor) -> dict[str, Any]:
    """Фильтр, ограничивающий список заказов тем, что лицу положено видеть."""
    role = effective_role(actor.role)
    if role is UserRole.CLIENT:
        return {"client_id": actor.user_id}
    if role is UserRole.MASTER:
        return {"assigned_to": actor.user_id}
    return {}


def can_assign_master(actor) -> bool:
    return is_staff(actor)


def can_update_order(actor, order: Mapping[str, Any], fields=()) -> bool:
    """
    Мастер меняет только назначенные ему заказы и не переназначает их;
    персонал меняет любые поля любого заказа, клиент не меняет ничего.
    """
    role = effective_role(actor.role)
    if role is UserRole.ADMIN:
        return True
    if role is not UserRole.MASTER or not _is_master_of(actor, order):
        return False
    return "assigned_to" not in fields or can_assign_master(actor)


def can_manage_photos(actor, order: Mapping[str, Any]) -> bool:
    role = effective_role(actor.role)
    if role is UserRole.ADMIN:
        return True
    return role is UserRole.CLIENT and _is_client_of(actor, order)


def can_change_role(actor, target_role: Any, new_role: Any) -> bool:
    """Персонал меняет роли; понизить администратора может только admin."""
    if not is_staff(actor):
        return False
    demotes_admin = (
        UserRole(target_role) is UserRole.ADMIN and UserRole(new_role) is not UserRole.ADMIN
    )
    return not demotes_admin or UserRole(actor.role) is UserRole.ADMIN


# ═══════════════════════════════════════════════════════════════════════════════
# ensure_*: те же решения, отказ поднимает AuthorizationError
# ═══════════════════════════════════════════════════════════════════════════════

def _deny(actor, action: str, message: str) -> None:
    logger.warning(
        "RBAC: user %s (%s) denied %s",
        getattr(actor, "user_id", "?"), getattr(actor, "role", "?"), action,
    )
    raise AuthorizationError(message)


def ensure_can_create_order(actor, client_id=None) -> None:
    if not can_create_order(actor, client_id):
        _deny(actor, "order.create", "You are not allowed to create this order")


def ensure_can_read_order(actor, order: Mapping[str, Any]) -> None:
    if not can_read_order(actor, order):
        _deny(actor, "order.read", "Access denied to this order")


def ensure_can_update_order(actor, order: Mapping[str, Any], fields=()) -> None:
    if not can_update_order(actor, order, fields):
        _deny(actor, "order.update", "You are not allowed to update this order")


def ensure_can_manage_photos(actor, order: Mapping[str, Any]) -> None:
    if not can_manage_photos(actor, order):
        _deny(actor, "order.photos", "You are not allowed to change photos of this order")


def ensure_can_change_role(actor, target_role: Any, new_role: Any) -> None:
    if not can_change_role(actor, target_role, new_role):
        _deny(actor, "user.role", "You are not allowed to change this user's role")


def ensure_staff(actor) -> None:
    if not is_staff(actor):
        _deny(actor, "staff", "Admin or manager role required")


# ═══════════════════════════════════════════════════════════════════════════════
# FastAPI dependency
# ═══════════════════════════════════════════════════════════════════════════════

def require_staff():
    """FastAPI dependency: требует роль admin/manager и возвращает пользователя."""
    from workshop.dependencies import get_current_user

    async def _check(user=Depends(get_current_user)):
        ensure_staff(user)
        return user
    return _check
