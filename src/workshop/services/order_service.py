"""
workshop/services/order_service.py — Сервис заказов.

Операции над заказами с проверкой прав:
    • создание (фото → каталог → номер → запись);
    • чтение и списки в пределах роли;
    • частичное обновление полей;
    • добавление и удаление фотографий.

Правила самой сущности (валидация, расчётная цена, просрочка) живут
в ``services.lifecycle``, решения о доступе в ``services.rbac``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence
from uuid import UUID

from fastapi import UploadFile

from workshop.db.repositories import order_repo, user_repo
from workshop.exceptions import NotFoundError, StorageError, ValidationError, WorkshopError
from workshop.models.enums import UserRole
from workshop.models.order import (
    OrderCreate,
    OrderFilter,
    OrderPage,
    OrderRead,
    PhotoUpload,
)
from workshop.models.user import UserSummary
from workshop.services import file_store, lifecycle, numbering, rbac
from workshop.services.photo_validator import ensure_batch_size, validate_photos

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# МАППИНГ БД-СТРОКИ → Pydantic-МОДЕЛЬ
# ═══════════════════════════════════════════════════════════════════════════


def _summary(user: Mapping[str, Any] | None) -> UserSummary | None:
    if not user:
        return None
    return UserSummary(
        user_id=user["user_id"],
        full_name=user["full_name"],
        email=user["email"],
        phone=user.get("phone"),
    )


def order_row_to_read(
    row: Mapping[str, Any],
    users: Mapping[UUID, Mapping[str, Any]] | None = None,
    now: datetime | None = None,
) -> OrderRead:
    """Конвертирует строку заказа + связанных пользователей → OrderRead."""
    users = users or {}
    photos = row.get("photos") or []
    return OrderRead(
        order_id=row["order_id"],
        order_number=row["order_number"],
        client=_summary(users.get(row["client_id"])),
        assigned_to=_summary(users.get(row.get("assigned_to"))),
        status=row["status"],
        description=row.get("description"),
        product_type=row.get("product_type"),
        price=row.get("price"),
        price_range=row.get("price_range"),
        price_min=row.get("price_min"),
        price_max=row.get("price_max"),
        deadline=row.get("deadline"),
        formatted_deadline=lifecycle.formatted_deadline(row),
        days_until_deadline=lifecycle.days_until_deadline(row, now),
        is_overdue=lifecycle.is_overdue(row, now),
        photo_count=len(photos),
        photos=photos,
        attachments=row.get("attachments") or [],
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


async def _populate(rows: Sequence[Mapping[str, Any]]) -> list[OrderRead]:
    """Подтягивает клиента и мастера для каждой строки одним запросом."""
    ids = {r["client_id"] for r in rows} | {r["assigned_to"] for r in rows if r.get("assigned_to")}
    users = await user_repo.get_users_by_ids(list(ids))
    return [order_row_to_read(r, users) for r in rows]


async def _load(order_id: UUID) -> dict:
    row = await order_repo.get_order_by_id(order_id)
    if not row:
        raise NotFoundError("Order", str(order_id))
    return row


async def _save(order_id: UUID, changes: dict) -> dict:
    row = await order_repo.update_order(order_id, changes)
    if not row:
        raise NotFoundError("Order", str(order_id))
    return row


# ═══════════════════════════════════════════════════════════════════════════
# СОЗДАНИЕ
# ═══════════════════════════════════════════════════════════════════════════


async def _resolve_client(actor, client_id: UUID | None) -> UUID:
    """Клиент заказа: сам клиент либо указанный персоналом пользователь с ролью client."""
    rbac.ensure_can_create_order(actor, client_id)
    if not rbac.is_staff(actor):
        return actor.user_id
    if client_id is None:
        raise ValidationError("Client is required", details={"field": "client_id"})
    client = await user_repo.get_user_by_id(client_id)
    if not client or client["role"] != UserRole.CLIENT.value:
        raise NotFoundError("Client", str(client_id))
    return client_id


async def create_order(
    actor,
    data: OrderCreate,
    photos: Sequence[PhotoUpload] = (),
) -> OrderRead:
    """
    Создаёт заказ.

    Порядок шагов: права → проверка фото → поля и расчётная цена →
    номер заказа → запись. Номер, выданный до неудачной записи,
    не возвращается в оборот.
    """
    client_id = await _resolve_client(actor, data.client_id)
    validate_photos(photos)
    fields = lifecycle.new_order_fields(data)

    year = datetime.now(timezone.utc).year
    order_number = await numbering.next_order_number(year)

    try:
        row = await order_repo.create_order(
            order_number=order_number,
            client_id=client_id,
            photos=lifecycle.append_photos([], photos),
            **fields,
        )
    except WorkshopError:
        raise
    except Exception as exc:
        logger.error("Order %s could not be stored: %s", order_number, exc)
        raise StorageError(
            "Could not store the order", details={"order_number": order_number}
        ) from exc

    logger.info(
        "Order %s created for client %s by %s (%d photos)",
        order_number, client_id, actor.user_id, len(photos),
    )
    try:
        from workshop.events import emit_order_created
        await emit_order_created(
            order_id=str(row["order_id"]),
            order_number=order_number,
            client_id=str(client_id),
        )
    except Exception as exc:
        logger.warning("Failed to emit order.created event: %s", exc)

    return (await _populate([row]))[0]


async def create_order_with_uploads(
    actor,
    data: OrderCreate,
    uploads: Iterable[UploadFile] = (),
) -> OrderRead:
    """Записывает загруженные файлы и создаёт заказ; при любой ошибке файлы удаляются."""
    rbac.ensure_can_create_order(actor, data.client_id)
    uploads = list(uploads)
    ensure_batch_size(len(uploads))
    stored: list[PhotoUpload] = []
    try:
        for upload in uploads:
            stored.append(await file_store.save_photo(upload))
        return await create_order(actor, data, stored)
    except Exception:
        await file_store.delete_files([p.path for p in stored])
        raise


# ═══════════════════════════════════════════════════════════════════════════
# ЧТЕНИЕ
# ═══════════════════════════════════════════════════════════════════════════


async def get_order(actor, order_id: UUID) -> OrderRead:
    """Заказ по id: 404, если его нет; 403, если он чужой."""
    row = await _load(order_id)
    rbac.ensure_can_read_order(actor, row)
    return (await _populate([row]))[0]


async def list_orders(actor, filters: OrderFilter | None = None) -> OrderPage:
    """Список заказов в пределах роли; фильтры персонала сужают выборку."""
    filters = filters or OrderFilter()
    query: dict[str, Any] = {
        "client_id": filters.client_id,
        "assigned_to": filters.assigned_to,
        "status": filters.status.value if filters.status else None,
        "search": filters.search or None,
    }
    query.update(rbac.order_list_scope(actor))

    rows, total = await order_repo.list_orders(
        **query,
        offset=(filters.page - 1) * filters.limit,
        limit=filters.limit,
    )
    return OrderPage(
        items=await _populate(rows),
        total=total,
        page=filters.page,
        limit=filters.limit,
    )


# ═══════════════════════════════════════════════════════════════════════════
# ОБНОВЛЕНИЕ
# ═══════════════════════════════════════════════════════════════════════════


async def update_order(actor, order_id: UUID, patch: Mapping[str, Any]) -> OrderRead:
    """
    Частичное обновление: меняются только переданные поля.

    Raises:
        NotFoundError: нет заказа или назначаемого мастера.
        AuthorizationError: лицо не вправе менять этот заказ или мастера.
        ValidationError: недопустимый статус, цена или срок.
    """
    row = await _load(order_id)
    patch = {k: v for k, v in patch.items() if k in rbac.ORDER_UPDATE_FIELDS}
    if "assigned_to" in patch and patch["assigned_to"] == row.get("assigned_to"):
        patch.pop("assigned_to")

    rbac.ensure_can_update_order(actor, row, patch.keys())
    changes = lifecycle.normalize_patch(patch)

    master_id = changes.get("assigned_to")
    if master_id is not None:
        master = await user_repo.get_user_by_id(master_id)
        if not master or master["role"] != UserRole.MASTER.value:
            raise NotFoundError("Master", str(master_id))

    if not changes:
        return (await _populate([row]))[0]

    updated = await _save(order_id, changes)
    logger.info(
        "Order %s updated by %s: %s",
        row["order_number"], actor.user_id, sorted(changes),
    )
    try:
        from workshop.events import emit_order_updated
        await emit_order_updated(
            order_id=str(order_id),
            order_number=row["order_number"],
            fields=sorted(changes),
        )
    except Exception as exc:
        logger.warning("Failed to emit order.updated event: %s", exc)

    return (await _populate([updated]))[0]


# ═══════════════════════════════════════════════════════════════════════════
# ФОТОГРАФИИ
# ═══════════════════════════════════════════════════════════════════════════


async def add_photos(actor, order_id: UUID, photos: Sequence[PhotoUpload]) -> OrderRead:
    """Проверяет и добавляет фото в конец списка заказа."""
    row = await _load(order_id)
    rbac.ensure_can_manage_photos(actor, row)
    validate_photos(photos)

    updated = await _save(
        order_id, {"photos": lifecycle.append_photos(row.get("photos") or [], photos)}
    )
    logger.info("Added %d photos to order %s", len(photos), row["order_number"])
    return (await _populate([updated]))[0]


async def add_photo_uploads(actor, order_id: UUID, uploads: Iterable[UploadFile]) -> OrderRead:
    """Записывает файлы и добавляет их как фото; при ошибке файлы удаляются."""
    rbac.ensure_can_manage_photos(actor, await _load(order_id))
    uploads = list(uploads)
    ensure_batch_size(len(uploads))
    stored: list[PhotoUpload] = []
    try:
        for upload in uploads:
            stored.append(await file_store.save_photo(upload))
        return await add_photos(actor, order_id, stored)
    except Exception:
        await file_store.delete_files([p.path for p in stored])
        raise


async def remove_photo(actor, order_id: UUID, filename: str) -> OrderRead:
    """Удаляет фото по имени файла; отсутствующее фото не считается ошибкой."""
    row = await _load(order_id)
    rbac.ensure_can_manage_photos(actor, row)

    photos, removed = lifecycle.without_photo(row.get("photos") or [], filename)
    if removed is None:
        return (await _populate([row]))[0]

    updated = await _save(order_id, {"photos": photos})
    logger.info("Removed photo %s from order %s", filename, row["order_number"])
    if removed.get("path"):
        await file_store.delete_file(removed["path"])
    return (await _populate([updated]))[0]
