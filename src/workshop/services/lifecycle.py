"""
workshop/services/lifecycle.py — Жизненный цикл заказа (чистые функции).

Здесь живут правила сущности «Заказ», не требующие I/O:
    • проверка и нормализация полей (статус, цена, срок, описание);
    • пересчёт расчётной цены из каталога при смене типа изделия;
    • вопросы к жизненному циклу: просрочен ли заказ, сколько дней до срока;
    • операции над списком фотографий.

Статусы не образуют граф переходов: любое значение из перечисления
допустимо для любого, кому разрешено менять заказ.

Функции принимают заказ как строку репозитория (dict).
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from workshop.exceptions import ValidationError
from workshop.models.enums import OrderStatus
from workshop.models.order import OrderCreate, PhotoUpload
from workshop.services import catalog

MAX_DESCRIPTION_LENGTH = 1000
PHOTO_URL_PREFIX = "/uploads/orders/photos/"

TERMINAL_STATUSES = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
})

_SECONDS_PER_DAY = 24 * 60 * 60


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════
# ПРОВЕРКА ПОЛЕЙ
# ═══════════════════════════════════════════════════════════════════════════


def parse_status(value: Any) -> OrderStatus:
    """Статус из перечисления; всё прочее (включая ``None``) отклоняется."""
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(
            f"Status must be one of: {allowed}",
            details={"field": "status", "value": value},
        ) from None


def parse_price(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Price must be a number: {value!r}", details={"field": "price"}
        ) from None
    if not math.isfinite(price) or price < 0:
        raise ValidationError(
            "Price must be a finite non-negative number", details={"field": "price"}
        )
    return price


def parse_deadline(value: Any) -> datetime | None:
    """
    Срок выполнения: ``date``, ``datetime`` или ISO-строка.

    Дата без времени означает полночь UTC этого дня. Наивный datetime
    трактуется как UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(
                f"Deadline is not a valid date: {value!r}",
                details={"field": "deadline"},
            ) from None
    else:
        raise ValidationError(
            f"Deadline is not a valid date: {value!r}", details={"field": "deadline"}
        )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_description(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if len(text) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description cannot be more than {MAX_DESCRIPTION_LENGTH} characters",
            details={"field": "description", "length": len(text)},
        )
    return text


def price_fields(product_type: str | None) -> dict[str, Any]:
    """Расчётные поля цены для типа изделия; неизвестный тип их очищает."""
    info = catalog.lookup(product_type)
    if info is None:
        return {"price_range": None, "price_min": None, "price_max": None}
    return {"price_range": info.range_label, "price_min": info.min, "price_max": info.max}


# ═══════════════════════════════════════════════════════════════════════════
# СОЗДАНИЕ И ИЗМЕНЕНИЕ
# ═══════════════════════════════════════════════════════════════════════════


def new_order_fields(data: OrderCreate) -> dict[str, Any]:
    """Поля нового заказа (без номера и клиента) после проверки."""
    product_type = data.product_type or None
    fields = {
        "status": OrderStatus.NEW.value,
        "description": parse_description(data.description),
        "product_type": product_type,
        "price": parse_price(data.price),
        "deadline": parse_deadline(data.deadline),
    }
    if product_type:
        fields.update(price_fields(product_type))
    return fields


def normalize_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """
    Проверяет частичное обновление и возвращает изменения колонок.

    Смена ``product_type`` явно пересчитывает price_range / price_min /
    price_max. ``assigned_to`` проходит как есть: его проверяет сервис.
    """
    changes: dict[str, Any] = {}
    if "status" in patch:
        changes["status"] = parse_status(patch["status"]).value
    if "description" in patch:
        changes["description"] = parse_description(patch["description"])
    if "price" in patch:
        changes["price"] = parse_price(patch["price"])
    if "deadline" in patch:
        changes["deadline"] = parse_deadline(patch["deadline"])
    if "assigned_to" in patch:
        changes["assigned_to"] = patch["assigned_to"]
    if "product_type" in patch:
        product_type = patch["product_type"] or None
        changes["product_type"] = product_type
        changes.update(price_fields(product_type))
    return changes


# ═══════════════════════════════════════════════════════════════════════════
# ВОПРОСЫ К ЖИЗНЕННОМУ ЦИКЛУ
# ═══════════════════════════════════════════════════════════════════════════


def is_terminal(status: Any) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def is_overdue(order: Mapping[str, Any], now: datetime | None = None) -> bool:
    """Срок задан и прошёл, а заказ не в финальном статусе."""
    deadline = order.get("deadline")
    if deadline is None or is_terminal(order["status"]):
        return False
    return parse_deadline(deadline) < (now or _now())


def days_until_deadline(order: Mapping[str, Any], now: datetime | None = None) -> int | None:
    """Дней до срока (с округлением вверх); отрицательно для просроченных."""
    deadline = order.get("deadline")
    if deadline is None:
        return None
    delta = parse_deadline(deadline) - (now or _now())
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


def formatted_deadline(order: Mapping[str, Any]) -> str | None:
    deadline = order.get("deadline")
    if deadline is None:
        return None
    return parse_deadline(deadline).strftime("%d.%m.%Y")


# ═══════════════════════════════════════════════════════════════════════════
# ФОТОГРАФИИ
# ═══════════════════════════════════════════════════════════════════════════


def photo_url(filename: str) -> str:
    return f"{PHOTO_URL_PREFIX}{filename}"


def append_photos(
    photos: Iterable[Mapping[str, Any]],
    uploads: Iterable[PhotoUpload],
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Новый список фото: прежние + загруженные, каждой выдан URL."""
    uploaded_at = now or _now()
    result = [dict(p) for p in photos]
    for upload in uploads:
        photo = upload.model_dump()
        photo["url"] = photo_url(upload.filename)
        photo["uploaded_at"] = uploaded_at
        result.append(photo)
    return result


def without_photo(
    photos: Iterable[Mapping[str, Any]], filename: str
) -> tuple[list[dict[str, Any]], dict[str, Any] | None]:
    """Убирает первое фото с таким именем файла; возвращает (список, удалённое)."""
    result: list[dict[str, Any]] = []
    removed: dict[str, Any] | None = None
    for photo in photos:
        if removed is None and photo.get("filename") == filename:
            removed = dict(photo)
            continue
        result.append(dict(photo))
    return result, removed
