"""
workshop/events.py — NATS Event Publisher.

Публикует доменные события сервиса заказов в NATS:
    • ``workshop.user.registered``  — новый клиент зарегистрирован
    • ``workshop.order.created``    — создан заказ
    • ``workshop.order.updated``    — заказ изменён (статус, мастер, цена …)

Graceful degradation: если NATS выключен или недоступен, событие
пропускается с записью в лог (не ломает основной бизнес-процесс).
"""

from __future__ import annotations

import json
import logging
from typing import Any

import nats
from nats.aio.client import Client as NATSClient

from workshop.config import get_settings

logger = logging.getLogger(__name__)

# ── Singleton NATS connection ─────────────────────────────────────────────

_nc: NATSClient | None = None


async def connect() -> NATSClient | None:
    """Подключается к NATS (если включён и ещё не подключён)."""
    global _nc
    settings = get_settings()
    if not settings.nats_enabled:
        return None
    if _nc is not None and _nc.is_connected:
        return _nc
    try:
        _nc = await nats.connect(settings.nats_url, allow_reconnect=False)
        logger.info("NATS publisher connected: %s", settings.nats_url)
        return _nc
    except Exception as exc:
        logger.warning("NATS connect failed (events will be skipped): %s", exc)
        _nc = None
        return None


async def disconnect() -> None:
    """Закрывает соединение с NATS."""
    global _nc
    if _nc and _nc.is_connected:
        await _nc.drain()
        logger.info("NATS publisher disconnected")
    _nc = None


# ── Публикация событий ───────────────────────────────────────────────────

async def publish(subject: str, data: dict[str, Any]) -> None:
    """
    Публикует JSON-событие в NATS.

    Args:
        subject: Тема сообщения (e.g. ``workshop.order.created``).
        data: Payload (сериализуется в JSON).
    """
    nc = await connect()
    if nc is None:
        logger.debug("NATS unavailable, skipping event %s", subject)
        return
    try:
        payload = json.dumps(data, default=str).encode("utf-8")
        await nc.publish(subject, payload)
        logger.info("NATS event published: %s", subject)
    except Exception as exc:
        logger.warning("NATS publish failed for %s: %s", subject, exc)


# ── Удобные функции для домена заказов ──────────────────────────────────

async def emit_user_registered(user_id: str, email: str) -> None:
    """Событие: новый клиент зарегистрирован."""
    await publish("workshop.user.registered", {
        "event": "user.registered",
        "user_id": user_id,
        "email": email,
    })


async def emit_order_created(order_id: str, order_number: str, client_id: str) -> None:
    """Событие: заказ создан."""
    await publish("workshop.order.created", {
        "event": "order.created",
        "order_id": order_id,
        "order_number": order_number,
        "client_id": client_id,
    })


async def emit_order_updated(order_id: str, order_number: str, fields: list[str]) -> None:
    """Событие: заказ изменён."""
    await publish("workshop.order.updated", {
        "event": "order.updated",
        "order_id": order_id,
        "order_number": order_number,
        "fields": fields,
    })
