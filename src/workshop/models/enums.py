"""
workshop/models/enums.py — Перечисления домена мастерской.

Содержит enum'ы:
    • UserRole — роль пользователя
    • OrderStatus — статус заказа
    • AttachmentKind — тип вложения (не фото)
"""

from enum import Enum


class UserRole(str, Enum):
    """Роль пользователя. MANAGER приравнивается к ADMIN (см. services.rbac)."""
    ADMIN = "admin"
    MANAGER = "manager"
    CLIENT = "client"
    MASTER = "master"


class OrderStatus(str, Enum):
    """Статус заказа. Начальный статус NEW."""
    NEW = "new"
    CLARIFICATION = "clarification"
    IN_PROGRESS = "in_progress"
    AWAITING_PAYMENT = "awaiting_payment"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class AttachmentKind(str, Enum):
    """Тип вложения заказа."""
    PHOTO = "photo"
    DOCUMENT = "document"
    OTHER = "other"
