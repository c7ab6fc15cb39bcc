"""
workshop/models/order.py — Доменные модели заказа.

Входные схемы (OrderCreate, OrderUpdate) типизированы мягко: значения
статуса, цены и срока проверяет ``services.lifecycle``, чтобы любые
нарушения возвращались как доменная ValidationError.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from workshop.models.common import WorkshopBase
from workshop.models.enums import AttachmentKind, OrderStatus
from workshop.models.user import UserSummary


class ProductType(WorkshopBase):
    """Позиция каталога: тип изделия и ориентировочная цена."""
    key: str
    range_label: str
    min: float
    max: float


class PhotoUpload(WorkshopBase):
    """Файл, уже записанный в файловое хранилище, но ещё не ставший фото заказа."""
    filename: str
    original_name: str
    mimetype: str
    size: int = Field(..., ge=0)
    path: str
    alt: str | None = None


class Photo(WorkshopBase):
    """Фотография заказа."""
    filename: str
    original_name: str
    mimetype: str
    size: int
    path: str
    url: str
    uploaded_at: datetime
    alt: str | None = None


class Attachment(WorkshopBase):
    """Прочие файлы заказа (документы и т.п.)."""
    filename: str
    original_name: str
    mimetype: str
    size: int
    path: str
    kind: AttachmentKind = AttachmentKind.OTHER
    uploaded_at: datetime


class OrderCreate(WorkshopBase):
    """
    Данные для создания заказа.

    ``client_id`` учитывается только для персонала: клиент всегда
    оформляет заказ на себя.
    """
    client_id: UUID | None = None
    description: str | None = None
    product_type: str | None = None
    price: float | None = None
    deadline: str | None = Field(default=None, examples=["2025-12-31"])


class OrderUpdate(WorkshopBase):
    """
    Частичное обновление заказа.

    Меняются только явно переданные поля; ``null`` очищает
    price / deadline / assigned_to.
    """
    status: str | None = None
    description: str | None = None
    product_type: str | None = None
    price: float | None = None
    deadline: str | None = None
    assigned_to: UUID | None = None


class OrderFilter(WorkshopBase):
    """Фильтры списка заказов для персонала."""
    status: OrderStatus | None = None
    search: str | None = None
    client_id: UUID | None = None
    assigned_to: UUID | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=200)


class OrderRead(WorkshopBase):
    """Заказ в том виде, в каком его видит вызывающая сторона."""
    order_id: UUID
    order_number: str
    client: UserSummary | None = None
    assigned_to: UserSummary | None = None
    status: OrderStatus
    description: str | None = None
    product_type: str | None = None
    price: float | None = None
    price_range: str | None = None
    price_min: float | None = None
    price_max: float | None = None
    deadline: datetime | None = None
    formatted_deadline: str | None = None
    days_until_deadline: int | None = None
    is_overdue: bool = False
    photo_count: int = 0
    photos: list[Photo] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderPage(WorkshopBase):
    """Страница списка заказов."""
    items: list[OrderRead]
    total: int
    page: int
    limit: int
