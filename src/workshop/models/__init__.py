"""
workshop.models — Модели данных сервиса заказов.

Реэкспорт основных классов для удобства:
    from workshop.models import OrderRead, UserRead
"""

from workshop.models.enums import AttachmentKind, OrderStatus, UserRole  # noqa: F401
from workshop.models.user import (  # noqa: F401
    PasswordChange,
    ProfileUpdate,
    RoleUpdate,
    UserCreate,
    UserRead,
    UserSummary,
)
from workshop.models.order import (  # noqa: F401
    Attachment,
    OrderCreate,
    OrderFilter,
    OrderPage,
    OrderRead,
    OrderUpdate,
    Photo,
    PhotoUpload,
    ProductType,
)
