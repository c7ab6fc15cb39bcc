"""
workshop/models/user.py — Доменные модели пользователя.

Пароль никогда не попадает в модели чтения: хеш живёт только
в строке репозитория (``password_hash``).
"""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import Field, field_validator

from workshop.models.common import WorkshopBase
from workshop.models.enums import UserRole

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PHONE_PATTERN = r"^[\+]?[0-9\-\(\)\s]+$"


class UserCreate(WorkshopBase):
    """Схема для регистрации нового клиента."""
    full_name: str = Field(..., min_length=1, max_length=100, examples=["Иванов Иван Иванович"])
    email: str = Field(..., pattern=EMAIL_PATTERN, examples=["client@example.com"])
    password: str = Field(..., min_length=6, max_length=128)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN, examples=["+375 29 123-45-67"])

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class UserRead(WorkshopBase):
    """Схема для возврата данных пользователя (без пароля)."""
    user_id: UUID = Field(default_factory=uuid4)
    email: str
    full_name: str
    phone: str | None = None
    role: UserRole = UserRole.CLIENT
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserSummary(WorkshopBase):
    """Краткие данные пользователя, встраиваемые в заказ (client / assigned_to)."""
    user_id: UUID
    full_name: str
    email: str
    phone: str | None = None


class ProfileUpdate(WorkshopBase):
    """Изменение собственного профиля."""
    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)


class PasswordChange(WorkshopBase):
    """Смена пароля владельцем с подтверждением текущего."""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class RoleUpdate(WorkshopBase):
    role: UserRole
