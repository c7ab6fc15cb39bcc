"""
workshop/services/auth_service.py — Сервис аутентификации.

Регистрация клиентов, вход по email + пароль, выпуск и проверка
JWT access-токенов. Токен несёт ``{sub, email, role, full_name}``;
политика доступа использует из него только id и роль.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
from jose import JWTError, jwt

from workshop.config import get_settings
from workshop.db.repositories import user_repo
from workshop.exceptions import AuthenticationError
from workshop.models.enums import UserRole
from workshop.models.user import UserCreate, UserRead

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# РАБОТА С ПАРОЛЯМИ
# ═══════════════════════════════════════════════════════════════════════════


def hash_password(password: str) -> str:
    """Хеширует пароль с помощью bcrypt (cost 12)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Сравнивает открытый пароль с хешем из БД."""
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


# ═══════════════════════════════════════════════════════════════════════════
# JWT-ТОКЕНЫ
# ═══════════════════════════════════════════════════════════════════════════


def create_access_token(
    user_id: UUID,
    email: str,
    role: str,
    full_name: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Создаёт подписанный JWT access-токен."""
    settings = get_settings()
    exp = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": UserRole(role).value,
        "full_name": full_name,
        "exp": exp,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Декодирует и проверяет JWT-токен."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise AuthenticationError(f"Invalid token: {exc}") from exc


def user_row_to_read(row: dict) -> UserRead:
    """Конвертирует строку из БД (dict) → UserRead, без хеша пароля."""
    return UserRead(
        user_id=row["user_id"],
        email=row["email"],
        full_name=row["full_name"],
        phone=row.get("phone"),
        role=row.get("role", UserRole.CLIENT.value),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _token_response(user: UserRead) -> dict:
    token = create_access_token(user.user_id, user.email, user.role, user.full_name)
    return {"access_token": token, "token_type": "bearer", "user": user}


# ═══════════════════════════════════════════════════════════════════════════
# РЕГИСТРАЦИЯ И ВХОД
# ═══════════════════════════════════════════════════════════════════════════


async def register_user(data: UserCreate) -> dict:
    """Регистрирует нового клиента и сразу выдаёт токен."""
    row = await user_repo.create_user(
        email=data.email,
        password_hash=hash_password(data.password),
        full_name=data.full_name,
        phone=data.phone or None,
        role=UserRole.CLIENT.value,
    )
    user = user_row_to_read(row)
    logger.info("New user registered: %s (%s)", user.email, user.role.value)

    try:
        from workshop.events import emit_user_registered
        await emit_user_registered(user_id=str(user.user_id), email=user.email)
    except Exception as exc:
        logger.warning("Failed to emit user.registered event: %s", exc)

    return _token_response(user)


async def authenticate(email: str, password: str) -> dict:
    """Аутентифицирует пользователя (email + пароль) → JWT-токен."""
    row = await user_repo.get_user_by_email(email.strip().lower())
    if not row or not verify_password(password, row["password_hash"]):
        raise AuthenticationError("Invalid email or password")

    user = user_row_to_read(row)
    logger.info("User logged in: %s (%s)", user.email, user.role.value)
    return _token_response(user)
