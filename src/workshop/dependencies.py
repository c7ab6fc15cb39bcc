"""
═══════════════════════════════════════════════════════════════════════════════
Workshop — Зависимости FastAPI (Dependency Injection)
═══════════════════════════════════════════════════════════════════════════════

``get_current_user()``: проверка bearer-токена и загрузка пользователя.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import Header, HTTPException, status

from workshop.db.repositories import user_repo
from workshop.exceptions import AuthenticationError
from workshop.models.user import UserRead
from workshop.services.auth_service import decode_token, user_row_to_read


async def get_current_user(authorization: str | None = Header(None)) -> UserRead:
    """
    Извлекает и валидирует JWT-токен из заголовка ``Authorization``.

    Алгоритм:
        1. Проверяет наличие и формат заголовка Authorization.
        2. Декодирует JWT (подпись + срок действия).
        3. Загружает пользователя по UUID (claim ``sub``).
        4. Возвращает UserRead с ролью из БД (роль могла смениться
           после выдачи токена).

    Raises:
        HTTPException(401): токен отсутствует, невалиден, пользователь не найден.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header must start with 'Bearer'",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]
    try:
        payload = decode_token(token)
        user_id = UUID(payload["sub"])
    except (AuthenticationError, KeyError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc) or "Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    user = await user_repo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user_row_to_read(user)
