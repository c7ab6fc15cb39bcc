"""
workshop/api/auth.py — Регистрация и вход.
"""

from fastapi import APIRouter, Body, status

from workshop.models.user import UserCreate
from workshop.services import auth_service

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация клиента",
)
async def register(body: UserCreate):
    """Создаёт пользователя с ролью client и возвращает токен."""
    return await auth_service.register_user(body)


@router.post(
    "/login",
    summary="Вход по email + пароль → JWT-токен",
)
async def login(email: str = Body(...), password: str = Body(...)):
    """Аутентификация: email + пароль → JWT access."""
    return await auth_service.authenticate(email, password)
