"""
workshop/api/users.py — Профиль, мастера, пользователи и роли.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from workshop.dependencies import get_current_user
from workshop.models.enums import UserRole
from workshop.models.user import (
    PasswordChange,
    ProfileUpdate,
    RoleUpdate,
    UserRead,
    UserSummary,
)
from workshop.services import user_service

router = APIRouter(tags=["users"])


@router.get("/users/profile", response_model=UserRead, summary="Профиль текущего пользователя")
async def get_profile(user: UserRead = Depends(get_current_user)):
    return await user_service.get_profile(user.user_id)


@router.put("/users/profile", response_model=UserRead, summary="Изменить профиль")
async def update_profile(body: ProfileUpdate, user: UserRead = Depends(get_current_user)):
    return await user_service.update_profile(user.user_id, body)


@router.put(
    "/users/profile/password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Сменить пароль",
)
async def change_password(body: PasswordChange, user: UserRead = Depends(get_current_user)):
    """Требует текущий пароль."""
    await user_service.change_password(user.user_id, body)


@router.get("/users/masters", response_model=list[UserSummary], summary="Список мастеров")
async def list_masters(user: UserRead = Depends(get_current_user)):
    return await user_service.list_masters(user)


@router.get("/manager/users", response_model=list[UserRead], summary="Пользователи (персонал)")
async def list_users(
    role: UserRole | None = Query(None),
    search: str | None = Query(None),
    user: UserRead = Depends(get_current_user),
):
    """Фильтр по роли и подстроке в имени / email."""
    return await user_service.list_users(user, role=role, search=search)


@router.patch("/users/{user_id}/role", response_model=UserRead, summary="Изменить роль")
async def update_role(
    user_id: UUID,
    body: RoleUpdate,
    user: UserRead = Depends(get_current_user),
):
    return await user_service.update_role(user, user_id, body.role)
