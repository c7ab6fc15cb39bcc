"""
workshop/services/user_service.py — Профиль, пароль, роли и списки пользователей.
"""

from __future__ import annotations

import logging
from uuid import UUID

from workshop.db.repositories import user_repo
from workshop.exceptions import AuthenticationError, NotFoundError
from workshop.models.enums import UserRole
from workshop.models.user import PasswordChange, ProfileUpdate, UserRead, UserSummary
from workshop.services import rbac
from workshop.services.auth_service import hash_password, user_row_to_read, verify_password

logger = logging.getLogger(__name__)


async def get_profile(user_id: UUID) -> UserRead:
    row = await user_repo.get_user_by_id(user_id)
    if not row:
        raise NotFoundError("User", str(user_id))
    return user_row_to_read(row)


async def update_profile(user_id: UUID, data: ProfileUpdate) -> UserRead:
    """Меняет имя и/или телефон владельца профиля."""
    changes = data.model_dump(exclude_unset=True)
    if "full_name" in changes and not changes["full_name"]:
        changes.pop("full_name")
    row = await user_repo.update_user(user_id, changes)
    if not row:
        raise NotFoundError("User", str(user_id))
    logger.info("Profile updated for user %s: %s", user_id, sorted(changes))
    return user_row_to_read(row)


async def change_password(user_id: UUID, data: PasswordChange) -> None:
    """Смена пароля владельцем после повторной проверки текущего."""
    row = await user_repo.get_user_by_id(user_id)
    if not row:
        raise NotFoundError("User", str(user_id))
    if not verify_password(data.current_password, row["password_hash"]):
        raise AuthenticationError("Current password is incorrect")
    await user_repo.update_user(user_id, {"password_hash": hash_password(data.new_password)})
    logger.info("Password changed for user %s", user_id)


async def update_role(actor, user_id: UUID, new_role: UserRole) -> UserRead:
    """Меняет роль пользователя по правилам политики доступа."""
    rbac.ensure_staff(actor)
    row = await user_repo.get_user_by_id(user_id)
    if not row:
        raise NotFoundError("User", str(user_id))
    rbac.ensure_can_change_role(actor, row["role"], new_role)

    updated = await user_repo.update_user(user_id, {"role": UserRole(new_role).value})
    logger.info(
        "User %s changed role of %s: %s → %s",
        actor.user_id, user_id, row["role"], UserRole(new_role).value,
    )
    return user_row_to_read(updated)


async def list_users(actor, role: UserRole | None = None, search: str | None = None) -> list[UserRead]:
    rbac.ensure_staff(actor)
    rows = await user_repo.list_users(
        role=UserRole(role).value if role else None,
        search=search or None,
    )
    return [user_row_to_read(r) for r in rows]


async def list_masters(actor) -> list[UserSummary]:
    rbac.ensure_staff(actor)
    rows = await user_repo.list_users(role=UserRole.MASTER.value)
    return [
        UserSummary(
            user_id=r["user_id"], full_name=r["full_name"],
            email=r["email"], phone=r.get("phone"),
        )
        for r in rows
    ]
