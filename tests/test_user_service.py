from uuid import uuid4

import pytest

from conftest import PASSWORD
from workshop.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from workshop.models.enums import UserRole
from workshop.models.user import PasswordChange, ProfileUpdate
from workshop.services import auth_service, user_service


async def test_profile_update(client_user):
    updated = await user_service.update_profile(
        client_user.user_id, ProfileUpdate(phone="+375 (29) 111-22-33")
    )
    assert updated.phone == "+375 (29) 111-22-33"
    assert updated.full_name == client_user.full_name


async def test_password_change_requires_current_password(client_user):
    with pytest.raises(AuthenticationError):
        await user_service.change_password(
            client_user.user_id,
            PasswordChange(current_password="wrong-one", new_password="new-secret"),
        )

    await user_service.change_password(
        client_user.user_id,
        PasswordChange(current_password=PASSWORD, new_password="new-secret"),
    )
    result = await auth_service.authenticate(client_user.email, "new-secret")
    assert result["user"].user_id == client_user.user_id


async def test_staff_changes_roles(manager, client_user):
    promoted = await user_service.update_role(manager, client_user.user_id, UserRole.MASTER)
    assert promoted.role is UserRole.MASTER


async def test_manager_cannot_demote_admin(manager, admin):
    with pytest.raises(AuthorizationError):
        await user_service.update_role(manager, admin.user_id, UserRole.CLIENT)


async def test_admin_can_demote_admin(admin):
    from conftest import create_user

    other_admin = await create_user(UserRole.ADMIN)
    demoted = await user_service.update_role(admin, other_admin.user_id, UserRole.MASTER)
    assert demoted.role is UserRole.MASTER


async def test_non_staff_cannot_change_roles(master, client_user):
    with pytest.raises(AuthorizationError):
        await user_service.update_role(master, client_user.user_id, UserRole.ADMIN)


async def test_role_change_for_missing_user(admin):
    with pytest.raises(NotFoundError):
        await user_service.update_role(admin, uuid4(), UserRole.MASTER)


async def test_list_users_and_masters(admin, client_user, master, other_master):
    masters = await user_service.list_masters(admin)
    assert {m.user_id for m in masters} == {master.user_id, other_master.user_id}

    found = await user_service.list_users(admin, search="клиентова")
    assert [u.user_id for u in found] == [client_user.user_id]

    clients = await user_service.list_users(admin, role=UserRole.CLIENT)
    assert [u.user_id for u in clients] == [client_user.user_id]

    with pytest.raises(AuthorizationError):
        await user_service.list_masters(client_user)
