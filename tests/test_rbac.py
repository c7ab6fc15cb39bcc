from types import SimpleNamespace
from uuid import uuid4

import pytest

from workshop.exceptions import AuthorizationError
from workshop.models.enums import UserRole
from workshop.services import rbac


def _actor(role):
    return SimpleNamespace(user_id=uuid4(), role=UserRole(role))


@pytest.fixture
def people():
    return {
        "client": _actor(UserRole.CLIENT),
        "stranger": _actor(UserRole.CLIENT),
        "master": _actor(UserRole.MASTER),
        "other_master": _actor(UserRole.MASTER),
        "admin": _actor(UserRole.ADMIN),
        "manager": _actor(UserRole.MANAGER),
    }


@pytest.fixture
def order(people):
    return {"client_id": people["client"].user_id, "assigned_to": people["master"].user_id}


def test_manager_is_equivalent_to_admin():
    assert rbac.effective_role(UserRole.MANAGER) is UserRole.ADMIN
    assert rbac.effective_role("admin") is UserRole.ADMIN
    assert rbac.effective_role("master") is UserRole.MASTER


def test_create_order(people):
    client = people["client"]
    assert rbac.can_create_order(client)
    assert rbac.can_create_order(client, client.user_id)
    assert not rbac.can_create_order(client, people["stranger"].user_id)
    assert not rbac.can_create_order(people["master"])
    assert rbac.can_create_order(people["admin"], client.user_id)
    assert rbac.can_create_order(people["manager"], client.user_id)


def test_read_order(people, order):
    assert rbac.can_read_order(people["client"], order)
    assert not rbac.can_read_order(people["stranger"], order)
    assert rbac.can_read_order(people["master"], order)
    assert not rbac.can_read_order(people["other_master"], order)
    assert rbac.can_read_order(people["manager"], order)


def test_unassigned_order_is_invisible_to_masters(people):
    unassigned = {"client_id": people["client"].user_id, "assigned_to": None}
    assert not rbac.can_read_order(people["master"], unassigned)
    assert not rbac.can_update_order(people["master"], unassigned, {"status"})


def test_list_scope(people):
    assert rbac.order_list_scope(people["client"]) == {"client_id": people["client"].user_id}
    assert rbac.order_list_scope(people["master"]) == {"assigned_to": people["master"].user_id}
    assert rbac.order_list_scope(people["admin"]) == {}
    assert rbac.order_list_scope(people["manager"]) == {}


def test_update_order(people, order):
    fields = {"status", "price", "deadline"}
    assert not rbac.can_update_order(people["client"], order, fields)
    assert rbac.can_update_order(people["master"], order, fields)
    assert not rbac.can_update_order(people["other_master"], order, fields)
    assert rbac.can_update_order(people["admin"], order, fields | {"assigned_to"})


def test_master_cannot_reassign(people, order):
    assert not rbac.can_update_order(people["master"], order, {"assigned_to"})
    assert not rbac.can_assign_master(people["master"])
    assert not rbac.can_assign_master(people["client"])
    assert rbac.can_assign_master(people["manager"])


def test_photos(people, order):
    assert rbac.can_manage_photos(people["client"], order)
    assert not rbac.can_manage_photos(people["stranger"], order)
    assert not rbac.can_manage_photos(people["master"], order)
    assert rbac.can_manage_photos(people["admin"], order)


def test_change_role(people):
    assert not rbac.can_change_role(people["client"], "client", "master")
    assert not rbac.can_change_role(people["master"], "client", "master")
    assert rbac.can_change_role(people["manager"], "client", "master")
    assert rbac.can_change_role(people["admin"], "admin", "client")
    assert not rbac.can_change_role(people["manager"], "admin", "client")
    assert rbac.can_change_role(people["manager"], "master", "admin")


def test_ensure_raises_authorization_error(people, order):
    with pytest.raises(AuthorizationError):
        rbac.ensure_can_update_order(people["other_master"], order, {"status"})
    with pytest.raises(AuthorizationError):
        rbac.ensure_staff(people["master"])
    rbac.ensure_can_read_order(people["client"], order)
