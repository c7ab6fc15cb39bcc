from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from conftest import photo
from workshop.db.repositories import counter_repo, order_repo
from workshop.exceptions import (
    AuthorizationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from workshop.models.enums import OrderStatus
from workshop.models.order import OrderCreate, OrderFilter
from workshop.services import order_service

YEAR = datetime.now(timezone.utc).year


async def _assigned_order(admin, client_user, master, **fields):
    order = await order_service.create_order(
        client_user, OrderCreate(product_type="икона", **fields)
    )
    return await order_service.update_order(admin, order.order_id, {"assigned_to": master.user_id})


class TestCreate:
    async def test_client_creates_order_with_derived_price(self, client_user):
        order = await order_service.create_order(
            client_user, OrderCreate(product_type="карандашница", description="Гравировка")
        )
        assert order.order_number == f"ЗК-{YEAR}-001"
        assert order.status is OrderStatus.NEW
        assert order.client.user_id == client_user.user_id
        assert (order.price_range, order.price_min, order.price_max) == ("66 BYN", 66, 66)
        assert order.assigned_to is None

    async def test_numbers_increase(self, client_user):
        first = await order_service.create_order(client_user, OrderCreate())
        second = await order_service.create_order(client_user, OrderCreate())
        assert (first.order_number, second.order_number) == (f"ЗК-{YEAR}-001", f"ЗК-{YEAR}-002")

    async def test_round_trip(self, client_user):
        created = await order_service.create_order(
            client_user, OrderCreate(product_type="бювар", deadline="2030-01-01")
        )
        loaded = await order_service.get_order(client_user, created.order_id)
        assert loaded.order_number == created.order_number
        assert loaded.client == created.client
        assert (loaded.price_range, loaded.price_min, loaded.price_max) == (
            created.price_range, created.price_min, created.price_max,
        )
        assert loaded.formatted_deadline == "01.01.2030"

    async def test_photos_get_urls(self, client_user):
        p = photo("mug.jpg", mimetype="image/jpeg")
        order = await order_service.create_order(client_user, OrderCreate(), [p])
        assert order.photo_count == 1
        assert order.photos[0].url == f"/uploads/orders/photos/{p.filename}"

    async def test_bad_photo_rejects_before_numbering(self, client_user):
        with pytest.raises(ValidationError):
            await order_service.create_order(
                client_user, OrderCreate(), [photo("scan.bmp", mimetype="image/bmp")]
            )
        assert await counter_repo.get_year_counter(YEAR) == 0

    async def test_master_cannot_create(self, master):
        with pytest.raises(AuthorizationError):
            await order_service.create_order(master, OrderCreate())

    async def test_client_cannot_create_for_someone_else(self, client_user, other_client):
        with pytest.raises(AuthorizationError):
            await order_service.create_order(
                client_user, OrderCreate(client_id=other_client.user_id)
            )

    async def test_staff_creates_on_behalf_of_client(self, manager, client_user):
        order = await order_service.create_order(
            manager, OrderCreate(client_id=client_user.user_id)
        )
        assert order.client.user_id == client_user.user_id

    async def test_staff_must_name_an_existing_client(self, admin, master):
        with pytest.raises(ValidationError):
            await order_service.create_order(admin, OrderCreate())
        with pytest.raises(NotFoundError):
            await order_service.create_order(admin, OrderCreate(client_id=uuid4()))
        with pytest.raises(NotFoundError):
            await order_service.create_order(admin, OrderCreate(client_id=master.user_id))

    async def test_sequence_consumed_when_persist_fails(self, client_user, monkeypatch):
        original = order_repo.create_order

        async def _broken(**kwargs):
            raise ConnectionResetError("lost connection")

        monkeypatch.setattr(order_repo, "create_order", _broken)
        with pytest.raises(StorageError):
            await order_service.create_order(client_user, OrderCreate())

        monkeypatch.setattr(order_repo, "create_order", original)
        order = await order_service.create_order(client_user, OrderCreate())
        assert order.order_number == f"ЗК-{YEAR}-002"


class TestAccess:
    async def test_missing_order_is_not_found(self, admin):
        with pytest.raises(NotFoundError):
            await order_service.get_order(admin, uuid4())

    async def test_foreign_order_is_forbidden_not_hidden(self, client_user, other_client):
        order = await order_service.create_order(client_user, OrderCreate())
        with pytest.raises(AuthorizationError):
            await order_service.get_order(other_client, order.order_id)

    async def test_list_scopes(self, admin, client_user, other_client, master):
        mine = await _assigned_order(admin, client_user, master)
        await order_service.create_order(other_client, OrderCreate())

        client_page = await order_service.list_orders(client_user)
        assert [o.order_id for o in client_page.items] == [mine.order_id]

        master_page = await order_service.list_orders(master)
        assert [o.order_id for o in master_page.items] == [mine.order_id]

        admin_page = await order_service.list_orders(admin)
        assert admin_page.total == 2

    async def test_staff_filters(self, admin, client_user, master):
        order = await _assigned_order(admin, client_user, master)
        await order_service.update_order(admin, order.order_id, {"status": "in_progress"})
        await order_service.create_order(client_user, OrderCreate())

        by_status = await order_service.list_orders(admin, OrderFilter(status="in_progress"))
        assert [o.order_id for o in by_status.items] == [order.order_id]

        by_master_name = await order_service.list_orders(admin, OrderFilter(search="виктор"))
        assert [o.order_id for o in by_master_name.items] == [order.order_id]

        by_number = await order_service.list_orders(admin, OrderFilter(search=f"{YEAR}-00"))
        assert by_number.total == 2

    async def test_client_filters_cannot_widen_scope(self, client_user, other_client):
        await order_service.create_order(other_client, OrderCreate())
        page = await order_service.list_orders(
            client_user, OrderFilter(client_id=other_client.user_id)
        )
        assert page.items == []


class TestUpdate:
    async def test_assigned_master_updates_fields(self, admin, client_user, master):
        order = await _assigned_order(admin, client_user, master)
        updated = await order_service.update_order(
            master, order.order_id,
            {"status": "in_progress", "price": 450, "deadline": "2030-05-01"},
        )
        assert updated.status is OrderStatus.IN_PROGRESS
        assert updated.price == 450
        assert updated.formatted_deadline == "01.05.2030"
        assert updated.assigned_to.user_id == master.user_id

    async def test_other_master_gets_authorization_error(self, admin, client_user, master, other_master):
        order = await _assigned_order(admin, client_user, master)
        with pytest.raises(AuthorizationError):
            await order_service.update_order(other_master, order.order_id, {"status": "completed"})
        unchanged = await order_service.get_order(admin, order.order_id)
        assert unchanged.status is OrderStatus.NEW

    async def test_master_cannot_reassign(self, admin, client_user, master, other_master):
        order = await _assigned_order(admin, client_user, master)
        with pytest.raises(AuthorizationError):
            await order_service.update_order(
                master, order.order_id, {"assigned_to": other_master.user_id}
            )
        # Повтор текущего мастера — не переназначение.
        same = await order_service.update_order(
            master, order.order_id, {"assigned_to": master.user_id, "price": 10}
        )
        assert same.price == 10

    async def test_client_cannot_update(self, client_user):
        order = await order_service.create_order(client_user, OrderCreate())
        with pytest.raises(AuthorizationError):
            await order_service.update_order(client_user, order.order_id, {"description": "x"})

    async def test_update_missing_order(self, admin):
        with pytest.raises(NotFoundError):
            await order_service.update_order(admin, uuid4(), {"status": "new"})

    async def test_assign_requires_existing_master(self, admin, client_user, other_client):
        order = await order_service.create_order(client_user, OrderCreate())
        with pytest.raises(NotFoundError):
            await order_service.update_order(admin, order.order_id, {"assigned_to": uuid4()})
        with pytest.raises(NotFoundError):
            await order_service.update_order(
                admin, order.order_id, {"assigned_to": other_client.user_id}
            )

    async def test_invalid_values(self, admin, client_user):
        order = await order_service.create_order(client_user, OrderCreate())
        with pytest.raises(ValidationError):
            await order_service.update_order(admin, order.order_id, {"status": "lost"})
        with pytest.raises(ValidationError):
            await order_service.update_order(admin, order.order_id, {"price": -5})
        with pytest.raises(ValidationError):
            await order_service.update_order(admin, order.order_id, {"deadline": "soon"})

    async def test_product_type_change_recomputes_range(self, admin, client_user):
        order = await order_service.create_order(
            client_user, OrderCreate(product_type="карандашница")
        )
        updated = await order_service.update_order(
            admin, order.order_id, {"product_type": "настенные часы"}
        )
        assert (updated.price_range, updated.price_min, updated.price_max) == ("165-495 BYN", 165, 495)
        assert updated.order_number == order.order_number

    async def test_null_clears_fields(self, admin, client_user, master):
        order = await _assigned_order(admin, client_user, master, price=100, deadline="2030-01-01")
        cleared = await order_service.update_order(
            admin, order.order_id, {"price": None, "deadline": None, "assigned_to": None}
        )
        assert cleared.price is None
        assert cleared.deadline is None
        assert cleared.assigned_to is None

    async def test_overdue_is_reported(self, admin, client_user):
        order = await order_service.create_order(client_user, OrderCreate())
        yesterday = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        overdue = await order_service.update_order(
            admin, order.order_id, {"status": "in_progress", "deadline": yesterday}
        )
        assert overdue.is_overdue
        assert overdue.days_until_deadline <= 0

        delivered = await order_service.update_order(admin, order.order_id, {"status": "delivered"})
        assert not delivered.is_overdue


class TestPhotos:
    async def test_add_photos_appends(self, client_user):
        order = await order_service.create_order(client_user, OrderCreate(), [photo("a.png")])
        updated = await order_service.add_photos(client_user, order.order_id, [photo("b.gif", "image/gif")])
        assert updated.photo_count == 2
        assert updated.photos[1].original_name == "b.gif"

    async def test_add_photos_validates(self, client_user):
        order = await order_service.create_order(client_user, OrderCreate())
        with pytest.raises(ValidationError):
            await order_service.add_photos(
                client_user, order.order_id, [photo("huge.png", size=6 * 1024 * 1024)]
            )

    async def test_master_cannot_touch_photos(self, admin, client_user, master):
        order = await _assigned_order(admin, client_user, master)
        with pytest.raises(AuthorizationError):
            await order_service.add_photos(master, order.order_id, [photo()])

    async def test_remove_photo_twice_is_safe(self, client_user):
        p = photo("a.png")
        order = await order_service.create_order(client_user, OrderCreate(), [p, photo("b.png")])

        once = await order_service.remove_photo(client_user, order.order_id, p.filename)
        twice = await order_service.remove_photo(client_user, order.order_id, p.filename)

        assert once.photo_count == 1
        assert twice.photo_count == 1
        assert [x.filename for x in twice.photos] == [once.photos[0].filename]
