"""
workshop/api/orders.py — Эндпоинты заказов, каталога и фотографий.

Создание и добавление фото: multipart/form-data (поле ``photos``),
обновление: JSON с частичным набором полей.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from workshop.dependencies import get_current_user
from workshop.models.enums import OrderStatus
from workshop.models.order import (
    OrderCreate,
    OrderFilter,
    OrderPage,
    OrderRead,
    OrderUpdate,
    ProductType,
)
from workshop.models.user import UserRead
from workshop.services import catalog, order_service, rbac

router = APIRouter(tags=["orders"])


@router.get(
    "/product-types",
    response_model=list[ProductType],
    summary="Каталог изделий с ориентировочными ценами",
)
async def list_product_types():
    return catalog.list_product_types()


@router.post(
    "/orders",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Создать заказ",
)
async def create_order(
    description: str | None = Form(None),
    product_type: str | None = Form(None),
    price: float | None = Form(None),
    deadline: str | None = Form(None),
    client_id: UUID | None = Form(None),
    photos: list[UploadFile] | None = File(None),
    user: UserRead = Depends(get_current_user),
):
    """Клиент оформляет заказ на себя, персонал на указанного клиента."""
    data = OrderCreate(
        client_id=client_id,
        description=description,
        product_type=product_type,
        price=price,
        deadline=deadline,
    )
    return await order_service.create_order_with_uploads(user, data, photos or [])


@router.get("/orders", response_model=OrderPage, summary="Мои заказы")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    user: UserRead = Depends(get_current_user),
):
    """Видимость списка определяется ролью (см. rbac.order_list_scope)."""
    return await order_service.list_orders(user, OrderFilter(page=page, limit=limit))


@router.get("/manager/orders", response_model=OrderPage, summary="Все заказы (персонал)")
async def list_all_orders(
    status_filter: OrderStatus | None = Query(None, alias="status"),
    search: str | None = Query(None),
    client_id: UUID | None = Query(None),
    assigned_to: UUID | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    user: UserRead = Depends(rbac.require_staff()),
):
    filters = OrderFilter(
        status=status_filter,
        search=search,
        client_id=client_id,
        assigned_to=assigned_to,
        page=page,
        limit=limit,
    )
    return await order_service.list_orders(user, filters)


@router.get("/orders/{order_id}", response_model=OrderRead, summary="Получить заказ")
async def get_order(order_id: UUID, user: UserRead = Depends(get_current_user)):
    return await order_service.get_order(user, order_id)


@router.put("/orders/{order_id}", response_model=OrderRead, summary="Изменить заказ")
async def update_order(
    order_id: UUID,
    body: OrderUpdate,
    user: UserRead = Depends(get_current_user),
):
    """Меняются только переданные поля; ``null`` очищает цену, срок и мастера."""
    return await order_service.update_order(
        user, order_id, body.model_dump(exclude_unset=True)
    )


@router.post(
    "/orders/{order_id}/photos",
    response_model=OrderRead,
    summary="Добавить фотографии",
)
async def add_photos(
    order_id: UUID,
    photos: list[UploadFile] = File(...),
    user: UserRead = Depends(get_current_user),
):
    return await order_service.add_photo_uploads(user, order_id, photos)


@router.delete(
    "/orders/{order_id}/photos/{filename}",
    response_model=OrderRead,
    summary="Удалить фотографию",
)
async def remove_photo(
    order_id: UUID,
    filename: str,
    user: UserRead = Depends(get_current_user),
):
    """Повторное удаление того же файла ничего не меняет."""
    return await order_service.remove_photo(user, order_id, filename)
