"""
workshop/services/catalog.py — Каталог изделий мастерской.

Статическая таблица «тип изделия → ориентировочная цена (BYN)».
Неизвестный тип не ошибка: у такого заказа просто нет расчётной цены.
"""

from __future__ import annotations

from workshop.models.order import ProductType

# key → (подпись диапазона, min, max)
PRODUCT_PRICE_MAPPING: dict[str, tuple[str, float, float]] = {
    "настенные часы": ("165-495 BYN", 165, 495),
    "каминные часы": ("1 320 BYN", 1320, 1320),
    "песочные часы": ("100-950 BYN", 100, 950),
    "настольные часы": ("85-200 BYN", 85, 200),
    "письменный набор": ("115-990 BYN", 115, 990),
    "метеостанция": ("165-420 BYN", 165, 420),
    "поддон для бумаг": ("99-230 BYN", 99, 230),
    "карандашница": ("66 BYN", 66, 66),
    "флагшток": ("45-75 BYN", 45, 75),
    "вечный календарь": ("200 BYN", 200, 200),
    "подставка под календарь": ("66 BYN", 66, 66),
    "бювар": ("130-400 BYN", 130, 400),
    "плакетки (наградные доски)": ("65-330 BYN", 65, 330),
    "настенные панно": ("85-990 BYN", 85, 990),
    "ключницы": ("150-165 BYN", 150, 165),
    "икона": ("400-600 BYN", 400, 600),
    "сувенирная упаковка": ("60-220 BYN", 60, 220),
}


def list_product_types() -> list[ProductType]:
    """Все позиции каталога в порядке объявления (для выпадающих списков)."""
    return [
        ProductType(key=key, range_label=label, min=lo, max=hi)
        for key, (label, lo, hi) in PRODUCT_PRICE_MAPPING.items()
    ]


def lookup(product_type: str | None) -> ProductType | None:
    """Цена для типа изделия или ``None``, если тип не найден."""
    if not product_type:
        return None
    entry = PRODUCT_PRICE_MAPPING.get(product_type)
    if entry is None:
        return None
    label, lo, hi = entry
    return ProductType(key=product_type, range_label=label, min=lo, max=hi)
