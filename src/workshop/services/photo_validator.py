"""
workshop/services/photo_validator.py — Проверка фотографий заказа.

Партия принимается целиком или отклоняется целиком. Удаление уже
записанных файлов при отказе остаётся на вызывающей стороне.
"""

from __future__ import annotations

from typing import Sequence

from workshop.exceptions import ValidationError
from workshop.models.order import PhotoUpload

ALLOWED_PHOTO_MIMETYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
})
MAX_PHOTO_SIZE = 5 * 1024 * 1024
MAX_PHOTOS_PER_BATCH = 10


def ensure_batch_size(count: int) -> None:
    if count > MAX_PHOTOS_PER_BATCH:
        raise ValidationError(
            f"Too many photos: {count}. Maximum is {MAX_PHOTOS_PER_BATCH} per upload.",
            details={"count": count, "max": MAX_PHOTOS_PER_BATCH},
        )


def ensure_photo_type(name: str, mimetype: str) -> None:
    if mimetype not in ALLOWED_PHOTO_MIMETYPES:
        raise ValidationError(
            f"Invalid file type for photo {name}: {mimetype}. "
            "Only JPEG, PNG, GIF, and WebP are allowed.",
            details={"file": name, "mimetype": mimetype},
        )


def ensure_photo_size(name: str, size: int) -> None:
    if size > MAX_PHOTO_SIZE:
        raise ValidationError(
            f"Photo file size too large: {name}. Maximum size is 5MB.",
            details={"file": name, "size": size},
        )


def validate_photos(photos: Sequence[PhotoUpload]) -> None:
    """
    Проверяет партию фотографий.

    Raises:
        ValidationError: слишком много файлов, недопустимый тип или размер;
            сообщение называет первый проблемный файл.
    """
    ensure_batch_size(len(photos))
    for photo in photos:
        ensure_photo_type(photo.original_name, photo.mimetype)
        ensure_photo_size(photo.original_name, photo.size)
