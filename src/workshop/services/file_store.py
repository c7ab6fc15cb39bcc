"""
workshop/services/file_store.py — Локальное файловое хранилище загрузок.

Файлы фотографий заказов пишутся в ``<upload_dir>/orders/photos`` под
сгенерированным уникальным именем и отдаются по URL
``/uploads/orders/photos/<filename>``.
"""

from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from workshop.config import get_settings
from workshop.models.order import PhotoUpload
from workshop.services.photo_validator import (
    MAX_PHOTO_SIZE,
    ensure_photo_size,
    ensure_photo_type,
)

logger = logging.getLogger(__name__)

PHOTOS_SUBDIR = Path("orders") / "photos"


def photos_dir() -> Path:
    return Path(get_settings().upload_dir) / PHOTOS_SUBDIR


def _unique_filename(original_name: str) -> str:
    suffix = Path(original_name or "").suffix.lower()
    return f"photo-{int(time.time() * 1000)}-{secrets.token_hex(6)}{suffix}"


async def save_photo(upload: UploadFile) -> PhotoUpload:
    """
    Записывает загруженный файл на диск.

    Тип и размер проверяются до записи: читается не больше
    ``MAX_PHOTO_SIZE + 1`` байт, файл сверх лимита отклоняется целиком.
    """
    name = upload.filename or ""
    mimetype = upload.content_type or "application/octet-stream"
    ensure_photo_type(name, mimetype)
    content = await upload.read(MAX_PHOTO_SIZE + 1)
    ensure_photo_size(name, len(content))

    directory = photos_dir()
    filename = _unique_filename(name)
    path = directory / filename

    def _write() -> None:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    await run_in_threadpool(_write)
    logger.info("Stored upload %s as %s (%d bytes)", upload.filename, path, len(content))
    return PhotoUpload(
        filename=filename,
        original_name=name or filename,
        mimetype=mimetype,
        size=len(content),
        path=str(path),
    )


async def delete_file(path: str) -> None:
    """Удаляет файл; отсутствующий файл не считается ошибкой."""
    def _unlink() -> None:
        Path(path).unlink(missing_ok=True)

    try:
        await run_in_threadpool(_unlink)
        logger.info("Deleted stored file %s", path)
    except OSError as exc:
        logger.warning("Could not delete stored file %s: %s", path, exc)


async def delete_files(paths: list[str]) -> None:
    """Компенсирующее удаление уже записанных файлов (best effort)."""
    for path in paths:
        await delete_file(path)
