"""
workshop/models/common.py — Базовые типы домена мастерской.
"""

from pydantic import BaseModel


class WorkshopBase(BaseModel):
    """Базовая Pydantic-модель для схем сервиса."""

    model_config = {"str_strip_whitespace": True}
