"""
workshop — Сервис управления заказами сувенирной мастерской.

Клиенты оформляют заказы (с фотографиями), мастера их выполняют,
менеджеры/администраторы распределяют работу и формируют отчёты.
"""

__version__ = "1.0.0"
