"""
workshop/models/report.py — Схемы отчётов (загрузка мастеров, финансы, план производства).
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from workshop.models.common import WorkshopBase


class WorkloadRow(WorkshopBase):
    """Загрузка одного мастера за период."""
    master_id: UUID
    master_name: str
    status_counts: dict[str, int] = Field(default_factory=dict)
    total_orders: int = 0


class FinancialStatusRow(WorkshopBase):
    status: str
    order_count: int = 0
    fixed_total: float = 0.0
    estimated_min_total: float = 0.0
    estimated_max_total: float = 0.0


class FinancialReport(WorkshopBase):
    """Финансовая сводка за период, по статусам и в целом."""
    start_date: datetime
    end_date: datetime
    by_status: list[FinancialStatusRow]
    order_count: int
    fixed_total: float
    estimated_min_total: float
    estimated_max_total: float


class ProductionPlanItem(WorkshopBase):
    """Строка плана производства: незавершённый заказ."""
    order_id: UUID
    order_number: str
    status: str
    product_type: str | None = None
    client_name: str | None = None
    master_name: str | None = None
    deadline: datetime | None = None
    days_until_deadline: int | None = None
    is_overdue: bool = False
