"""
workshop/services/report_service.py — Отчёты для персонала.

    • Загрузка мастеров: заказы каждого мастера по статусам за период.
    • Финансы: число заказов, сумма фиксированных цен и расчётных
      диапазонов по статусам за период.
    • План производства: все незавершённые заказы по сроку.

Период отбирает заказы по дате создания, обе границы включительно.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone

from workshop.db.repositories import order_repo, user_repo
from workshop.exceptions import ValidationError
from workshop.models.enums import OrderStatus, UserRole
from workshop.models.report import (
    FinancialReport,
    FinancialStatusRow,
    ProductionPlanItem,
    WorkloadRow,
)
from workshop.services import lifecycle, rbac

logger = logging.getLogger(__name__)


def _period(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    if end_date < start_date:
        raise ValidationError(
            "End date must not be before start date",
            details={"start_date": str(start_date), "end_date": str(end_date)},
        )
    return (
        datetime.combine(start_date, time.min, tzinfo=timezone.utc),
        datetime.combine(end_date, time.max, tzinfo=timezone.utc),
    )


async def _orders_in_period(start: datetime, end: datetime) -> list[dict]:
    rows, _ = await order_repo.list_orders(created_from=start, created_to=end)
    return rows


async def workload_report(actor, start_date: date, end_date: date) -> list[WorkloadRow]:
    """Строка на каждого мастера, включая мастеров без заказов в периоде."""
    rbac.ensure_staff(actor)
    start, end = _period(start_date, end_date)

    masters = await user_repo.list_users(role=UserRole.MASTER.value)
    rows = {
        m["user_id"]: WorkloadRow(
            master_id=m["user_id"],
            master_name=m["full_name"],
            status_counts={s.value: 0 for s in OrderStatus},
        )
        for m in masters
    }
    for order in await _orders_in_period(start, end):
        row = rows.get(order.get("assigned_to"))
        if row is None:
            continue
        row.status_counts[order["status"]] += 1
        row.total_orders += 1

    logger.info("Workload report %s..%s: %d masters", start_date, end_date, len(rows))
    return sorted(rows.values(), key=lambda r: r.master_name)


async def financial_report(actor, start_date: date, end_date: date) -> FinancialReport:
    rbac.ensure_staff(actor)
    start, end = _period(start_date, end_date)

    by_status = {s.value: FinancialStatusRow(status=s.value) for s in OrderStatus}
    for order in await _orders_in_period(start, end):
        row = by_status[order["status"]]
        row.order_count += 1
        row.fixed_total += float(order.get("price") or 0)
        row.estimated_min_total += float(order.get("price_min") or 0)
        row.estimated_max_total += float(order.get("price_max") or 0)

    rows = list(by_status.values())
    return FinancialReport(
        start_date=start,
        end_date=end,
        by_status=rows,
        order_count=sum(r.order_count for r in rows),
        fixed_total=sum(r.fixed_total for r in rows),
        estimated_min_total=sum(r.estimated_min_total for r in rows),
        estimated_max_total=sum(r.estimated_max_total for r in rows),
    )


async def production_plan(actor) -> list[ProductionPlanItem]:
    """Незавершённые заказы: сначала с ближайшим сроком, заказы без срока в конце."""
    rbac.ensure_staff(actor)
    open_statuses = [s.value for s in OrderStatus if s not in lifecycle.TERMINAL_STATUSES]
    rows, _ = await order_repo.list_orders(statuses=open_statuses)

    ids = {r["client_id"] for r in rows} | {r["assigned_to"] for r in rows if r.get("assigned_to")}
    users = await user_repo.get_users_by_ids(list(ids))
    now = datetime.now(timezone.utc)

    items = [
        ProductionPlanItem(
            order_id=r["order_id"],
            order_number=r["order_number"],
            status=r["status"],
            product_type=r.get("product_type"),
            client_name=(users.get(r["client_id"]) or {}).get("full_name"),
            master_name=(users.get(r.get("assigned_to")) or {}).get("full_name"),
            deadline=lifecycle.parse_deadline(r.get("deadline")),
            days_until_deadline=lifecycle.days_until_deadline(r, now),
            is_overdue=lifecycle.is_overdue(r, now),
        )
        for r in rows
    ]
    items.sort(key=lambda i: (i.deadline is None, i.deadline or now))
    return items
