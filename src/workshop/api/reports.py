"""
workshop/api/reports.py — Отчёты для персонала.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from workshop.models.report import FinancialReport, ProductionPlanItem, WorkloadRow
from workshop.models.user import UserRead
from workshop.services import rbac, report_service

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/workload", response_model=list[WorkloadRow], summary="Загрузка мастеров")
async def workload(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    user: UserRead = Depends(rbac.require_staff()),
):
    return await report_service.workload_report(user, start_date, end_date)


@router.get("/financial", response_model=FinancialReport, summary="Финансовый отчёт")
async def financial(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    user: UserRead = Depends(rbac.require_staff()),
):
    return await report_service.financial_report(user, start_date, end_date)


@router.get(
    "/production-plan",
    response_model=list[ProductionPlanItem],
    summary="План производства",
)
async def production_plan(user: UserRead = Depends(rbac.require_staff())):
    return await report_service.production_plan(user)
