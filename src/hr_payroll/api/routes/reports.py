"""Reporting endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from hr_payroll.api.dependencies import Audit, CurrentActor, DbSession
from hr_payroll.api.schemas import DepartmentReportResponse, ErrorResponse, SalaryTrendResponse
from hr_payroll.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get(
    "/departments/{department_id}/expenditure",
    response_model=DepartmentReportResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def department_expenditure(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    department_id: Annotated[UUID, Path()],
    period_start: Annotated[date, Query()],
    period_end: Annotated[date, Query()],
) -> DepartmentReportResponse:
    report = ReportService(db, audit).department_expenditure(
        department_id, period_start, period_end, actor
    )
    return DepartmentReportResponse.model_validate(report)


@router.get(
    "/employees/{employee_id}/salary-trend",
    response_model=SalaryTrendResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def salary_trend(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
) -> SalaryTrendResponse:
    trend = ReportService(db, audit).salary_trend(employee_id, actor)
    return SalaryTrendResponse.model_validate(trend)
