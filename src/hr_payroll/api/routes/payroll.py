"""Payslip and batch payroll endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Response, status

from hr_payroll.api.dependencies import Audit, CurrentActor, DbSession
from hr_payroll.api.schemas import (
    AdjustmentIn,
    BatchRunRequest,
    BatchRunResponse,
    ErrorResponse,
    PayrollCalculationResponse,
    PayslipRequest,
)
from hr_payroll.calculators.engine import PayrollEngine
from hr_payroll.calculators.types import Bonus, Deduction
from hr_payroll.errors import NotFoundError
from hr_payroll.services.authorization import Operation
from hr_payroll.services.base import authorize_audited
from hr_payroll.services.batch_runner import BatchPayrollRunner

router = APIRouter(prefix="/payroll", tags=["payroll"])

# Owner assumed for a missing record, so denials read the same as for one that exists
_NO_OWNER = UUID(int=0)


def _bonuses(items: list[AdjustmentIn]) -> list[Bonus]:
    return [Bonus(description=i.description, amount=i.amount) for i in items]


def _deductions(items: list[AdjustmentIn]) -> list[Deduction]:
    return [Deduction(description=i.description, amount=i.amount) for i in items]


@router.post(
    "/calculate",
    response_model=PayrollCalculationResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def calculate_payslip(
    db: DbSession, audit: Audit, actor: CurrentActor, payload: PayslipRequest
) -> PayrollCalculationResponse:
    """Calculate a payslip without saving it."""
    authorize_audited(audit, actor, Operation.GENERATE_PAYSLIP)
    calc = PayrollEngine(db, audit).calculate(
        payload.employee_id,
        payload.period_start,
        payload.period_end,
        _bonuses(payload.bonuses),
        _deductions(payload.deductions),
        payload.hours_worked,
    )
    return PayrollCalculationResponse.from_calculation(calc)


@router.post(
    "/payslips",
    response_model=PayrollCalculationResponse,
    responses={
        200: {"description": "A record already exists for the period; nothing saved"},
        201: {"description": "Payslip saved"},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
def generate_payslip(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    payload: PayslipRequest,
    response: Response,
) -> PayrollCalculationResponse:
    """Calculate and save a payslip unless the period is already on record."""
    saved, calc = PayrollEngine(db, audit).generate_and_save(
        payload.employee_id,
        payload.period_start,
        payload.period_end,
        _bonuses(payload.bonuses),
        _deductions(payload.deductions),
        actor,
        payload.hours_worked,
    )
    response.status_code = status.HTTP_201_CREATED if saved else status.HTTP_200_OK
    return PayrollCalculationResponse.from_calculation(calc, saved=saved)


@router.post(
    "/batch-runs",
    response_model=BatchRunResponse,
    responses={403: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def run_batch_payroll(
    db: DbSession, audit: Audit, actor: CurrentActor, payload: BatchRunRequest
) -> BatchRunResponse:
    result = BatchPayrollRunner(db, audit).run_for_all(payload.period_month, actor)
    return BatchRunResponse.model_validate(result)


@router.get(
    "/records/{record_id}",
    response_model=PayrollCalculationResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_record(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    record_id: Annotated[UUID, Path()],
) -> PayrollCalculationResponse:
    """A stored record. Callers who could not see it get 403 whether or not it exists."""
    record = PayrollEngine(db, audit).get_record(record_id)
    authorize_audited(
        audit, actor, Operation.VIEW_EMPLOYEE_RECORDS,
        record.employee_id if record is not None else _NO_OWNER,
        "PayrollRecord", record_id,
    )
    if record is None:
        raise NotFoundError("PayrollRecord", record_id)
    return PayrollCalculationResponse.from_calculation(record.to_calculation())


@router.get(
    "/employees/{employee_id}/records",
    response_model=list[PayrollCalculationResponse],
    responses={403: {"model": ErrorResponse}},
)
def list_employee_records(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
) -> list[PayrollCalculationResponse]:
    """Stored records for an employee, newest period first."""
    authorize_audited(
        audit, actor, Operation.VIEW_EMPLOYEE_RECORDS, employee_id, "Employee", employee_id
    )
    return [
        PayrollCalculationResponse.from_calculation(r.to_calculation())
        for r in PayrollEngine(db, audit).records_for_employee(employee_id)
    ]
