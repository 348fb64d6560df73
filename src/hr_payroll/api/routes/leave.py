"""Leave request endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from hr_payroll.api.dependencies import Audit, CurrentActor, DbSession
from hr_payroll.api.schemas import (
    ErrorResponse,
    LeaveBalanceResponse,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestResponse,
)
from hr_payroll.services.authorization import Operation
from hr_payroll.services.base import authorize_audited
from hr_payroll.services.leave_ledger import LeaveLedger

router = APIRouter(tags=["leave"])


@router.post(
    "/leave-requests",
    response_model=LeaveRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def submit_leave_request(
    db: DbSession, audit: Audit, actor: CurrentActor, payload: LeaveRequestCreate
) -> LeaveRequestResponse:
    leave = LeaveLedger(db, audit).request(
        payload.employee_id, payload.start_date, payload.end_date, payload.reason, actor
    )
    return LeaveRequestResponse.model_validate(leave)


@router.get(
    "/leave-requests",
    response_model=list[LeaveRequestResponse],
    responses={403: {"model": ErrorResponse}},
)
def list_leave_requests(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    pending_only: Annotated[bool, Query()] = False,
) -> list[LeaveRequestResponse]:
    """All requests, or the approval queue when ``pending_only`` is set."""
    authorize_audited(audit, actor, Operation.APPROVE_LEAVE)
    ledger = LeaveLedger(db, audit)
    requests = ledger.pending_requests() if pending_only else ledger.all_requests()
    return [LeaveRequestResponse.model_validate(r) for r in requests]


@router.post(
    "/leave-requests/{request_id}/approve",
    response_model=LeaveRequestResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def approve_leave_request(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    request_id: Annotated[UUID, Path()],
) -> LeaveRequestResponse:
    leave = LeaveLedger(db, audit).approve(request_id, actor)
    return LeaveRequestResponse.model_validate(leave)


@router.post(
    "/leave-requests/{request_id}/reject",
    response_model=LeaveRequestResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def reject_leave_request(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    request_id: Annotated[UUID, Path()],
    payload: LeaveRejectRequest,
) -> LeaveRequestResponse:
    leave = LeaveLedger(db, audit).reject(request_id, actor, payload.notes)
    return LeaveRequestResponse.model_validate(leave)


@router.post(
    "/leave-requests/{request_id}/cancel",
    response_model=LeaveRequestResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def cancel_leave_request(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    request_id: Annotated[UUID, Path()],
) -> LeaveRequestResponse:
    leave = LeaveLedger(db, audit).cancel(request_id, actor)
    return LeaveRequestResponse.model_validate(leave)


@router.get(
    "/employees/{employee_id}/leave-requests",
    response_model=list[LeaveRequestResponse],
    responses={403: {"model": ErrorResponse}},
)
def list_employee_leave(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
) -> list[LeaveRequestResponse]:
    authorize_audited(
        audit, actor, Operation.VIEW_EMPLOYEE_RECORDS, employee_id, "Employee", employee_id
    )
    return [
        LeaveRequestResponse.model_validate(r)
        for r in LeaveLedger(db, audit).requests_for_employee(employee_id)
    ]


@router.get(
    "/employees/{employee_id}/leave-balance",
    response_model=LeaveBalanceResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_leave_balance(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
) -> LeaveBalanceResponse:
    authorize_audited(
        audit, actor, Operation.VIEW_EMPLOYEE_RECORDS, employee_id, "Employee", employee_id
    )
    balance = LeaveLedger(db, audit).balance_for(employee_id)
    return LeaveBalanceResponse(employee_id=employee_id, leave_balance=balance)
