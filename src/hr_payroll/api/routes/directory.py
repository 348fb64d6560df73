"""Department and employee endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from hr_payroll.api.dependencies import Audit, CurrentActor, DbSession
from hr_payroll.api.schemas import (
    DepartmentCreate,
    DepartmentResponse,
    EmployeeCreate,
    EmployeeResponse,
    ErrorResponse,
    PromotionRequest,
    SalaryUpdate,
)
from hr_payroll.errors import NotFoundError
from hr_payroll.services.authorization import Operation
from hr_payroll.services.base import authorize_audited
from hr_payroll.services.directory import Directory

router = APIRouter(tags=["directory"])


@router.get("/departments", response_model=list[DepartmentResponse])
def list_departments(db: DbSession, audit: Audit, actor: CurrentActor) -> list[DepartmentResponse]:
    return [
        DepartmentResponse.model_validate(d)
        for d in Directory(db, audit).all_departments()
    ]


@router.post(
    "/departments",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}},
)
def create_department(
    db: DbSession, audit: Audit, actor: CurrentActor, payload: DepartmentCreate
) -> DepartmentResponse:
    department = Directory(db, audit).add_department(payload.name, actor)
    return DepartmentResponse.model_validate(department)


@router.get("/employees", response_model=list[EmployeeResponse])
def list_employees(db: DbSession, audit: Audit, actor: CurrentActor) -> list[EmployeeResponse]:
    authorize_audited(audit, actor, Operation.VIEW_EMPLOYEE_RECORDS)
    return [
        EmployeeResponse.model_validate(e)
        for e in Directory(db, audit).all_employees()
    ]


@router.post(
    "/employees",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def create_employee(
    db: DbSession, audit: Audit, actor: CurrentActor, payload: EmployeeCreate
) -> EmployeeResponse:
    employee = Directory(db, audit).add_employee(
        username=payload.username,
        full_name=payload.full_name,
        position=payload.position,
        department_id=payload.department_id,
        salary=payload.salary,
        date_of_joining=payload.date_of_joining,
        actor=actor,
        leave_balance=payload.leave_balance,
    )
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_employee(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
) -> EmployeeResponse:
    authorize_audited(
        audit, actor, Operation.VIEW_EMPLOYEE_RECORDS, employee_id, "Employee", employee_id
    )
    employee = Directory(db, audit).employee_by_id(employee_id)
    if employee is None:
        raise NotFoundError("Employee", employee_id)
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/employees/{employee_id}/salary",
    response_model=EmployeeResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_salary(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
    payload: SalaryUpdate,
) -> EmployeeResponse:
    employee = Directory(db, audit).update_salary(employee_id, payload.new_salary, actor)
    return EmployeeResponse.model_validate(employee)


@router.post(
    "/employees/{employee_id}/promotions",
    response_model=EmployeeResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def promote_or_transfer(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
    payload: PromotionRequest,
) -> EmployeeResponse:
    """Move an employee to a new position, department and salary."""
    employee = Directory(db, audit).promote_or_transfer(
        employee_id,
        payload.new_position,
        payload.new_department_id,
        payload.new_salary,
        payload.effective_date,
        actor,
    )
    return EmployeeResponse.model_validate(employee)
