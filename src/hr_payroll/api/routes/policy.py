"""Tax rate and benefit plan endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from hr_payroll.api.dependencies import Audit, CurrentActor, DbSession
from hr_payroll.api.schemas import (
    BenefitPlanCreate,
    BenefitPlanResponse,
    BenefitSelectionResponse,
    EnrollmentRequest,
    ErrorResponse,
    TaxRateCreate,
    TaxRateResponse,
)
from hr_payroll.calculators.tax_resolver import TaxPolicyResolver
from hr_payroll.services.authorization import Operation
from hr_payroll.services.base import authorize_audited
from hr_payroll.services.benefit_ledger import BenefitLedger

router = APIRouter(tags=["policy"])


# ============================================================================
# Tax rates
# ============================================================================


@router.get("/tax-rates", response_model=list[TaxRateResponse])
def list_tax_rates(db: DbSession, audit: Audit, actor: CurrentActor) -> list[TaxRateResponse]:
    return [TaxRateResponse.model_validate(r) for r in TaxPolicyResolver(db, audit).list_rates()]


@router.post(
    "/tax-rates",
    response_model=TaxRateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}},
)
def create_tax_rate(
    db: DbSession, audit: Audit, actor: CurrentActor, payload: TaxRateCreate
) -> TaxRateResponse:
    """Add a rate. An active rate replaces the current one."""
    rate = TaxPolicyResolver(db, audit).add_rate(
        payload.name,
        payload.percentage,
        actor,
        threshold_min=payload.threshold_min,
        threshold_max=payload.threshold_max,
        is_active=payload.is_active,
    )
    return TaxRateResponse.model_validate(rate)


@router.post(
    "/tax-rates/{tax_rate_id}/activate",
    response_model=TaxRateResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def activate_tax_rate(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    tax_rate_id: Annotated[UUID, Path()],
) -> TaxRateResponse:
    rate = TaxPolicyResolver(db, audit).set_active(tax_rate_id, actor)
    return TaxRateResponse.model_validate(rate)


@router.post(
    "/tax-rates/{tax_rate_id}/deactivate",
    response_model=TaxRateResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def deactivate_tax_rate(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    tax_rate_id: Annotated[UUID, Path()],
) -> TaxRateResponse:
    rate = TaxPolicyResolver(db, audit).deactivate(tax_rate_id, actor)
    return TaxRateResponse.model_validate(rate)


# ============================================================================
# Benefit plans and enrollments
# ============================================================================


@router.get("/benefit-plans", response_model=list[BenefitPlanResponse])
def list_benefit_plans(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    active_only: Annotated[bool, Query()] = False,
) -> list[BenefitPlanResponse]:
    plans = BenefitLedger(db, audit).list_plans(active_only=active_only)
    return [BenefitPlanResponse.model_validate(p) for p in plans]


@router.post(
    "/benefit-plans",
    response_model=BenefitPlanResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}},
)
def create_benefit_plan(
    db: DbSession, audit: Audit, actor: CurrentActor, payload: BenefitPlanCreate
) -> BenefitPlanResponse:
    plan = BenefitLedger(db, audit).add_plan(
        payload.name,
        payload.monthly_contribution_employee,
        actor,
        description=payload.description,
        monthly_contribution_employer=payload.monthly_contribution_employer,
        is_active=payload.is_active,
    )
    return BenefitPlanResponse.model_validate(plan)


@router.post(
    "/benefit-selections",
    response_model=BenefitSelectionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def enroll_in_plan(
    db: DbSession, audit: Audit, actor: CurrentActor, payload: EnrollmentRequest
) -> BenefitSelectionResponse:
    selection = BenefitLedger(db, audit).enroll(payload.employee_id, payload.plan_id, actor)
    return BenefitSelectionResponse.model_validate(selection)


@router.post(
    "/benefit-selections/{selection_id}/unenroll",
    response_model=BenefitSelectionResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def unenroll_from_plan(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    selection_id: Annotated[UUID, Path()],
) -> BenefitSelectionResponse:
    selection = BenefitLedger(db, audit).unenroll(selection_id, actor)
    return BenefitSelectionResponse.model_validate(selection)


@router.get(
    "/employees/{employee_id}/benefit-selections",
    response_model=list[BenefitSelectionResponse],
    responses={403: {"model": ErrorResponse}},
)
def list_employee_selections(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
    active_only: Annotated[bool, Query()] = False,
) -> list[BenefitSelectionResponse]:
    authorize_audited(
        audit, actor, Operation.VIEW_EMPLOYEE_RECORDS, employee_id, "Employee", employee_id
    )
    ledger = BenefitLedger(db, audit)
    selections = (
        ledger.active_selections_for(employee_id)
        if active_only
        else ledger.selections_for(employee_id)
    )
    return [BenefitSelectionResponse.model_validate(s) for s in selections]


@router.get(
    "/employees/{employee_id}/available-plans",
    response_model=list[BenefitPlanResponse],
    responses={403: {"model": ErrorResponse}},
)
def list_available_plans(
    db: DbSession,
    audit: Audit,
    actor: CurrentActor,
    employee_id: Annotated[UUID, Path()],
) -> list[BenefitPlanResponse]:
    """Active plans the employee could still enroll in."""
    authorize_audited(
        audit, actor, Operation.VIEW_EMPLOYEE_RECORDS, employee_id, "Employee", employee_id
    )
    plans = BenefitLedger(db, audit).available_plans_for(employee_id)
    return [BenefitPlanResponse.model_validate(p) for p in plans]
