"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from hr_payroll.calculators.types import PayrollCalculation


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str


# ============================================================================
# Directory schemas
# ============================================================================


class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1)


class DepartmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    department_id: UUID
    name: str


class EmployeeCreate(BaseModel):
    """Schema for adding an employee."""

    username: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    position: str = Field(min_length=1)
    department_id: UUID
    salary: Decimal = Field(gt=0)
    date_of_joining: date
    leave_balance: int | None = Field(default=None, ge=0)


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    username: str
    full_name: str
    position: str
    department_id: UUID
    salary: Decimal
    date_of_joining: date
    leave_balance: int


class SalaryUpdate(BaseModel):
    new_salary: Decimal = Field(gt=0)


class PromotionRequest(BaseModel):
    """Schema for a promotion or transfer."""

    new_position: str = Field(min_length=1)
    new_department_id: UUID
    new_salary: Decimal = Field(gt=0)
    effective_date: date


# ============================================================================
# Payroll schemas
# ============================================================================


class AdjustmentIn(BaseModel):
    """An ad-hoc bonus or deduction."""

    description: str
    amount: Decimal


class PayslipRequest(BaseModel):
    """Schema for calculating or generating a payslip."""

    employee_id: UUID
    period_start: date
    period_end: date
    bonuses: list[AdjustmentIn] = Field(default_factory=list)
    deductions: list[AdjustmentIn] = Field(default_factory=list)
    hours_worked: Decimal | None = Field(default=None, ge=0)


class PayLineResponse(BaseModel):
    line_type: str
    category: str
    description: str
    amount: Decimal


class PayrollCalculationResponse(BaseModel):
    """Schema for a calculated or stored payroll record."""

    record_id: UUID
    employee_id: UUID
    period_start: date
    period_end: date
    base_salary: Decimal
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    hours_worked: Decimal | None = None
    engine_version: str
    lines: list[PayLineResponse]
    saved: bool | None = None

    @classmethod
    def from_calculation(
        cls, calc: PayrollCalculation, saved: bool | None = None
    ) -> "PayrollCalculationResponse":
        return cls(
            record_id=calc.record_id,
            employee_id=calc.employee_id,
            period_start=calc.period_start,
            period_end=calc.period_end,
            base_salary=calc.base_salary,
            gross_pay=calc.gross_pay,
            total_deductions=calc.total_deductions,
            net_pay=calc.net_pay,
            hours_worked=calc.hours_worked,
            engine_version=calc.engine_version,
            lines=[
                PayLineResponse(
                    line_type=line.line_type.value,
                    category=line.category.value,
                    description=line.description,
                    amount=line.amount,
                )
                for line in calc.lines
            ],
            saved=saved,
        )


class BatchRunRequest(BaseModel):
    """Any date inside the month to run."""

    period_month: date


class BatchRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_start: date
    period_end: date
    succeeded: int
    skipped_or_failed: int
    record_ids: list[UUID]
    failures: dict[UUID, str]


# ============================================================================
# Leave schemas
# ============================================================================


class LeaveRequestCreate(BaseModel):
    employee_id: UUID
    start_date: date
    end_date: date
    reason: str = ""


class LeaveRejectRequest(BaseModel):
    notes: str = ""


class LeaveRequestResponse(BaseModel):
    """Schema for a leave request."""

    model_config = ConfigDict(from_attributes=True)

    request_id: UUID
    employee_id: UUID
    start_date: date
    end_date: date
    reason: str
    status: str
    duration_days: int
    requested_at: datetime
    actioned_at: datetime | None = None
    actioned_by: str | None = None
    action_notes: str | None = None


class LeaveBalanceResponse(BaseModel):
    employee_id: UUID
    leave_balance: int


# ============================================================================
# Tax and benefit schemas
# ============================================================================


class TaxRateCreate(BaseModel):
    """Schema for adding a tax rate. Percentage is a fraction in [0, 1]."""

    name: str = Field(min_length=1)
    percentage: Decimal = Field(ge=0, le=1)
    threshold_min: Decimal | None = Field(default=None, ge=0)
    threshold_max: Decimal | None = Field(default=None, ge=0)
    is_active: bool = True


class TaxRateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tax_rate_id: UUID
    name: str
    percentage: Decimal
    threshold_min: Decimal | None = None
    threshold_max: Decimal | None = None
    is_active: bool


class BenefitPlanCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    monthly_contribution_employee: Decimal = Field(ge=0)
    monthly_contribution_employer: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True


class BenefitPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan_id: UUID
    name: str
    description: str
    monthly_contribution_employee: Decimal
    monthly_contribution_employer: Decimal
    is_active: bool


class EnrollmentRequest(BaseModel):
    employee_id: UUID
    plan_id: UUID


class BenefitSelectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    selection_id: UUID
    employee_id: UUID
    plan_id: UUID
    enrolled_at: datetime
    unenrolled_at: datetime | None = None
    is_active: bool


# ============================================================================
# Report schemas
# ============================================================================


class DepartmentReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    department_id: UUID
    department_name: str
    period_start: date
    period_end: date
    employees_processed: int
    total_salary_expenditure: Decimal
    total_benefits_deducted: Decimal
    benefit_distribution: dict[str, Decimal]


class SalaryDataPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_start: date
    period_end: date
    gross_salary: Decimal


class SalaryTrendResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_name: str
    salary_history: list[SalaryDataPointResponse]
