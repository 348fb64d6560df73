"""Payroll record, tax rate and benefit models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.errors import ImmutableRecordError, ValidationFailedError
from hr_payroll.models.base import Base, TimestampMixin, as_utc

if TYPE_CHECKING:
    from hr_payroll.calculators.types import PayrollCalculation


# ===== Payroll Records =====


class PayrollRecord(Base, TimestampMixin):
    """Stored result of one payroll calculation.

    Rows are insert-only. Gross, total deductions and net are derived from
    the lines and never stored.
    """

    __tablename__ = "payroll_record"

    record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    hours_worked: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    base_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    engine_version: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "period_start",
            "period_end",
            name="payroll_record_employee_period_unique",
        ),
        CheckConstraint("period_end >= period_start", name="payroll_record_dates_check"),
        CheckConstraint("base_salary >= 0", name="payroll_record_base_non_negative"),
    )

    lines: Mapped[list[PayrollLine]] = relationship(
        back_populates="record",
        order_by="PayrollLine.sequence",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @classmethod
    def from_calculation(cls, calc: PayrollCalculation) -> PayrollRecord:
        """Build an insertable row from a finished calculation."""
        record = cls(
            record_id=calc.record_id,
            employee_id=calc.employee_id,
            period_start=calc.period_start,
            period_end=calc.period_end,
            hours_worked=calc.hours_worked,
            base_salary=calc.base_salary,
            engine_version=calc.engine_version,
        )
        for seq, line in enumerate(calc.lines):
            record.lines.append(
                PayrollLine(
                    sequence=seq,
                    line_type=line.line_type.value,
                    category=line.category.value,
                    description=line.description,
                    amount=line.amount,
                )
            )
        return record

    def to_calculation(self) -> PayrollCalculation:
        """Rehydrate the immutable calculation view of this row."""
        from hr_payroll.calculators.types import (
            LineCategory,
            LineType,
            PayLine,
            PayrollCalculation,
        )

        return PayrollCalculation(
            record_id=self.record_id,
            employee_id=self.employee_id,
            period_start=self.period_start,
            period_end=self.period_end,
            base_salary=self.base_salary,
            lines=tuple(
                PayLine(
                    line_type=LineType(line.line_type),
                    category=LineCategory(line.category),
                    description=line.description,
                    amount=line.amount,
                )
                for line in self.lines
            ),
            hours_worked=self.hours_worked,
            engine_version=self.engine_version,
        )

    @property
    def gross_pay(self) -> Decimal:
        return self.to_calculation().gross_pay

    @property
    def total_deductions(self) -> Decimal:
        return self.to_calculation().total_deductions

    @property
    def net_pay(self) -> Decimal:
        return self.to_calculation().net_pay


class PayrollLine(Base):
    """A bonus or deduction line on a payroll record."""

    __tablename__ = "payroll_line"

    line_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    record_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_record.record_id", ondelete="CASCADE"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    line_type: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("record_id", "sequence", name="payroll_line_sequence_unique"),
        CheckConstraint(
            "line_type IN ('BONUS', 'DEDUCTION')",
            name="payroll_line_type_check",
        ),
        CheckConstraint(
            "category IN ('ADHOC', 'TAX', 'BENEFIT')",
            name="payroll_line_category_check",
        ),
        CheckConstraint("amount >= 0", name="payroll_line_amount_non_negative"),
    )

    record: Mapped[PayrollRecord] = relationship(back_populates="lines")


@event.listens_for(PayrollRecord, "before_update")
@event.listens_for(PayrollLine, "before_update")
def _refuse_payroll_update(mapper: Any, connection: Any, target: Any) -> None:
    raise ImmutableRecordError(
        f"{type(target).__name__} rows are immutable; issue a new record instead"
    )


# ===== Tax Rates =====


class TaxRate(Base, TimestampMixin):
    """Flat tax rate. At most one row is active at a time."""

    __tablename__ = "tax_rate"

    tax_rate_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(7, 6), nullable=False)
    threshold_min: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    threshold_max: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "percentage >= 0 AND percentage <= 1",
            name="tax_rate_percentage_range",
        ),
        CheckConstraint(
            "threshold_min IS NULL OR threshold_min >= 0",
            name="tax_rate_threshold_min_check",
        ),
        CheckConstraint(
            "threshold_max IS NULL OR threshold_max >= 0",
            name="tax_rate_threshold_max_check",
        ),
    )

    @staticmethod
    def validate(
        name: str,
        percentage: Decimal,
        threshold_min: Decimal | None = None,
        threshold_max: Decimal | None = None,
    ) -> None:
        """Validate field values before a row is created."""
        if not name or not name.strip():
            raise ValidationFailedError("Tax rate name cannot be empty")
        if percentage < 0 or percentage > 1:
            raise ValidationFailedError(
                f"Percentage must be between 0 and 1, got {percentage}"
            )
        if threshold_min is not None and threshold_min < 0:
            raise ValidationFailedError("Minimum threshold cannot be negative")
        if threshold_max is not None and threshold_max < 0:
            raise ValidationFailedError("Maximum threshold cannot be negative")
        if (
            threshold_min is not None
            and threshold_max is not None
            and threshold_max < threshold_min
        ):
            raise ValidationFailedError(
                "Maximum threshold cannot be less than minimum threshold"
            )


# ===== Benefits =====


class BenefitPlan(Base, TimestampMixin):
    """Benefit plan with recurring monthly contributions."""

    __tablename__ = "benefit_plan"

    plan_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    monthly_contribution_employee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    monthly_contribution_employer: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "monthly_contribution_employee >= 0",
            name="benefit_plan_employee_contribution_check",
        ),
        CheckConstraint(
            "monthly_contribution_employer >= 0",
            name="benefit_plan_employer_contribution_check",
        ),
    )

    selections: Mapped[list[EmployeeBenefitSelection]] = relationship(
        back_populates="plan"
    )


class EmployeeBenefitSelection(Base):
    """An employee's enrollment in a benefit plan, active or historical."""

    __tablename__ = "employee_benefit_selection"

    selection_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    plan_id: Mapped[UUID] = mapped_column(
        ForeignKey("benefit_plan.plan_id", ondelete="RESTRICT"),
        nullable=False,
    )
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    unenrolled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "unenrolled_at IS NULL OR unenrolled_at >= enrolled_at",
            name="benefit_selection_dates_check",
        ),
    )

    plan: Mapped[BenefitPlan] = relationship(back_populates="selections")

    def deactivate(self, unenrolled_at: datetime) -> None:
        """End this selection. May happen only once."""
        if not self.is_active:
            raise ValidationFailedError(f"Selection {self.selection_id} is already inactive")
        if as_utc(unenrolled_at) < as_utc(self.enrolled_at):
            raise ValidationFailedError(
                "Unenrollment date cannot be before the enrollment date"
            )
        self.is_active = False
        self.unenrolled_at = unenrolled_at
