"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import UUID

from hr_payroll.errors import ValidationFailedError

CENT = Decimal("0.01")


class LineType(str, Enum):
    """Pay line kinds."""

    BONUS = "BONUS"
    DEDUCTION = "DEDUCTION"


class LineCategory(str, Enum):
    """Where a line came from."""

    ADHOC = "ADHOC"
    TAX = "TAX"
    BENEFIT = "BENEFIT"


@dataclass(frozen=True)
class Bonus:
    """Ad-hoc addition to gross pay."""

    description: str
    amount: Decimal

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise ValidationFailedError("Bonus description cannot be empty")
        if self.amount.quantize(CENT, rounding=ROUND_HALF_UP) <= 0:
            raise ValidationFailedError(
                f"Bonus amount must be at least 0.01 after rounding to cents, got {self.amount}"
            )


@dataclass(frozen=True)
class Deduction:
    """Amount subtracted from gross pay."""

    description: str
    amount: Decimal

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise ValidationFailedError("Deduction description cannot be empty")
        if self.amount < 0:
            raise ValidationFailedError(
                f"Deduction amount cannot be negative, got {self.amount}"
            )


@dataclass(frozen=True)
class PayLine:
    """A bonus or deduction as it appears on a payroll record.

    Amounts are always non-negative; ``line_type`` carries the direction.
    """

    line_type: LineType
    category: LineCategory
    description: str
    amount: Decimal


@dataclass(frozen=True)
class PayrollCalculation:
    """Immutable result of calculating one employee's pay for one period.

    GROSS = base_salary + Σ(BONUS)
    TOTAL_DEDUCTIONS = Σ(DEDUCTION)
    NET = GROSS - TOTAL_DEDUCTIONS
    """

    record_id: UUID
    employee_id: UUID
    period_start: date
    period_end: date
    base_salary: Decimal
    lines: tuple[PayLine, ...]
    hours_worked: Decimal | None = None
    engine_version: str = "1.0.0"

    @property
    def bonuses(self) -> tuple[PayLine, ...]:
        return tuple(l for l in self.lines if l.line_type == LineType.BONUS)

    @property
    def deductions(self) -> tuple[PayLine, ...]:
        return tuple(l for l in self.lines if l.line_type == LineType.DEDUCTION)

    @property
    def gross_pay(self) -> Decimal:
        return self.base_salary + sum((b.amount for b in self.bonuses), Decimal("0"))

    @property
    def total_deductions(self) -> Decimal:
        return sum((d.amount for d in self.deductions), Decimal("0"))

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay - self.total_deductions


@dataclass
class EmployeeCalculationContext:
    """Working state while one employee's pay is assembled."""

    employee_id: UUID
    period_start: date
    period_end: date
    base_salary: Decimal = Decimal("0")
    lines: list[PayLine] = field(default_factory=list)

    @property
    def running_gross(self) -> Decimal:
        return self.base_salary + sum(
            (l.amount for l in self.lines if l.line_type == LineType.BONUS),
            Decimal("0"),
        )
