"""Pay line builder with cent rounding."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from hr_payroll.calculators.types import (
    Bonus,
    Deduction,
    LineCategory,
    LineType,
    PayLine,
)


class LineItemBuilder:
    """Builds pay lines and sums them.

    Conventions:
    - Every stored amount is non-negative; BONUS adds, DEDUCTION subtracts
    - Amounts are rounded to cents (ROUND_HALF_UP) when a line is created
    - Tax lines are named after the rate, benefit lines "<plan> Contribution"
    """

    OUTPUT_PRECISION = Decimal("0.01")
    BENEFIT_SUFFIX = "Contribution"

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(LineItemBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def create_bonus_line(bonus: Bonus) -> PayLine:
        """Create a bonus line from an ad-hoc bonus."""
        return PayLine(
            line_type=LineType.BONUS,
            category=LineCategory.ADHOC,
            description=bonus.description,
            amount=LineItemBuilder.round_to_cents(bonus.amount),
        )

    @staticmethod
    def create_deduction_line(deduction: Deduction) -> PayLine:
        """Create a deduction line from an ad-hoc deduction."""
        return PayLine(
            line_type=LineType.DEDUCTION,
            category=LineCategory.ADHOC,
            description=deduction.description,
            amount=LineItemBuilder.round_to_cents(deduction.amount),
        )

    @staticmethod
    def create_tax_line(rate_name: str, amount: Decimal) -> PayLine:
        """Create a tax deduction line named after the rate."""
        return PayLine(
            line_type=LineType.DEDUCTION,
            category=LineCategory.TAX,
            description=rate_name,
            amount=LineItemBuilder.round_to_cents(abs(amount)),
        )

    @staticmethod
    def create_benefit_line(plan_name: str, amount: Decimal) -> PayLine:
        """Create an employee-side benefit contribution line."""
        return PayLine(
            line_type=LineType.DEDUCTION,
            category=LineCategory.BENEFIT,
            description=f"{plan_name} {LineItemBuilder.BENEFIT_SUFFIX}",
            amount=LineItemBuilder.round_to_cents(abs(amount)),
        )

    @staticmethod
    def calculate_gross(base_salary: Decimal, lines: list[PayLine]) -> Decimal:
        """GROSS = base + Σ(BONUS)"""
        gross = base_salary
        for line in lines:
            if line.line_type == LineType.BONUS:
                gross += line.amount
        return LineItemBuilder.round_to_cents(gross)

    @staticmethod
    def calculate_total_deductions(lines: list[PayLine]) -> Decimal:
        """TOTAL = Σ(DEDUCTION)"""
        total = Decimal("0")
        for line in lines:
            if line.line_type == LineType.DEDUCTION:
                total += line.amount
        return LineItemBuilder.round_to_cents(total)

    @staticmethod
    def calculate_net(base_salary: Decimal, lines: list[PayLine]) -> Decimal:
        """NET = GROSS - TOTAL"""
        return LineItemBuilder.calculate_gross(
            base_salary, lines
        ) - LineItemBuilder.calculate_total_deductions(lines)

    @staticmethod
    def validate_line_amounts(lines: list[PayLine]) -> list[str]:
        """Validate line amounts.

        Returns list of error messages (empty if all valid).
        """
        errors: list[str] = []

        for i, line in enumerate(lines):
            if line.line_type == LineType.BONUS and line.amount <= 0:
                errors.append(
                    f"Line {i} (BONUS) has amount {line.amount}, expected positive"
                )
            elif line.line_type == LineType.DEDUCTION and line.amount < 0:
                errors.append(
                    f"Line {i} (DEDUCTION) has amount {line.amount}, expected non-negative"
                )

        return errors

    @staticmethod
    def sum_by_category(lines: list[PayLine]) -> dict[LineCategory, Decimal]:
        """Sum deduction amounts by category."""
        totals: dict[LineCategory, Decimal] = {c: Decimal("0") for c in LineCategory}
        for line in lines:
            if line.line_type == LineType.DEDUCTION:
                totals[line.category] += line.amount
        return totals
