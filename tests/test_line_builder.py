"""Tests for line item builder."""

from decimal import Decimal

import pytest

from hr_payroll.calculators.line_builder import LineItemBuilder
from hr_payroll.calculators.types import (
    Bonus,
    Deduction,
    LineCategory,
    LineType,
    PayLine,
)
from hr_payroll.errors import ValidationFailedError


class TestLineItemBuilder:
    """Test line item builder functionality."""

    def test_round_to_cents(self):
        """Test rounding to 2 decimal places."""
        assert LineItemBuilder.round_to_cents(Decimal("10.125")) == Decimal("10.13")
        assert LineItemBuilder.round_to_cents(Decimal("10.124")) == Decimal("10.12")

        # Half-up rounding
        assert LineItemBuilder.round_to_cents(Decimal("10.135")) == Decimal("10.14")
        assert LineItemBuilder.round_to_cents(Decimal("0.005")) == Decimal("0.01")

    def test_create_bonus_line(self):
        line = LineItemBuilder.create_bonus_line(Bonus("Performance", Decimal("500")))

        assert line.line_type == LineType.BONUS
        assert line.category == LineCategory.ADHOC
        assert line.description == "Performance"
        assert line.amount == Decimal("500.00")

    def test_create_deduction_line(self):
        line = LineItemBuilder.create_deduction_line(Deduction("Loan repayment", Decimal("75.555")))

        assert line.line_type == LineType.DEDUCTION
        assert line.category == LineCategory.ADHOC
        assert line.amount == Decimal("75.56")

    def test_create_tax_line_is_named_after_rate(self):
        line = LineItemBuilder.create_tax_line("Standard Income Tax", Decimal("550"))

        assert line.line_type == LineType.DEDUCTION
        assert line.category == LineCategory.TAX
        assert line.description == "Standard Income Tax"
        assert line.amount == Decimal("550.00")

    def test_create_benefit_line(self):
        line = LineItemBuilder.create_benefit_line("Health", Decimal("200"))

        assert line.line_type == LineType.DEDUCTION
        assert line.category == LineCategory.BENEFIT
        assert line.description == "Health Contribution"
        assert line.amount == Decimal("200.00")

    def test_gross_total_and_net(self):
        """Net = base + bonuses - deductions."""
        lines = [
            PayLine(LineType.BONUS, LineCategory.ADHOC, "Bonus", Decimal("500.00")),
            PayLine(LineType.DEDUCTION, LineCategory.TAX, "Tax", Decimal("550.00")),
            PayLine(LineType.DEDUCTION, LineCategory.BENEFIT, "Health Contribution", Decimal("200.00")),
        ]

        assert LineItemBuilder.calculate_gross(Decimal("5000"), lines) == Decimal("5500.00")
        assert LineItemBuilder.calculate_total_deductions(lines) == Decimal("750.00")
        assert LineItemBuilder.calculate_net(Decimal("5000"), lines) == Decimal("4750.00")

    def test_sum_by_category(self):
        lines = [
            PayLine(LineType.DEDUCTION, LineCategory.TAX, "Tax", Decimal("100.00")),
            PayLine(LineType.DEDUCTION, LineCategory.BENEFIT, "A Contribution", Decimal("20.00")),
            PayLine(LineType.DEDUCTION, LineCategory.BENEFIT, "B Contribution", Decimal("30.00")),
            PayLine(LineType.BONUS, LineCategory.ADHOC, "Bonus", Decimal("999.00")),
        ]

        totals = LineItemBuilder.sum_by_category(lines)

        assert totals[LineCategory.TAX] == Decimal("100.00")
        assert totals[LineCategory.BENEFIT] == Decimal("50.00")
        assert totals[LineCategory.ADHOC] == Decimal("0")

    def test_validate_line_amounts(self):
        lines = [
            PayLine(LineType.BONUS, LineCategory.ADHOC, "Zero bonus", Decimal("0")),
            PayLine(LineType.DEDUCTION, LineCategory.ADHOC, "Negative", Decimal("-1")),
            PayLine(LineType.DEDUCTION, LineCategory.ADHOC, "Fine", Decimal("0")),
        ]

        errors = LineItemBuilder.validate_line_amounts(lines)

        assert len(errors) == 2
        assert "Line 0" in errors[0]
        assert "Line 1" in errors[1]


class TestAdjustments:
    """Test ad-hoc bonus and deduction validation."""

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10"), Decimal("0.004")])
    def test_bonus_must_be_positive(self, amount):
        with pytest.raises(ValidationFailedError):
            Bonus("Bonus", amount)

    def test_half_cent_bonus_rounds_up(self):
        line = LineItemBuilder.create_bonus_line(Bonus("Tip", Decimal("0.005")))

        assert line.amount == Decimal("0.01")

    def test_deduction_may_be_zero(self):
        assert Deduction("Nothing", Decimal("0")).amount == Decimal("0")

    def test_negative_deduction_rejected(self):
        with pytest.raises(ValidationFailedError):
            Deduction("Refund", Decimal("-5"))

    @pytest.mark.parametrize("description", ["", "   "])
    def test_description_required(self, description):
        with pytest.raises(ValidationFailedError):
            Bonus(description, Decimal("10"))
        with pytest.raises(ValidationFailedError):
            Deduction(description, Decimal("10"))
