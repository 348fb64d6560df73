"""Payroll calculation engine."""

from hr_payroll.calculators.engine import PayrollEngine
from hr_payroll.calculators.line_builder import LineItemBuilder
from hr_payroll.calculators.tax_resolver import TaxPolicyResolver
from hr_payroll.calculators.types import Bonus, Deduction, PayLine, PayrollCalculation

__all__ = [
    "PayrollEngine",
    "LineItemBuilder",
    "TaxPolicyResolver",
    "Bonus",
    "Deduction",
    "PayLine",
    "PayrollCalculation",
]
