"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_payroll.calculators.line_builder import LineItemBuilder
from hr_payroll.calculators.tax_resolver import TaxPolicyResolver
from hr_payroll.calculators.types import (
    Bonus,
    Deduction,
    EmployeeCalculationContext,
    PayrollCalculation,
)
from hr_payroll.config import get_settings
from hr_payroll.database import commit_or_raise
from hr_payroll.errors import DuplicatePeriodError, NotFoundError, ValidationFailedError
from hr_payroll.models import PayrollRecord
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Operation
from hr_payroll.services.base import AuditedService
from hr_payroll.services.benefit_ledger import BenefitLedger
from hr_payroll.services.directory import Directory

logger = logging.getLogger(__name__)


class PayrollEngine(AuditedService):
    """Main payroll calculation engine.

    Calculation pipeline (stable order per employee; later steps see the
    running gross produced by earlier ones):
    1) Resolve employee
    2) Seed base salary with the current salary (no pro-ration)
    3) Apply ad-hoc bonuses
    4) Tax the running gross with the active rate, named after the rate
    5) One "<plan> Contribution" deduction per active selection of an active plan
    6) Apply ad-hoc deductions
    7) Return the immutable calculation (gross/net are derived)
    """

    def __init__(
        self,
        session: Session,
        audit: AuditService | None = None,
        directory: Directory | None = None,
        tax_resolver: TaxPolicyResolver | None = None,
        benefit_ledger: BenefitLedger | None = None,
    ):
        super().__init__(session, audit)
        self.directory = directory or Directory(session, self.audit)
        self.tax_resolver = tax_resolver or TaxPolicyResolver(session, self.audit)
        self.benefit_ledger = benefit_ledger or BenefitLedger(session, self.audit)
        self.settings = get_settings()

    def calculate(
        self,
        employee_id: UUID,
        period_start: date,
        period_end: date,
        bonuses: Sequence[Bonus] | None = None,
        deductions: Sequence[Deduction] | None = None,
        hours_worked: Decimal | None = None,
    ) -> PayrollCalculation:
        """Calculate pay for one employee and period. Nothing is persisted."""
        if period_end < period_start:
            raise ValidationFailedError(
                f"Pay period end {period_end} is before start {period_start}"
            )

        # 1) Resolve employee
        employee = self.directory.employee_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)

        # 2) Base salary
        ctx = EmployeeCalculationContext(
            employee_id=employee_id,
            period_start=period_start,
            period_end=period_end,
            base_salary=employee.salary,
        )

        # 3) Bonuses
        for bonus in bonuses or ():
            ctx.lines.append(LineItemBuilder.create_bonus_line(bonus))

        # 4) Tax on running gross
        rate = self.tax_resolver.resolve_active_rate()
        if rate is None:
            logger.warning("No active tax rate for employee %s; tax will be 0", employee_id)
        else:
            # Already rounded to cents: a tax under half a cent adds no line
            tax = self.tax_resolver.tax_owed(rate, ctx.running_gross)
            if tax > 0:
                ctx.lines.append(LineItemBuilder.create_tax_line(rate.name, tax))

        # 5) Benefit contributions
        for selection in self.benefit_ledger.active_selections_for(employee_id):
            plan = selection.plan
            if plan is not None and plan.is_active:
                ctx.lines.append(
                    LineItemBuilder.create_benefit_line(
                        plan.name, plan.monthly_contribution_employee
                    )
                )

        # 6) Ad-hoc deductions
        for deduction in deductions or ():
            ctx.lines.append(LineItemBuilder.create_deduction_line(deduction))

        errors = LineItemBuilder.validate_line_amounts(ctx.lines)
        if errors:
            raise ValidationFailedError("; ".join(errors))

        return PayrollCalculation(
            record_id=uuid4(),
            employee_id=employee_id,
            period_start=period_start,
            period_end=period_end,
            base_salary=ctx.base_salary,
            lines=tuple(ctx.lines),
            hours_worked=hours_worked,
            engine_version=self.settings.engine_version,
        )

    def generate_and_save(
        self,
        employee_id: UUID,
        period_start: date,
        period_end: date,
        bonuses: Sequence[Bonus] | None,
        deductions: Sequence[Deduction] | None,
        actor: Actor,
        hours_worked: Decimal | None = None,
    ) -> tuple[bool, PayrollCalculation]:
        """Calculate and persist a payslip unless one exists for the period.

        Returns (saved, calculation). A duplicate period returns the freshly
        computed calculation with saved=False and writes nothing.
        """
        self._authorize(
            actor, Operation.GENERATE_PAYSLIP, entity_kind="Payroll", entity_id=employee_id
        )

        try:
            calc = self.calculate(
                employee_id, period_start, period_end, bonuses, deductions, hours_worked
            )
        except NotFoundError as e:
            self.audit.record(actor, "PayrollCalcFailed", str(e), "Payroll", employee_id)
            raise

        try:
            self.ensure_unique_period(employee_id, period_start, period_end)
        except DuplicatePeriodError as e:
            logger.warning("%s; payslip not saved", e)
            self.audit.record(
                actor,
                "GeneratePayslipSkipped",
                f"{e}. NetPay: {calc.net_pay}",
                "PayrollRecord",
                calc.record_id,
            )
            return False, calc

        self.session.add(PayrollRecord.from_calculation(calc))
        commit_or_raise(self.session)

        logger.info(
            "Payslip %s saved for employee %s (%s to %s), net %s",
            calc.record_id, employee_id, period_start, period_end, calc.net_pay,
        )
        self.audit.record(
            actor,
            "PayslipGeneratedAndSaved",
            f"Payslip generated for {employee_id}, period {period_start} to "
            f"{period_end}. NetPay: {calc.net_pay}",
            "PayrollRecord",
            calc.record_id,
        )
        return True, calc

    def record_exists(self, employee_id: UUID, period_start: date, period_end: date) -> bool:
        result = self.session.execute(
            select(PayrollRecord.record_id).where(
                PayrollRecord.employee_id == employee_id,
                PayrollRecord.period_start == period_start,
                PayrollRecord.period_end == period_end,
            )
        )
        return result.first() is not None

    def ensure_unique_period(self, employee_id: UUID, period_start: date, period_end: date) -> None:
        """Raise DuplicatePeriodError if a record already covers this key."""
        if self.record_exists(employee_id, period_start, period_end):
            raise DuplicatePeriodError(employee_id, period_start, period_end)

    # === Read access ===

    def records_for_employee(self, employee_id: UUID) -> list[PayrollRecord]:
        """Stored records for an employee, newest period first."""
        result = self.session.execute(
            select(PayrollRecord)
            .where(PayrollRecord.employee_id == employee_id)
            .order_by(PayrollRecord.period_end.desc())
        )
        return list(result.scalars().all())

    def get_record(self, record_id: UUID) -> PayrollRecord | None:
        return self.session.get(PayrollRecord, record_id)
