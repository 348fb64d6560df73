"""Monthly payroll for every employee."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from hr_payroll.calculators.engine import PayrollEngine
from hr_payroll.calculators.types import PayrollCalculation
from hr_payroll.database import commit_or_raise
from hr_payroll.errors import DuplicatePeriodError, NotFoundError, ValidationFailedError
from hr_payroll.models import PayrollRecord
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Operation
from hr_payroll.services.base import AuditedService

logger = logging.getLogger(__name__)


def month_bounds(period_month: date) -> tuple[date, date]:
    """First and last calendar day of the month containing ``period_month``."""
    last_day = calendar.monthrange(period_month.year, period_month.month)[1]
    return (
        date(period_month.year, period_month.month, 1),
        date(period_month.year, period_month.month, last_day),
    )


@dataclass
class BatchRunResult:
    """Outcome of one batch run."""

    period_start: date
    period_end: date
    succeeded: int = 0
    skipped_or_failed: int = 0
    record_ids: list[UUID] = field(default_factory=list)
    failures: dict[UUID, str] = field(default_factory=dict)


class BatchPayrollRunner(AuditedService):
    """Generates one payroll record per employee for a calendar month.

    Per-employee problems are counted and never abort the run. All new
    records are committed together once every employee has been processed.
    """

    def __init__(
        self,
        session: Session,
        audit: AuditService | None = None,
        engine: PayrollEngine | None = None,
    ):
        super().__init__(session, audit)
        self.engine = engine or PayrollEngine(session, self.audit)

    def run_for_all(self, period_month: date, actor: Actor) -> BatchRunResult:
        self._authorize(actor, Operation.RUN_BATCH_PAYROLL, entity_kind="BatchPayroll")

        period_start, period_end = month_bounds(period_month)
        result = BatchRunResult(period_start=period_start, period_end=period_end)
        label = period_start.strftime("%B %Y")

        self.audit.record(actor, "BatchPayrollStart", f"Batch payroll run started for {label}")
        logger.info("Batch payroll for %s started by %s", label, actor.username)

        seen: set[UUID] = set()
        generated: list[PayrollCalculation] = []
        for employee in self.engine.directory.all_employees():
            employee_id = employee.employee_id
            try:
                if employee_id in seen:
                    raise DuplicatePeriodError(employee_id, period_start, period_end)
                self.engine.ensure_unique_period(employee_id, period_start, period_end)
                calc = self.engine.calculate(employee_id, period_start, period_end)
            except (DuplicatePeriodError, NotFoundError, ValidationFailedError) as e:
                logger.warning("Skipping employee %s: %s", employee_id, e)
                result.skipped_or_failed += 1
                result.failures[employee_id] = str(e)
                self.audit.record(
                    actor,
                    "BatchPayslipSkipped",
                    f"Employee {employee_id} skipped in batch for {label}: {e}",
                    "Employee",
                    employee_id,
                )
                continue

            seen.add(employee_id)
            generated.append(calc)
            result.record_ids.append(calc.record_id)
            result.succeeded += 1

        if generated:
            with self._audit_failure(actor, "BatchPayrollFailed", "BatchPayroll", label):
                self.session.add_all([PayrollRecord.from_calculation(c) for c in generated])
                commit_or_raise(self.session)

        for calc in generated:
            self.audit.record(
                actor,
                "BatchPayslipGenerated",
                f"Payslip generated for employee {calc.employee_id} in batch for {label}. "
                f"Net pay: {calc.net_pay}",
                "PayrollRecord",
                calc.record_id,
            )

        logger.info(
            "Batch payroll for %s complete: %d succeeded, %d skipped or failed",
            label, result.succeeded, result.skipped_or_failed,
        )
        self.audit.record(
            actor,
            "BatchPayrollComplete",
            f"Batch payroll for {label} complete. Success: {result.succeeded}, "
            f"Skipped/Failed: {result.skipped_or_failed}",
        )
        return result
