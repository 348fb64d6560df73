"""Read-only aggregates over stored payroll records."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_payroll.calculators.types import LineCategory, LineType
from hr_payroll.errors import NotFoundError, ValidationFailedError
from hr_payroll.models import PayrollRecord
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Operation
from hr_payroll.services.base import AuditedService
from hr_payroll.services.directory import Directory

logger = logging.getLogger(__name__)


@dataclass
class DepartmentPayrollReport:
    """Payroll expenditure for a department over a window."""

    department_id: UUID
    department_name: str
    period_start: date
    period_end: date
    employees_processed: int = 0
    total_salary_expenditure: Decimal = Decimal("0")
    total_benefits_deducted: Decimal = Decimal("0")
    benefit_distribution: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class SalaryDataPoint:
    period_start: date
    period_end: date
    gross_salary: Decimal


@dataclass
class EmployeeSalaryTrend:
    employee_id: UUID
    employee_name: str
    salary_history: list[SalaryDataPoint] = field(default_factory=list)


class ReportService(AuditedService):
    """Department expenditure and salary growth reports.

    Department membership is the employee's current department; payroll
    records do not carry the department they were issued under.
    """

    def __init__(
        self,
        session: Session,
        audit: AuditService | None = None,
        directory: Directory | None = None,
    ):
        super().__init__(session, audit)
        self.directory = directory or Directory(session, self.audit)

    def department_expenditure(
        self,
        department_id: UUID,
        period_start: date,
        period_end: date,
        actor: Actor,
    ) -> DepartmentPayrollReport:
        self._authorize(
            actor, Operation.VIEW_DEPARTMENT_REPORT,
            entity_kind="Department", entity_id=department_id,
        )
        if period_end < period_start:
            raise ValidationFailedError(
                f"Report end {period_end} is before start {period_start}"
            )

        department = self.directory.department_by_id(department_id)
        if department is None:
            raise NotFoundError("Department", department_id)

        report = DepartmentPayrollReport(
            department_id=department_id,
            department_name=department.name,
            period_start=period_start,
            period_end=period_end,
        )

        member_ids = [e.employee_id for e in self.directory.employees_in_department(department_id)]
        if not member_ids:
            logger.info("No employees currently in department %s", department.name)
            return report

        records = self.session.execute(
            select(PayrollRecord).where(
                PayrollRecord.employee_id.in_(member_ids),
                PayrollRecord.period_end >= period_start,
                PayrollRecord.period_start <= period_end,
            )
        ).scalars().all()

        distribution: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        processed: set[UUID] = set()
        for record in records:
            processed.add(record.employee_id)
            calc = record.to_calculation()
            report.total_salary_expenditure += calc.gross_pay
            for line in calc.lines:
                if line.line_type == LineType.DEDUCTION and line.category == LineCategory.BENEFIT:
                    report.total_benefits_deducted += line.amount
                    distribution[line.description] += line.amount

        report.employees_processed = len(processed)
        report.benefit_distribution = dict(distribution)

        self.audit.record(
            actor,
            "DepartmentReportGenerated",
            f"Expenditure report for '{department.name}' {period_start} to {period_end}",
            "Department",
            department_id,
        )
        return report

    def salary_trend(self, employee_id: UUID, actor: Actor) -> EmployeeSalaryTrend:
        self._authorize(
            actor, Operation.VIEW_SALARY_TREND, employee_id,
            entity_kind="Employee", entity_id=employee_id,
        )

        employee = self.directory.employee_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)

        records = self.session.execute(
            select(PayrollRecord)
            .where(PayrollRecord.employee_id == employee_id)
            .order_by(PayrollRecord.period_end)
        ).scalars().all()

        return EmployeeSalaryTrend(
            employee_id=employee_id,
            employee_name=employee.full_name,
            salary_history=[
                SalaryDataPoint(
                    period_start=r.period_start,
                    period_end=r.period_end,
                    gross_salary=r.gross_pay,
                )
                for r in records
            ],
        )
