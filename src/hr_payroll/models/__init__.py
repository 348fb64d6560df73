"""ORM models."""

from hr_payroll.models.audit import AuditLogEntry
from hr_payroll.models.base import Base, TimestampMixin
from hr_payroll.models.employee import Department, Employee, JobRecord
from hr_payroll.models.leave import LeaveRequest
from hr_payroll.models.payroll import (
    BenefitPlan,
    EmployeeBenefitSelection,
    PayrollLine,
    PayrollRecord,
    TaxRate,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "AuditLogEntry",
    "Department",
    "Employee",
    "JobRecord",
    "LeaveRequest",
    "BenefitPlan",
    "EmployeeBenefitSelection",
    "PayrollLine",
    "PayrollRecord",
    "TaxRate",
]
