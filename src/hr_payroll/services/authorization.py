"""Role-based authorization gate.

Every mutating operation names itself with an ``Operation``; ``authorize``
is the only place where roles and ownership are compared.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from hr_payroll.errors import PermissionDeniedError


class Role(str, Enum):
    """Authorization roles."""

    ADMIN = "admin"
    HR_MANAGER = "hr_manager"
    EMPLOYEE = "employee"


@dataclass(frozen=True)
class Actor:
    """The acting user, passed explicitly into every core operation."""

    username: str
    role: Role
    employee_id: UUID | None = None

    def owns(self, employee_id: UUID) -> bool:
        """True if this actor's linked employee identity is ``employee_id``."""
        return self.employee_id is not None and self.employee_id == employee_id


class Operation(str, Enum):
    """Operations guarded by the gate."""

    GENERATE_PAYSLIP = "payroll.generate"
    RUN_BATCH_PAYROLL = "payroll.run_batch"
    MANAGE_TAX_RATES = "tax_rates.manage"
    MANAGE_BENEFIT_PLANS = "benefit_plans.manage"
    ENROLL_BENEFIT = "benefits.enroll"
    UNENROLL_BENEFIT = "benefits.unenroll"
    REQUEST_LEAVE = "leave.request"
    CANCEL_LEAVE = "leave.cancel"
    APPROVE_LEAVE = "leave.approve"
    REJECT_LEAVE = "leave.reject"
    MANAGE_EMPLOYEES = "employees.manage"
    VIEW_EMPLOYEE_RECORDS = "employees.view"
    VIEW_DEPARTMENT_REPORT = "reports.department"
    VIEW_SALARY_TREND = "reports.salary_trend"


_PRIVILEGED = frozenset({Role.ADMIN, Role.HR_MANAGER})

# Roles allowed to perform each operation on anyone's behalf.
REQUIRED_ROLES: dict[Operation, frozenset[Role]] = {
    Operation.GENERATE_PAYSLIP: _PRIVILEGED,
    Operation.RUN_BATCH_PAYROLL: _PRIVILEGED,
    Operation.MANAGE_TAX_RATES: _PRIVILEGED,
    Operation.MANAGE_BENEFIT_PLANS: _PRIVILEGED,
    Operation.ENROLL_BENEFIT: _PRIVILEGED,
    Operation.UNENROLL_BENEFIT: _PRIVILEGED,
    Operation.REQUEST_LEAVE: frozenset(),
    Operation.CANCEL_LEAVE: frozenset(),
    Operation.APPROVE_LEAVE: _PRIVILEGED,
    Operation.REJECT_LEAVE: _PRIVILEGED,
    Operation.MANAGE_EMPLOYEES: _PRIVILEGED,
    Operation.VIEW_EMPLOYEE_RECORDS: _PRIVILEGED,
    Operation.VIEW_DEPARTMENT_REPORT: _PRIVILEGED,
    Operation.VIEW_SALARY_TREND: _PRIVILEGED,
}

# Operations an actor may also perform on their own employee record.
SELF_SERVICE: frozenset[Operation] = frozenset({
    Operation.ENROLL_BENEFIT,
    Operation.UNENROLL_BENEFIT,
    Operation.REQUEST_LEAVE,
    Operation.CANCEL_LEAVE,
    Operation.VIEW_EMPLOYEE_RECORDS,
    Operation.VIEW_SALARY_TREND,
})


def is_allowed(
    actor: Actor, operation: Operation, subject_employee_id: UUID | None = None
) -> bool:
    """Check whether ``actor`` may perform ``operation``."""
    if actor.role in REQUIRED_ROLES[operation]:
        return True
    return (
        operation in SELF_SERVICE
        and subject_employee_id is not None
        and actor.owns(subject_employee_id)
    )


def authorize(
    actor: Actor, operation: Operation, subject_employee_id: UUID | None = None
) -> None:
    """Raise PermissionDeniedError unless ``actor`` may perform ``operation``."""
    if not is_allowed(actor, operation, subject_employee_id):
        reason = None
        if operation in SELF_SERVICE and subject_employee_id is not None:
            reason = "only allowed for your own employee record"
        raise PermissionDeniedError(actor.username, operation.value, reason)
