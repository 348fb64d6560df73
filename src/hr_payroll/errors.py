"""Error kinds surfaced by the payroll and leave core."""

from __future__ import annotations

from datetime import date
from typing import Any


class PayrollError(Exception):
    """Base class for all domain errors.

    ``code`` is stable and safe to expose to API clients.
    """

    code = "PAYROLL_ERROR"


class NotFoundError(PayrollError):
    """Raised when an employee, request, plan, rate or department is missing."""

    code = "NOT_FOUND"

    def __init__(self, entity_kind: str, entity_id: Any):
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        super().__init__(f"{entity_kind} {entity_id} not found")


class PermissionDeniedError(PayrollError):
    """Raised when the actor's role or ownership check fails."""

    code = "PERMISSION_DENIED"

    def __init__(self, username: str, operation: str, reason: str | None = None):
        self.username = username
        self.operation = operation
        self.reason = reason
        msg = f"User '{username}' is not allowed to perform '{operation}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ValidationFailedError(PayrollError):
    """Raised for malformed input, bad date ordering or an already-actioned request."""

    code = "VALIDATION_FAILED"


class OverlapError(PayrollError):
    """Raised when a leave interval collides with an approved one."""

    code = "LEAVE_OVERLAP"

    def __init__(self, employee_id: Any, start_date: date, end_date: date):
        self.employee_id = employee_id
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Leave {start_date} to {end_date} for employee {employee_id} "
            "overlaps an approved leave"
        )


class InsufficientBalanceError(PayrollError):
    """Raised when the leave balance does not cover the requested days."""

    code = "INSUFFICIENT_BALANCE"

    def __init__(self, employee_id: Any, balance: int, requested_days: int):
        self.employee_id = employee_id
        self.balance = balance
        self.requested_days = requested_days
        super().__init__(
            f"Employee {employee_id} has {balance} leave day(s), "
            f"{requested_days} requested"
        )


class DuplicatePeriodError(PayrollError):
    """Raised when a payroll record already exists for the employee and span."""

    code = "DUPLICATE_PERIOD"

    def __init__(self, employee_id: Any, period_start: date, period_end: date):
        self.employee_id = employee_id
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Payroll record for employee {employee_id} "
            f"for {period_start} to {period_end} already exists"
        )


class PersistenceFailedError(PayrollError):
    """Raised when the record store rejects a write. Never retried here."""

    code = "PERSISTENCE_FAILED"


class ImmutableRecordError(PayrollError):
    """Raised on any attempt to modify a stored payroll record or audit entry."""

    code = "IMMUTABLE_RECORD"
