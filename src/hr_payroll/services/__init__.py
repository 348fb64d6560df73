"""HR payroll services.

The batch runner depends on the calculators package and is imported from
``hr_payroll.services.batch_runner`` directly.
"""

from hr_payroll.services.authorization import Actor, Operation, Role, authorize
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.state_machine import InvalidTransitionError, LeaveStateMachine, LeaveStatus
from hr_payroll.services.directory import Directory
from hr_payroll.services.benefit_ledger import BenefitLedger
from hr_payroll.services.leave_ledger import LeaveLedger

__all__ = [
    "Actor",
    "Operation",
    "Role",
    "authorize",
    "AuditService",
    "InvalidTransitionError",
    "LeaveStateMachine",
    "LeaveStatus",
    "Directory",
    "BenefitLedger",
    "LeaveLedger",
]
