"""Leave requests, approvals and balance consumption."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_payroll.database import commit_or_raise
from hr_payroll.errors import NotFoundError, OverlapError, ValidationFailedError
from hr_payroll.models import LeaveRequest
from hr_payroll.models.base import utcnow
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Operation
from hr_payroll.services.base import AuditedService
from hr_payroll.services.directory import Directory
from hr_payroll.services.state_machine import LeaveStateMachine, LeaveStatus

logger = logging.getLogger(__name__)


class LeaveLedger(AuditedService):
    """Owns the leave request lifecycle.

    Approved leave is the only status that blocks overlapping requests and
    consumes balance. The balance debit goes through the Directory and is
    committed in the same unit of work as the approval.
    """

    def __init__(
        self,
        session: Session,
        audit: AuditService | None = None,
        directory: Directory | None = None,
    ):
        super().__init__(session, audit)
        self.directory = directory or Directory(session, self.audit)

    # === Lifecycle ===

    def request(
        self,
        employee_id: UUID,
        start_date: date,
        end_date: date,
        reason: str,
        requester: Actor,
    ) -> LeaveRequest:
        """Submit a pending request for the requester's own employee record."""
        with self._audit_failure(requester, "LeaveRequestFailed", "LeaveRequest", employee_id):
            if end_date < start_date:
                raise ValidationFailedError(
                    f"Leave end date {end_date} is before start date {start_date}"
                )
            if start_date < date.today():
                raise ValidationFailedError(f"Leave cannot start in the past ({start_date})")

            self._authorize(
                requester, Operation.REQUEST_LEAVE, employee_id,
                entity_kind="LeaveRequest", entity_id=employee_id,
            )

            employee = self.directory.employee_by_id(employee_id)
            if employee is None:
                raise NotFoundError("Employee", employee_id)

            if self.has_approved_overlap(employee_id, start_date, end_date):
                raise OverlapError(employee_id, start_date, end_date)

            leave = LeaveRequest(
                employee_id=employee_id,
                start_date=start_date,
                end_date=end_date,
                reason=reason or "",
                status=LeaveStatus.PENDING.value,
                requested_at=utcnow(),
            )
            self.session.add(leave)
            commit_or_raise(self.session)

        logger.info(
            "Leave request %s submitted by %s for %s to %s",
            leave.request_id, requester.username, start_date, end_date,
        )
        self.audit.record(
            requester,
            "LeaveRequested",
            f"Leave {start_date} to {end_date} ({leave.duration_days} day(s)) requested",
            "LeaveRequest",
            leave.request_id,
        )
        return leave

    def approve(self, request_id: UUID, actor: Actor) -> LeaveRequest:
        """Approve a pending request and debit the employee's balance.

        A request that shares a day with leave approved since it was filed is
        refused with OverlapError, so overlapping days are never debited twice.
        """
        self._authorize(
            actor, Operation.APPROVE_LEAVE, entity_kind="LeaveRequest", entity_id=request_id
        )

        with self._audit_failure(actor, "LeaveApprovalFailed", "LeaveRequest", request_id):
            leave = self._get_or_raise(request_id)
            LeaveStateMachine.validate_transition(leave.status, LeaveStatus.APPROVED)

            employee = self.directory.employee_by_id(leave.employee_id)
            if employee is None:
                raise NotFoundError("Employee", leave.employee_id)

            if self.has_approved_overlap(leave.employee_id, leave.start_date, leave.end_date):
                raise OverlapError(leave.employee_id, leave.start_date, leave.end_date)

            days = leave.duration_days
            # Raises InsufficientBalanceError before anything is changed
            remaining = self.directory.debit_leave_balance(employee, days)

            leave.status = LeaveStatus.APPROVED.value
            leave.actioned_at = utcnow()
            leave.actioned_by = actor.username
            commit_or_raise(self.session)

        logger.info(
            "Leave request %s approved by %s; %d day(s) debited, %d remaining",
            request_id, actor.username, days, remaining,
        )
        self.audit.record(
            actor,
            "LeaveApproved",
            f"{days} day(s) debited from employee {employee.employee_id}; "
            f"{remaining} remaining",
            "LeaveRequest",
            request_id,
        )
        return leave

    def reject(self, request_id: UUID, actor: Actor, notes: str = "") -> LeaveRequest:
        """Reject a pending request. The balance is untouched."""
        self._authorize(
            actor, Operation.REJECT_LEAVE, entity_kind="LeaveRequest", entity_id=request_id
        )

        with self._audit_failure(actor, "LeaveRejectionFailed", "LeaveRequest", request_id):
            leave = self._get_or_raise(request_id)
            LeaveStateMachine.validate_transition(leave.status, LeaveStatus.REJECTED)

            leave.status = LeaveStatus.REJECTED.value
            leave.actioned_at = utcnow()
            leave.actioned_by = actor.username
            leave.action_notes = notes or None
            commit_or_raise(self.session)

        self.audit.record(
            actor,
            "LeaveRejected",
            f"Leave request rejected. Notes: {notes or '-'}",
            "LeaveRequest",
            request_id,
        )
        return leave

    def cancel(self, request_id: UUID, requester: Actor) -> LeaveRequest:
        """Withdraw one's own pending request."""
        with self._audit_failure(requester, "LeaveCancellationFailed", "LeaveRequest", request_id):
            leave = self._get_or_raise(request_id)

            self._authorize(
                requester, Operation.CANCEL_LEAVE, leave.employee_id,
                entity_kind="LeaveRequest", entity_id=request_id,
            )
            LeaveStateMachine.validate_transition(leave.status, LeaveStatus.CANCELLED)

            leave.status = LeaveStatus.CANCELLED.value
            leave.actioned_at = utcnow()
            leave.actioned_by = requester.username
            commit_or_raise(self.session)

        self.audit.record(
            requester, "LeaveCancelled", "Leave request cancelled by requester",
            "LeaveRequest", request_id,
        )
        return leave

    # === Queries ===

    def get_request(self, request_id: UUID) -> LeaveRequest | None:
        return self.session.get(LeaveRequest, request_id)

    def requests_for_employee(self, employee_id: UUID) -> list[LeaveRequest]:
        """The employee's requests, most recently filed first."""
        result = self.session.execute(
            select(LeaveRequest)
            .where(LeaveRequest.employee_id == employee_id)
            .order_by(LeaveRequest.requested_at.desc())
        )
        return list(result.scalars().all())

    def pending_requests(self) -> list[LeaveRequest]:
        """Pending requests, oldest first."""
        result = self.session.execute(
            select(LeaveRequest)
            .where(LeaveRequest.status == LeaveStatus.PENDING.value)
            .order_by(LeaveRequest.requested_at)
        )
        return list(result.scalars().all())

    def all_requests(self) -> list[LeaveRequest]:
        result = self.session.execute(
            select(LeaveRequest).order_by(LeaveRequest.requested_at.desc())
        )
        return list(result.scalars().all())

    def balance_for(self, employee_id: UUID) -> int:
        employee = self.directory.employee_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee.leave_balance

    def has_approved_overlap(self, employee_id: UUID, start_date: date, end_date: date) -> bool:
        """True if any approved request of the employee shares a day with the span."""
        result = self.session.execute(
            select(LeaveRequest.request_id).where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status.in_([s.value for s in LeaveStateMachine.BLOCKING]),
                LeaveRequest.start_date <= end_date,
                LeaveRequest.end_date >= start_date,
            )
        )
        return result.first() is not None

    def _get_or_raise(self, request_id: UUID) -> LeaveRequest:
        leave = self.get_request(request_id)
        if leave is None:
            raise NotFoundError("LeaveRequest", request_id)
        return leave
