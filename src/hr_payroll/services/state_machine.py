"""Leave request state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from hr_payroll.errors import ValidationFailedError


class LeaveStatus(str, Enum):
    """Leave request status values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class InvalidTransitionError(ValidationFailedError):
    """Raised when a request is actioned from a state that does not allow it."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = getattr(from_status, "value", from_status)
        self.to_status = getattr(to_status, "value", to_status)
        self.reason = reason
        msg = f"Invalid transition from '{self.from_status}' to '{self.to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class LeaveStateMachine:
    """State machine for leave request status transitions.

    Allowed transitions:
    - pending → approved
    - pending → rejected
    - pending → cancelled
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        LeaveStatus.PENDING: [
            LeaveStatus.APPROVED,
            LeaveStatus.REJECTED,
            LeaveStatus.CANCELLED,
        ],
        LeaveStatus.APPROVED: [],
        LeaveStatus.REJECTED: [],
        LeaveStatus.CANCELLED: [],
    }

    # Approved leave is the only kind that blocks overlapping requests
    # and consumes balance
    BLOCKING = {LeaveStatus.APPROVED}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Raise InvalidTransitionError if the transition is not allowed."""
        if not cls.can_transition(from_status, to_status):
            reason = None
            if cls.is_terminal(from_status):
                reason = f"request is already {getattr(from_status, 'value', from_status)}"
            raise InvalidTransitionError(from_status, to_status, reason)

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in cls.VALID_TRANSITIONS and not cls.VALID_TRANSITIONS[status]

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        return cls.VALID_TRANSITIONS.get(current_status, [])
