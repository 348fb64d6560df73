"""Tests for leave request state machine."""

import pytest

from hr_payroll.errors import ValidationFailedError
from hr_payroll.services.state_machine import (
    InvalidTransitionError,
    LeaveStateMachine,
    LeaveStatus,
)


class TestLeaveStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        assert LeaveStateMachine.can_transition("pending", "approved") is True
        assert LeaveStateMachine.can_transition("pending", "rejected") is True
        assert LeaveStateMachine.can_transition("pending", "cancelled") is True

    def test_terminal_states(self):
        for status in ("approved", "rejected", "cancelled"):
            assert LeaveStateMachine.is_terminal(status) is True
            assert LeaveStateMachine.get_next_statuses(status) == []
        assert LeaveStateMachine.is_terminal("pending") is False

    def test_invalid_transitions(self):
        assert LeaveStateMachine.can_transition("approved", "rejected") is False
        assert LeaveStateMachine.can_transition("rejected", "approved") is False
        assert LeaveStateMachine.can_transition("cancelled", "pending") is False
        assert LeaveStateMachine.can_transition("approved", "approved") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            LeaveStateMachine.validate_transition("approved", "rejected")

        assert exc_info.value.from_status == "approved"
        assert exc_info.value.to_status == "rejected"
        assert "already approved" in str(exc_info.value)

    def test_invalid_transition_is_a_validation_failure(self):
        with pytest.raises(ValidationFailedError):
            LeaveStateMachine.validate_transition(LeaveStatus.REJECTED, LeaveStatus.APPROVED)

    def test_enum_values_match_stored_strings(self):
        assert LeaveStatus.PENDING == "pending"
        assert LeaveStateMachine.can_transition(LeaveStatus.PENDING.value, LeaveStatus.APPROVED)
