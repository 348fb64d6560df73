"""Tests for the authorization gate."""

from uuid import uuid4

import pytest

from hr_payroll.errors import PermissionDeniedError
from hr_payroll.services.authorization import (
    REQUIRED_ROLES,
    Actor,
    Operation,
    Role,
    authorize,
    is_allowed,
)


class TestAuthorize:

    def test_every_operation_has_an_entry(self):
        assert set(REQUIRED_ROLES) == set(Operation)

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.HR_MANAGER])
    def test_privileged_roles(self, role):
        actor = Actor(username="boss", role=role)

        for operation in (
            Operation.GENERATE_PAYSLIP,
            Operation.RUN_BATCH_PAYROLL,
            Operation.MANAGE_TAX_RATES,
            Operation.APPROVE_LEAVE,
            Operation.VIEW_DEPARTMENT_REPORT,
        ):
            authorize(actor, operation)

    def test_employee_denied_privileged_operations(self):
        actor = Actor(username="emp", role=Role.EMPLOYEE, employee_id=uuid4())

        with pytest.raises(PermissionDeniedError) as exc_info:
            authorize(actor, Operation.RUN_BATCH_PAYROLL)

        assert exc_info.value.username == "emp"
        assert exc_info.value.operation == "payroll.run_batch"

    def test_self_service_requires_ownership(self):
        own_id = uuid4()
        actor = Actor(username="emp", role=Role.EMPLOYEE, employee_id=own_id)

        assert is_allowed(actor, Operation.REQUEST_LEAVE, own_id) is True
        assert is_allowed(actor, Operation.REQUEST_LEAVE, uuid4()) is False
        assert is_allowed(actor, Operation.REQUEST_LEAVE) is False

    def test_unlinked_actor_owns_nothing(self):
        actor = Actor(username="contractor", role=Role.EMPLOYEE)

        assert actor.owns(uuid4()) is False
        assert is_allowed(actor, Operation.VIEW_SALARY_TREND, uuid4()) is False

    def test_leave_request_is_self_only(self):
        """Even managers file leave only for themselves."""
        manager_id = uuid4()
        manager = Actor(username="mgr", role=Role.HR_MANAGER, employee_id=manager_id)

        assert is_allowed(manager, Operation.REQUEST_LEAVE, manager_id) is True
        assert is_allowed(manager, Operation.REQUEST_LEAVE, uuid4()) is False

    def test_denial_message_mentions_ownership(self):
        actor = Actor(username="emp", role=Role.EMPLOYEE, employee_id=uuid4())

        with pytest.raises(PermissionDeniedError, match="own employee record"):
            authorize(actor, Operation.ENROLL_BENEFIT, uuid4())
