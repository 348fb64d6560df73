"""Tests for benefit plans and enrollments."""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from hr_payroll.errors import NotFoundError, PermissionDeniedError, ValidationFailedError


class TestBenefitPlans:

    def test_add_and_list(self, benefit_ledger, health_plan, admin):
        dental = benefit_ledger.add_plan("Dental", Decimal("25"), admin, is_active=False)

        assert [p.name for p in benefit_ledger.list_plans()] == ["Dental", "Health"]
        assert [p.plan_id for p in benefit_ledger.list_plans(active_only=True)] == [
            health_plan.plan_id
        ]
        assert benefit_ledger.get_plan(dental.plan_id).is_active is False

    def test_negative_contribution_rejected(self, benefit_ledger, admin):
        with pytest.raises(ValidationFailedError):
            benefit_ledger.add_plan("Broken", Decimal("-1"), admin)

    def test_employee_cannot_add_plan(self, benefit_ledger, alice, actor_for):
        with pytest.raises(PermissionDeniedError):
            benefit_ledger.add_plan("Perk", Decimal("0"), actor_for(alice))


class TestEnrollment:

    def test_self_enroll(self, benefit_ledger, alice, health_plan, actor_for, audit):
        selection = benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, actor_for(alice))

        assert selection.is_active is True
        assert selection.unenrolled_at is None
        assert [s.selection_id for s in benefit_ledger.active_selections_for(alice.employee_id)] == [
            selection.selection_id
        ]
        assert audit.entries()[-1].action == "BenefitEnrolled"

    def test_cannot_enroll_someone_else(
        self, benefit_ledger, make_employee, alice, health_plan, actor_for
    ):
        bob = make_employee("bob")

        with pytest.raises(PermissionDeniedError):
            benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, actor_for(bob))

        assert benefit_ledger.selections_for(alice.employee_id) == []

    def test_hr_can_enroll_anyone(self, benefit_ledger, alice, health_plan, hr_manager):
        benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, hr_manager)

        assert len(benefit_ledger.active_selections_for(alice.employee_id)) == 1

    def test_inactive_plan_not_found(self, benefit_ledger, alice, admin):
        plan = benefit_ledger.add_plan("Retired", Decimal("10"), admin, is_active=False)

        with pytest.raises(NotFoundError):
            benefit_ledger.enroll(alice.employee_id, plan.plan_id, admin)

    def test_unknown_plan(self, benefit_ledger, alice, admin):
        with pytest.raises(NotFoundError):
            benefit_ledger.enroll(alice.employee_id, uuid4(), admin)

    def test_unknown_employee(self, benefit_ledger, health_plan, admin):
        with pytest.raises(NotFoundError):
            benefit_ledger.enroll(uuid4(), health_plan.plan_id, admin)

    def test_enrolling_twice_creates_new_selection(
        self, benefit_ledger, alice, health_plan, admin
    ):
        first = benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, admin)
        second = benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, admin)

        assert first.selection_id != second.selection_id
        assert len(benefit_ledger.active_selections_for(alice.employee_id)) == 2

    def test_available_plans_exclude_enrolled(
        self, benefit_ledger, alice, health_plan, admin
    ):
        dental = benefit_ledger.add_plan("Dental", Decimal("25"), admin)
        benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, admin)

        assert [p.plan_id for p in benefit_ledger.available_plans_for(alice.employee_id)] == [
            dental.plan_id
        ]


class TestUnenrollment:

    def test_unenroll_records_date(self, benefit_ledger, alice, health_plan, actor_for):
        actor = actor_for(alice)
        selection = benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, actor)

        ended = benefit_ledger.unenroll(selection.selection_id, actor)

        assert ended.is_active is False
        assert ended.unenrolled_at is not None
        assert benefit_ledger.active_selections_for(alice.employee_id) == []
        assert len(benefit_ledger.selections_for(alice.employee_id)) == 1

    def test_unenroll_twice_not_found(self, benefit_ledger, alice, health_plan, admin):
        selection = benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, admin)
        benefit_ledger.unenroll(selection.selection_id, admin)

        with pytest.raises(NotFoundError):
            benefit_ledger.unenroll(selection.selection_id, admin)

    def test_cannot_unenroll_someone_else(
        self, benefit_ledger, make_employee, alice, health_plan, admin, actor_for
    ):
        bob = make_employee("bob")
        selection = benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, admin)

        with pytest.raises(PermissionDeniedError):
            benefit_ledger.unenroll(selection.selection_id, actor_for(bob))

        assert benefit_ledger.active_selections_for(alice.employee_id) != []

    def test_deactivate_before_enrollment_rejected(
        self, benefit_ledger, alice, health_plan, admin
    ):
        selection = benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, admin)

        with pytest.raises(ValidationFailedError):
            selection.deactivate(selection.enrolled_at - timedelta(days=1))
