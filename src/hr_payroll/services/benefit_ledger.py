"""Benefit plans and employee enrollments."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from hr_payroll.database import commit_or_raise
from hr_payroll.errors import NotFoundError, ValidationFailedError
from hr_payroll.models import BenefitPlan, Employee, EmployeeBenefitSelection
from hr_payroll.models.base import utcnow
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Operation
from hr_payroll.services.base import AuditedService

logger = logging.getLogger(__name__)


class BenefitLedger(AuditedService):
    """Tracks enrollments and their recurring employee-side contribution.

    ``enroll`` always inserts a new selection and never merges with an
    earlier one; callers use ``available_plans_for`` to avoid offering a plan
    the employee is already actively enrolled in.
    """

    def __init__(self, session: Session, audit: AuditService | None = None):
        super().__init__(session, audit)

    # === Plans ===

    def add_plan(
        self,
        name: str,
        monthly_contribution_employee: Decimal,
        actor: Actor,
        description: str = "",
        monthly_contribution_employer: Decimal = Decimal("0"),
        is_active: bool = True,
    ) -> BenefitPlan:
        self._authorize(actor, Operation.MANAGE_BENEFIT_PLANS, entity_kind="BenefitPlan")

        if not name or not name.strip():
            raise ValidationFailedError("Benefit plan name cannot be empty")
        if monthly_contribution_employee < 0:
            raise ValidationFailedError("Employee contribution cannot be negative")
        if monthly_contribution_employer < 0:
            raise ValidationFailedError("Employer contribution cannot be negative")

        plan = BenefitPlan(
            name=name.strip(),
            description=description or "",
            monthly_contribution_employee=monthly_contribution_employee,
            monthly_contribution_employer=monthly_contribution_employer,
            is_active=is_active,
        )
        self.session.add(plan)
        commit_or_raise(self.session)
        self.audit.record(
            actor, "BenefitPlanAdded", f"Benefit plan '{plan.name}' added",
            "BenefitPlan", plan.plan_id,
        )
        return plan

    def get_plan(self, plan_id: UUID) -> BenefitPlan | None:
        return self.session.get(BenefitPlan, plan_id)

    def list_plans(self, active_only: bool = False) -> list[BenefitPlan]:
        query = select(BenefitPlan).order_by(BenefitPlan.name)
        if active_only:
            query = query.where(BenefitPlan.is_active.is_(True))
        return list(self.session.execute(query).scalars().all())

    # === Selections ===

    def active_selections_for(self, employee_id: UUID) -> list[EmployeeBenefitSelection]:
        """Active selections for an employee, in enrollment order."""
        result = self.session.execute(
            select(EmployeeBenefitSelection)
            .where(
                EmployeeBenefitSelection.employee_id == employee_id,
                EmployeeBenefitSelection.is_active.is_(True),
            )
            .order_by(EmployeeBenefitSelection.enrolled_at)
            .options(selectinload(EmployeeBenefitSelection.plan))
        )
        return list(result.scalars().all())

    def selections_for(self, employee_id: UUID) -> list[EmployeeBenefitSelection]:
        """Full enrollment history for an employee."""
        result = self.session.execute(
            select(EmployeeBenefitSelection)
            .where(EmployeeBenefitSelection.employee_id == employee_id)
            .order_by(EmployeeBenefitSelection.enrolled_at)
            .options(selectinload(EmployeeBenefitSelection.plan))
        )
        return list(result.scalars().all())

    def available_plans_for(self, employee_id: UUID) -> list[BenefitPlan]:
        """Active plans the employee is not actively enrolled in."""
        enrolled = {s.plan_id for s in self.active_selections_for(employee_id)}
        return [p for p in self.list_plans(active_only=True) if p.plan_id not in enrolled]

    def enroll(self, employee_id: UUID, plan_id: UUID, actor: Actor) -> EmployeeBenefitSelection:
        """Create a new active selection dated now."""
        self._authorize(
            actor, Operation.ENROLL_BENEFIT, employee_id,
            entity_kind="EmployeeBenefitSelection", entity_id=employee_id,
        )

        if self.session.get(Employee, employee_id) is None:
            raise NotFoundError("Employee", employee_id)
        plan = self.get_plan(plan_id)
        if plan is None or not plan.is_active:
            raise NotFoundError("BenefitPlan", plan_id)

        selection = EmployeeBenefitSelection(
            employee_id=employee_id,
            plan_id=plan.plan_id,
            enrolled_at=utcnow(),
            is_active=True,
        )
        self.session.add(selection)
        commit_or_raise(self.session)

        logger.info("Employee %s enrolled in plan %s", employee_id, plan.name)
        self.audit.record(
            actor, "BenefitEnrolled",
            f"Employee {employee_id} enrolled in '{plan.name}'",
            "EmployeeBenefitSelection", selection.selection_id,
        )
        return selection

    def unenroll(self, selection_id: UUID, actor: Actor) -> EmployeeBenefitSelection:
        """Deactivate an active selection, dated now."""
        selection = self.session.get(EmployeeBenefitSelection, selection_id)
        if selection is None or not selection.is_active:
            raise NotFoundError("EmployeeBenefitSelection", selection_id)

        self._authorize(
            actor, Operation.UNENROLL_BENEFIT, selection.employee_id,
            entity_kind="EmployeeBenefitSelection", entity_id=selection_id,
        )

        selection.deactivate(utcnow())
        commit_or_raise(self.session)

        self.audit.record(
            actor, "BenefitUnenrolled",
            f"Selection {selection_id} for employee {selection.employee_id} ended",
            "EmployeeBenefitSelection", selection_id,
        )
        return selection
