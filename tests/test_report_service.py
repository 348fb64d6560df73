"""Tests for department and salary trend reports."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from hr_payroll.calculators.engine import PayrollEngine
from hr_payroll.calculators.types import Bonus
from hr_payroll.errors import NotFoundError, PermissionDeniedError
from hr_payroll.services.report_service import ReportService


@pytest.fixture
def engine(session, audit) -> PayrollEngine:
    return PayrollEngine(session, audit)


@pytest.fixture
def reports(session, audit, directory) -> ReportService:
    return ReportService(session, audit, directory)


def _pay(engine, employee, month, actor, bonus=None):
    start = date(2024, month, 1)
    end = date(2024, month, 28)
    bonuses = [Bonus("Bonus", Decimal(bonus))] if bonus else []
    engine.generate_and_save(employee.employee_id, start, end, bonuses, [], actor)


class TestDepartmentExpenditure:

    def test_totals_and_benefit_breakdown(
        self, reports, engine, benefit_ledger, make_employee, health_plan, flat_tax, admin
    ):
        ann = make_employee("ann", salary=Decimal("3000"))
        ben = make_employee("ben", salary=Decimal("4000"))
        benefit_ledger.enroll(ann.employee_id, health_plan.plan_id, admin)
        _pay(engine, ann, 1, admin)
        _pay(engine, ann, 2, admin, bonus="500")
        _pay(engine, ben, 2, admin)

        report = reports.department_expenditure(
            ann.department_id, date(2024, 1, 1), date(2024, 2, 28), admin
        )

        assert report.department_name == "Engineering"
        assert report.employees_processed == 2
        assert report.total_salary_expenditure == Decimal("3000") + Decimal("3500") + Decimal("4000")
        assert report.total_benefits_deducted == Decimal("400.00")
        assert report.benefit_distribution == {"Health Contribution": Decimal("400.00")}

    def test_window_intersection(self, reports, engine, alice, admin):
        _pay(engine, alice, 1, admin)
        _pay(engine, alice, 3, admin)

        # Overlaps only the tail of January
        report = reports.department_expenditure(
            alice.department_id, date(2024, 1, 20), date(2024, 2, 10), admin
        )

        assert report.employees_processed == 1
        assert report.total_salary_expenditure == Decimal("5000")

    def test_other_departments_excluded(
        self, reports, engine, directory, make_employee, alice, admin
    ):
        sales = directory.add_department("Sales", admin)
        seller = make_employee("seller", department=sales)
        _pay(engine, alice, 1, admin)
        _pay(engine, seller, 1, admin)

        report = reports.department_expenditure(
            sales.department_id, date(2024, 1, 1), date(2024, 1, 31), admin
        )

        assert report.employees_processed == 1
        assert report.total_salary_expenditure == seller.salary

    def test_empty_department(self, reports, directory, admin):
        empty = directory.add_department("Empty", admin)

        report = reports.department_expenditure(
            empty.department_id, date(2024, 1, 1), date(2024, 12, 31), admin
        )

        assert report.employees_processed == 0
        assert report.total_salary_expenditure == Decimal("0")
        assert report.benefit_distribution == {}

    def test_unknown_department(self, reports, admin):
        with pytest.raises(NotFoundError):
            reports.department_expenditure(uuid4(), date(2024, 1, 1), date(2024, 1, 31), admin)

    def test_employee_denied(self, reports, alice, actor_for):
        with pytest.raises(PermissionDeniedError):
            reports.department_expenditure(
                alice.department_id, date(2024, 1, 1), date(2024, 1, 31), actor_for(alice)
            )


class TestSalaryTrend:

    def test_points_ordered_by_period_end(self, reports, engine, alice, directory, admin):
        _pay(engine, alice, 3, admin)
        _pay(engine, alice, 1, admin)
        directory.update_salary(alice.employee_id, Decimal("5500"), admin)
        _pay(engine, alice, 2, admin)

        trend = reports.salary_trend(alice.employee_id, admin)

        assert trend.employee_name == alice.full_name
        assert [p.period_end.month for p in trend.salary_history] == [1, 2, 3]
        assert [p.gross_salary for p in trend.salary_history] == [
            Decimal("5000"), Decimal("5500"), Decimal("5000"),
        ]

    def test_employee_sees_own_trend(self, reports, alice, actor_for):
        trend = reports.salary_trend(alice.employee_id, actor_for(alice))

        assert trend.salary_history == []

    def test_employee_cannot_see_others(self, reports, alice, make_employee, actor_for):
        with pytest.raises(PermissionDeniedError):
            reports.salary_trend(alice.employee_id, actor_for(make_employee("nosy")))

    def test_unknown_employee(self, reports, hr_manager):
        with pytest.raises(NotFoundError):
            reports.salary_trend(uuid4(), hr_manager)
