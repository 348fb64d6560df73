"""Pytest fixtures for HR payroll tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hr_payroll.models import Base, BenefitPlan, Department, Employee
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Role
from hr_payroll.services.benefit_ledger import BenefitLedger
from hr_payroll.services.directory import Directory
from hr_payroll.calculators.tax_resolver import TaxPolicyResolver

# In-memory SQLite shared across threads so the API tests see the same data
TEST_DATABASE_URL = "sqlite://"


def _memory_engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_engine():
    """Create test database engine with a fresh schema."""
    engine = _memory_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> sessionmaker[Session]:
    return sessionmaker(db_engine, class_=Session, expire_on_commit=False, autoflush=False)


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    """Create a database session for each test."""
    with session_factory() as session:
        yield session


@pytest.fixture
def audit_engine():
    """Separate in-memory database for the audit trail."""
    engine = _memory_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def audit(audit_engine) -> AuditService:
    return AuditService(sessionmaker(audit_engine, class_=Session, expire_on_commit=False))


# ============================================================================
# Actors
# ============================================================================


@pytest.fixture
def admin() -> Actor:
    return Actor(username="admin", role=Role.ADMIN)


@pytest.fixture
def hr_manager() -> Actor:
    return Actor(username="hr.manager", role=Role.HR_MANAGER)


@pytest.fixture
def actor_for() -> Callable[[Employee], Actor]:
    """Build the employee-role actor linked to an employee."""

    def _actor(employee: Employee) -> Actor:
        return Actor(
            username=employee.username,
            role=Role.EMPLOYEE,
            employee_id=employee.employee_id,
        )

    return _actor


# ============================================================================
# Services and seed data
# ============================================================================


@pytest.fixture
def directory(session: Session, audit: AuditService) -> Directory:
    return Directory(session, audit)


@pytest.fixture
def tax_resolver(session: Session, audit: AuditService) -> TaxPolicyResolver:
    return TaxPolicyResolver(session, audit)


@pytest.fixture
def benefit_ledger(session: Session, audit: AuditService) -> BenefitLedger:
    return BenefitLedger(session, audit)


@pytest.fixture
def engineering(directory: Directory, admin: Actor) -> Department:
    """The Engineering department."""
    return directory.add_department("Engineering", admin)


@pytest.fixture
def make_employee(
    directory: Directory, engineering: Department, admin: Actor
) -> Callable[..., Employee]:
    """Factory adding an employee to Engineering."""

    def _make(
        username: str,
        salary: Decimal = Decimal("5000.00"),
        leave_balance: int = 15,
        department: Department | None = None,
    ) -> Employee:
        return directory.add_employee(
            username=username,
            full_name=username.replace(".", " ").title(),
            position="Engineer",
            department_id=(department or engineering).department_id,
            salary=salary,
            date_of_joining=date.today() - timedelta(days=365),
            actor=admin,
            leave_balance=leave_balance,
        )

    return _make


@pytest.fixture
def alice(make_employee) -> Employee:
    """Employee earning 5000 with 15 leave days."""
    return make_employee("alice")


@pytest.fixture
def flat_tax(tax_resolver: TaxPolicyResolver, admin: Actor):
    """Active 10% flat tax."""
    return tax_resolver.add_rate("Flat Tax", Decimal("0.10"), admin)


@pytest.fixture
def health_plan(benefit_ledger: BenefitLedger, admin: Actor) -> BenefitPlan:
    """Active plan with a 200 monthly employee contribution."""
    return benefit_ledger.add_plan(
        "Health", Decimal("200.00"), admin,
        description="Medical cover",
        monthly_contribution_employer=Decimal("400.00"),
    )


@pytest.fixture
def next_week() -> date:
    return date.today() + timedelta(days=7)
