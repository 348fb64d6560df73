"""Property-based tests for payroll and tax-rate invariants.

These use hypothesis to generate adjustments and sequences of rate changes
and check that the pay identity and the single-active-rate rule always hold.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st
from hypothesis.stateful import Bundle, RuleBasedStateMachine, invariant, rule
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hr_payroll.calculators.engine import PayrollEngine
from hr_payroll.calculators.line_builder import LineItemBuilder
from hr_payroll.calculators.tax_resolver import TaxPolicyResolver
from hr_payroll.calculators.types import Bonus, Deduction, LineCategory
from hr_payroll.models import Base, TaxRate
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Role

PERIOD_START = date(2024, 4, 1)
PERIOD_END = date(2024, 4, 30)

ADMIN = Actor(username="admin", role=Role.ADMIN)

BONUS_AMOUNTS = st.decimals(min_value=Decimal("0.01"), max_value=Decimal("100000"), places=2)
DEDUCTION_AMOUNTS = st.decimals(min_value=Decimal("0"), max_value=Decimal("100000"), places=2)
PERCENTAGES = st.decimals(min_value=Decimal("0"), max_value=Decimal("1"), places=4)


def _memory_session_factory() -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    return sessionmaker(engine, class_=Session, expire_on_commit=False, autoflush=False)


# =============================================================================
# Pay identity
# =============================================================================


@pytest.fixture
def engine(session, audit) -> PayrollEngine:
    return PayrollEngine(session, audit)


@pytest.fixture
def enrolled_alice(alice, benefit_ledger, health_plan, admin):
    """Alice with an active 200 health plan selection."""
    benefit_ledger.enroll(alice.employee_id, health_plan.plan_id, admin)
    return alice


class TestPayIdentity:

    @given(
        bonus_amounts=st.lists(BONUS_AMOUNTS, max_size=5),
        deduction_amounts=st.lists(DEDUCTION_AMOUNTS, max_size=5),
    )
    @settings(
        max_examples=50,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    def test_net_is_gross_minus_deductions(
        self, engine, enrolled_alice, flat_tax, bonus_amounts, deduction_amounts
    ):
        calc = engine.calculate(
            enrolled_alice.employee_id, PERIOD_START, PERIOD_END,
            bonuses=[Bonus(f"Bonus {i}", a) for i, a in enumerate(bonus_amounts)],
            deductions=[Deduction(f"Deduction {i}", a) for i, a in enumerate(deduction_amounts)],
        )

        assert calc.gross_pay == calc.base_salary + sum(bonus_amounts, Decimal("0"))
        assert calc.net_pay == calc.gross_pay - calc.total_deductions
        assert calc.net_pay == LineItemBuilder.calculate_net(calc.base_salary, list(calc.lines))
        assert all(line.amount >= 0 for line in calc.lines)

        (tax_line,) = [l for l in calc.lines if l.category == LineCategory.TAX]
        assert tax_line.amount == LineItemBuilder.round_to_cents(calc.gross_pay * Decimal("0.10"))

    @given(
        percentage=PERCENTAGES,
        amount=st.decimals(min_value=Decimal("-1000"), max_value=Decimal("1000000"), places=2),
    )
    @settings(max_examples=100)
    def test_tax_owed_is_bounded_and_in_cents(self, percentage, amount):
        rate = TaxRate(name="Flat", percentage=percentage, is_active=True)

        tax = TaxPolicyResolver.tax_owed(rate, amount)

        assert tax >= 0
        assert tax <= max(amount, Decimal("0"))
        assert tax == LineItemBuilder.round_to_cents(tax)


# =============================================================================
# Single active rate (stateful)
# =============================================================================


class TaxRateMachine(RuleBasedStateMachine):
    """Random sequences of add, activate and deactivate.

    After every step at most one rate is active, and it is the one the
    sequence last switched on.
    """

    rates = Bundle("rates")

    def __init__(self):
        super().__init__()
        factory = _memory_session_factory()
        self.session = factory()
        self.resolver = TaxPolicyResolver(self.session, AuditService(_memory_session_factory()))
        self.expected_active = None

    @rule(target=rates, percentage=PERCENTAGES, is_active=st.booleans())
    def add_rate(self, percentage, is_active):
        rate = self.resolver.add_rate("Rate", percentage, ADMIN, is_active=is_active)
        if is_active:
            self.expected_active = rate.tax_rate_id
        return rate.tax_rate_id

    @rule(tax_rate_id=rates)
    def activate(self, tax_rate_id):
        self.resolver.set_active(tax_rate_id, ADMIN)
        self.expected_active = tax_rate_id

    @rule(tax_rate_id=rates)
    def deactivate(self, tax_rate_id):
        self.resolver.deactivate(tax_rate_id, ADMIN)
        if self.expected_active == tax_rate_id:
            self.expected_active = None

    @invariant()
    def at_most_one_active(self):
        active = [r for r in self.resolver.list_rates() if r.is_active]
        assert len(active) <= 1

    @invariant()
    def resolver_returns_last_activated(self):
        resolved = self.resolver.resolve_active_rate()
        assert (resolved.tax_rate_id if resolved else None) == self.expected_active

    def teardown(self):
        self.session.close()


TaxRateMachine.TestCase.settings = settings(
    max_examples=25, stateful_step_count=15, deadline=None
)
TestTaxRateStateful = TaxRateMachine.TestCase
