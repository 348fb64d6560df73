"""Tax policy resolution: one active flat rate."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_payroll.calculators.line_builder import LineItemBuilder
from hr_payroll.database import commit_or_raise
from hr_payroll.errors import NotFoundError
from hr_payroll.models import TaxRate
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Operation
from hr_payroll.services.base import AuditedService

logger = logging.getLogger(__name__)


class TaxPolicyResolver(AuditedService):
    """Selects the active tax rate and computes tax owed.

    Policy:
    - At most one TaxRate is active system-wide
    - Activating a rate deactivates every other rate in the same commit
    - Tax is a flat percentage of the taxable amount; threshold fields are
      stored but not consulted
    """

    def __init__(self, session: Session, audit: AuditService | None = None):
        super().__init__(session, audit)

    def list_rates(self) -> list[TaxRate]:
        """All rates in creation order."""
        result = self.session.execute(
            select(TaxRate).order_by(TaxRate.created_at, TaxRate.name)
        )
        return list(result.scalars().all())

    def get_rate(self, tax_rate_id: UUID) -> TaxRate | None:
        return self.session.get(TaxRate, tax_rate_id)

    def resolve_active_rate(self) -> TaxRate | None:
        """Return the first active rate found, or None."""
        result = self.session.execute(
            select(TaxRate)
            .where(TaxRate.is_active.is_(True))
            .order_by(TaxRate.created_at, TaxRate.name)
        )
        return result.scalars().first()

    @staticmethod
    def tax_owed(rate: TaxRate | None, taxable_amount: Decimal) -> Decimal:
        """Flat tax on ``taxable_amount``; zero for an inactive rate or non-positive amount."""
        if rate is None or not rate.is_active:
            return Decimal("0")
        if taxable_amount <= 0:
            return Decimal("0")
        return LineItemBuilder.round_to_cents(taxable_amount * rate.percentage)

    def add_rate(
        self,
        name: str,
        percentage: Decimal,
        actor: Actor,
        threshold_min: Decimal | None = None,
        threshold_max: Decimal | None = None,
        is_active: bool = True,
    ) -> TaxRate:
        """Create a rate. A rate created active replaces the current active one."""
        self._authorize(actor, Operation.MANAGE_TAX_RATES, entity_kind="TaxRate")
        TaxRate.validate(name, percentage, threshold_min, threshold_max)

        if is_active:
            self._deactivate_all()

        rate = TaxRate(
            name=name.strip(),
            percentage=percentage,
            threshold_min=threshold_min,
            threshold_max=threshold_max,
            is_active=is_active,
        )
        self.session.add(rate)
        commit_or_raise(self.session)

        logger.info("Tax rate %s (%s) added, active=%s", rate.name, rate.percentage, is_active)
        self.audit.record(
            actor,
            "TaxRateAdded",
            f"Tax rate '{rate.name}' at {rate.percentage} added (active={is_active})",
            "TaxRate",
            rate.tax_rate_id,
        )
        return rate

    def set_active(self, tax_rate_id: UUID, actor: Actor) -> TaxRate:
        """Make ``tax_rate_id`` the single active rate."""
        self._authorize(actor, Operation.MANAGE_TAX_RATES, entity_kind="TaxRate", entity_id=tax_rate_id)

        rate = self.get_rate(tax_rate_id)
        if rate is None:
            raise NotFoundError("TaxRate", tax_rate_id)

        deactivated = self._deactivate_all(except_id=tax_rate_id)
        rate.is_active = True
        commit_or_raise(self.session)

        logger.info("Tax rate %s activated; %d other rate(s) deactivated", rate.name, deactivated)
        self.audit.record(
            actor,
            "TaxRateActivated",
            f"Tax rate '{rate.name}' activated; {deactivated} other rate(s) deactivated",
            "TaxRate",
            rate.tax_rate_id,
        )
        return rate

    def deactivate(self, tax_rate_id: UUID, actor: Actor) -> TaxRate:
        """Deactivate a rate, leaving no active rate if it was the active one."""
        self._authorize(actor, Operation.MANAGE_TAX_RATES, entity_kind="TaxRate", entity_id=tax_rate_id)

        rate = self.get_rate(tax_rate_id)
        if rate is None:
            raise NotFoundError("TaxRate", tax_rate_id)

        rate.is_active = False
        commit_or_raise(self.session)
        self.audit.record(
            actor, "TaxRateDeactivated", f"Tax rate '{rate.name}' deactivated", "TaxRate", rate.tax_rate_id
        )
        return rate

    def _deactivate_all(self, except_id: UUID | None = None) -> int:
        """Flip every other active rate to inactive. Caller commits."""
        count = 0
        for other in self.session.execute(
            select(TaxRate).where(TaxRate.is_active.is_(True))
        ).scalars():
            if other.tax_rate_id != except_id:
                other.is_active = False
                count += 1
        return count
