"""Seed a development database with a department, staff, a tax rate and plans.

Usage:
    python -m scripts.seed_demo [--tax-rate 0.10]

Runs through the regular services so every row is validated and audited.
"""

from __future__ import annotations

import argparse
import logging
from datetime import date
from decimal import Decimal

from hr_payroll.calculators.tax_resolver import TaxPolicyResolver
from hr_payroll.config import configure_logging
from hr_payroll.database import get_session
from hr_payroll.services.authorization import Actor, Role
from hr_payroll.services.benefit_ledger import BenefitLedger
from hr_payroll.services.directory import Directory

logger = logging.getLogger(__name__)

SEED_ACTOR = Actor(username="seed", role=Role.ADMIN)

STAFF = [
    ("j.doe", "Jane Doe", "Software Engineer", Decimal("5000.00")),
    ("r.roe", "Richard Roe", "QA Analyst", Decimal("4200.00")),
    ("m.major", "Mary Major", "Engineering Manager", Decimal("7500.00")),
]

PLANS = [
    ("Health", "Medical and hospital cover", Decimal("200.00"), Decimal("400.00")),
    ("Dental", "Dental cover", Decimal("25.00"), Decimal("25.00")),
]


def seed(tax_rate: Decimal) -> None:
    with get_session() as session:
        directory = Directory(session)
        if directory.all_departments():
            logger.info("Database already has departments; nothing to seed")
            return

        department = directory.add_department("Engineering", SEED_ACTOR)
        for username, full_name, position, salary in STAFF:
            directory.add_employee(
                username, full_name, position, department.department_id,
                salary, date.today(), SEED_ACTOR,
            )

        TaxPolicyResolver(session).add_rate("Standard Income Tax", tax_rate, SEED_ACTOR)

        ledger = BenefitLedger(session)
        for name, description, employee_share, employer_share in PLANS:
            ledger.add_plan(
                name, employee_share, SEED_ACTOR,
                description=description,
                monthly_contribution_employer=employer_share,
            )

    logger.info("Seeded %d employee(s) and %d plan(s)", len(STAFF), len(PLANS))


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument(
        "--tax-rate",
        type=Decimal,
        default=Decimal("0.10"),
        help="Flat tax rate as a fraction (default: 0.10)",
    )
    args = parser.parse_args()

    configure_logging()
    seed(args.tax_rate)


if __name__ == "__main__":
    main()
