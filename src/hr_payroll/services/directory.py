"""Employee and department directory.

This is the only component that mutates Employee rows. Other services ask
it for changes (for example the leave ledger's balance debit) instead of
editing the shared object themselves.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hr_payroll.config import get_settings
from hr_payroll.database import commit_or_raise
from hr_payroll.errors import InsufficientBalanceError, NotFoundError, ValidationFailedError
from hr_payroll.models import Department, Employee, JobRecord
from hr_payroll.services.audit_service import AuditService
from hr_payroll.services.authorization import Actor, Operation
from hr_payroll.services.base import AuditedService

logger = logging.getLogger(__name__)


class Directory(AuditedService):
    """Resolves employee and department identities and owns employee mutations."""

    def __init__(self, session: Session, audit: AuditService | None = None):
        super().__init__(session, audit)

    # === Lookups ===

    def employee_by_id(self, employee_id: UUID) -> Employee | None:
        return self.session.get(Employee, employee_id)

    def employee_by_username(self, username: str) -> Employee | None:
        result = self.session.execute(
            select(Employee).where(func.lower(Employee.username) == username.strip().lower())
        )
        return result.scalar_one_or_none()

    def department_by_id(self, department_id: UUID) -> Department | None:
        return self.session.get(Department, department_id)

    def all_employees(self) -> list[Employee]:
        result = self.session.execute(
            select(Employee).order_by(Employee.created_at, Employee.full_name)
        )
        return list(result.scalars().all())

    def all_departments(self) -> list[Department]:
        result = self.session.execute(select(Department).order_by(Department.name))
        return list(result.scalars().all())

    def employees_in_department(self, department_id: UUID) -> list[Employee]:
        result = self.session.execute(
            select(Employee).where(Employee.department_id == department_id)
        )
        return list(result.scalars().all())

    # === Mutations ===

    def add_department(self, name: str, actor: Actor) -> Department:
        self._authorize(actor, Operation.MANAGE_EMPLOYEES, entity_kind="Department")
        if not name or not name.strip():
            raise ValidationFailedError("Department name cannot be empty")

        department = Department(name=name.strip())
        self.session.add(department)
        commit_or_raise(self.session)
        self.audit.record(
            actor, "DepartmentAdded", f"Department '{department.name}' added",
            "Department", department.department_id,
        )
        return department

    def add_employee(
        self,
        username: str,
        full_name: str,
        position: str,
        department_id: UUID,
        salary: Decimal,
        date_of_joining: date,
        actor: Actor,
        leave_balance: int | None = None,
    ) -> Employee:
        """Create an employee with an opening job history entry."""
        self._authorize(actor, Operation.MANAGE_EMPLOYEES, entity_kind="Employee", entity_id=username)

        if leave_balance is None:
            leave_balance = get_settings().default_leave_balance
        if not username.strip() or not full_name.strip() or not position.strip():
            raise ValidationFailedError("Username, name and position are required")
        if salary <= 0:
            raise ValidationFailedError(f"Salary must be positive, got {salary}")
        if leave_balance < 0:
            raise ValidationFailedError(f"Leave balance cannot be negative, got {leave_balance}")

        department = self.department_by_id(department_id)
        if department is None:
            raise NotFoundError("Department", department_id)
        if self.employee_by_username(username) is not None:
            raise ValidationFailedError(f"Username '{username}' is already linked to an employee")

        employee = Employee(
            username=username.strip(),
            full_name=full_name.strip(),
            position=position.strip(),
            department=department,
            salary=salary,
            date_of_joining=date_of_joining,
            leave_balance=leave_balance,
        )
        employee.job_history.append(
            JobRecord(
                position=employee.position,
                department_name=department.name,
                start_date=date_of_joining,
            )
        )
        self.session.add(employee)
        commit_or_raise(self.session)

        logger.info("Employee %s (%s) added", employee.employee_id, employee.username)
        self.audit.record(
            actor,
            "EmployeeAdded",
            f"Employee '{employee.full_name}' added with salary {salary} "
            f"and {leave_balance} leave days",
            "Employee",
            employee.employee_id,
        )
        return employee

    def update_salary(self, employee_id: UUID, new_salary: Decimal, actor: Actor) -> Employee:
        self._authorize(actor, Operation.MANAGE_EMPLOYEES, entity_kind="Employee", entity_id=employee_id)

        employee = self.employee_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        if new_salary <= 0:
            raise ValidationFailedError(f"Salary must be positive, got {new_salary}")

        old_salary = employee.salary
        employee.salary = new_salary
        commit_or_raise(self.session)
        self.audit.record(
            actor, "EmployeeSalaryChanged",
            f"Salary changed from {old_salary} to {new_salary}",
            "Employee", employee_id,
        )
        return employee

    def promote_or_transfer(
        self,
        employee_id: UUID,
        new_position: str,
        new_department_id: UUID,
        new_salary: Decimal,
        effective_date: date,
        actor: Actor,
    ) -> Employee:
        """Start a new job; the previous entry ends the day before ``effective_date``."""
        self._authorize(actor, Operation.MANAGE_EMPLOYEES, entity_kind="Employee", entity_id=employee_id)

        employee = self.employee_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        department = self.department_by_id(new_department_id)
        if department is None:
            raise NotFoundError("Department", new_department_id)
        if not new_position or not new_position.strip():
            raise ValidationFailedError("New position cannot be empty")
        if new_salary <= 0:
            raise ValidationFailedError(f"Salary must be positive, got {new_salary}")

        current = employee.current_job
        if current is not None and effective_date <= current.start_date:
            raise ValidationFailedError(
                f"Effective date {effective_date} must be after the current job's "
                f"start date {current.start_date}"
            )

        old_position = employee.position
        old_salary = employee.salary
        employee.add_job_to_history(new_position.strip(), department, effective_date)
        employee.salary = new_salary
        commit_or_raise(self.session)

        self.audit.record(
            actor,
            "EmployeePromotedOrTransferred",
            f"Position '{old_position}' to '{employee.position}', department "
            f"'{department.name}', salary {old_salary} to {new_salary}, "
            f"effective {effective_date}",
            "Employee",
            employee_id,
        )
        return employee

    def debit_leave_balance(self, employee: Employee, days: int) -> int:
        """Subtract ``days`` from the balance. The caller commits.

        Returns the new balance.
        """
        if days <= 0:
            raise ValidationFailedError(f"Leave days to debit must be positive, got {days}")
        if employee.leave_balance < days:
            raise InsufficientBalanceError(employee.employee_id, employee.leave_balance, days)
        employee.leave_balance -= days
        return employee.leave_balance
