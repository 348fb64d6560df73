"""Department, employee and job history models."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hr_payroll.models.leave import LeaveRequest


class Department(Base, TimestampMixin):
    """Organizational department."""

    __tablename__ = "department"

    department_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    employees: Mapped[list[Employee]] = relationship(back_populates="department")


class Employee(Base, TimestampMixin):
    """Employee record.

    Salary and leave balance are the only mutable money/time fields; both
    are changed exclusively through the Directory service.
    """

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[str] = mapped_column(String, nullable=False)
    department_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("department.department_id", ondelete="SET NULL"),
        nullable=True,
    )
    salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date_of_joining: Mapped[date] = mapped_column(Date, nullable=False)
    leave_balance: Mapped[int] = mapped_column(Integer, nullable=False, default=15)

    __table_args__ = (
        CheckConstraint("salary > 0", name="employee_salary_positive"),
        CheckConstraint("leave_balance >= 0", name="employee_leave_balance_non_negative"),
    )

    # Relationships
    department: Mapped[Department | None] = relationship(back_populates="employees")
    job_history: Mapped[list[JobRecord]] = relationship(
        back_populates="employee",
        order_by="JobRecord.start_date",
        cascade="all, delete-orphan",
    )
    leave_requests: Mapped[list[LeaveRequest]] = relationship(back_populates="employee")

    @property
    def current_job(self) -> JobRecord | None:
        """The open job history entry, if any."""
        return next((j for j in self.job_history if j.end_date is None), None)

    def add_job_to_history(
        self, position: str, department: Department, start_date: date
    ) -> JobRecord:
        """Close the current job the day before ``start_date`` and open a new one."""
        current = self.current_job
        if current is not None:
            current.end_date = start_date - timedelta(days=1)

        record = JobRecord(
            position=position,
            department_name=department.name,
            start_date=start_date,
        )
        self.job_history.append(record)
        self.position = position
        self.department = department
        return record


class JobRecord(Base):
    """One entry in an employee's append-only job history."""

    __tablename__ = "job_record"

    job_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[str] = mapped_column(String, nullable=False)
    department_name: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="job_record_dates_check",
        ),
    )

    employee: Mapped[Employee] = relationship(back_populates="job_history")

    @property
    def is_current(self) -> bool:
        return self.end_date is None
