"""HR ORM models: Department, Employee, Attendance, TimeEntry, Leave, Payroll.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations.
"""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.common.constants import EmployeeStatus, PayrollStatus
from erp.database import Base

if TYPE_CHECKING:
    from erp.auth.models import User
    from erp.projects.models import Task

Money = sa.Numeric(12, 2, asdecimal=False)


# ═════════════════════════════════════════════════════════════════════
# Department
# ═════════════════════════════════════════════════════════════════════


class Department(Base):
    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)

    employees: Mapped[list["Employee"]] = relationship(back_populates="department")


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """Employee master record."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(sa.String(30))
    position: Mapped[Optional[str]] = mapped_column(sa.String(100))
    department_id: Mapped[int] = mapped_column(
        sa.ForeignKey("departments.id"), nullable=False,
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        sa.ForeignKey("users.id", ondelete="SET NULL"), unique=True,
    )
    hire_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    salary: Mapped[Optional[float]] = mapped_column(Money)
    hourly_rate: Mapped[Optional[float]] = mapped_column(Money)
    status: Mapped[str] = mapped_column(
        sa.String(20), default=EmployeeStatus.active.value, nullable=False,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    # Relationships
    department: Mapped["Department"] = relationship(back_populates="employees")
    user: Mapped[Optional["User"]] = relationship(back_populates="employee")
    attendances: Mapped[list["Attendance"]] = relationship(
        back_populates="employee", cascade="all, delete-orphan",
    )
    time_entries: Mapped[list["TimeEntry"]] = relationship(
        back_populates="employee", cascade="all, delete-orphan",
    )
    leaves: Mapped[list["Leave"]] = relationship(
        back_populates="employee", cascade="all, delete-orphan",
    )
    payrolls: Mapped[list["Payroll"]] = relationship(
        back_populates="employee", cascade="all, delete-orphan",
    )
    tasks: Mapped[list["Task"]] = relationship(back_populates="assigned_to")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ═════════════════════════════════════════════════════════════════════
# Time tracking
# ═════════════════════════════════════════════════════════════════════


class Attendance(Base):
    """One row per employee per day with a check-in; no row means absent."""

    __tablename__ = "attendances"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    check_in: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    check_out: Mapped[Optional[dt.datetime]] = mapped_column(sa.DateTime(timezone=True))
    hours_worked: Mapped[Optional[float]] = mapped_column(sa.Float)

    employee: Mapped["Employee"] = relationship(back_populates="attendances")


class TimeEntry(Base):
    """Hours logged by an employee, optionally against a task."""

    __tablename__ = "time_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    task_id: Mapped[Optional[int]] = mapped_column(
        sa.ForeignKey("tasks.id", ondelete="SET NULL"),
    )
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    hours: Mapped[float] = mapped_column(sa.Float, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)

    employee: Mapped["Employee"] = relationship(back_populates="time_entries")


class Leave(Base):
    __tablename__ = "leaves"

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    start_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    type: Mapped[str] = mapped_column(sa.String(50), default="annual")
    status: Mapped[str] = mapped_column(sa.String(20), default="pending")

    employee: Mapped["Employee"] = relationship(back_populates="leaves")


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


class Payroll(Base):
    """Monthly payroll statement generated by the automation rules."""

    __tablename__ = "payrolls"

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False,
    )
    amount: Mapped[float] = mapped_column(Money, nullable=False)
    base_salary: Mapped[float] = mapped_column(Money, nullable=False)
    overtime: Mapped[float] = mapped_column(Money, default=0)
    deductions: Mapped[float] = mapped_column(Money, default=0)
    bonuses: Mapped[float] = mapped_column(Money, default=0)
    period: Mapped[str] = mapped_column(sa.String(20), default="monthly")
    start_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[str] = mapped_column(
        sa.String(20), default=PayrollStatus.pending.value,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    employee: Mapped["Employee"] = relationship(back_populates="payrolls")
