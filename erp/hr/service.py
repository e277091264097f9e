"""HR service layer — async CRUD for employees, attendance and payroll.

Uses:
  - ``apply_filters / apply_search`` from erp.common.filters
  - ``NotFoundException / ConflictError`` from erp.common.exceptions
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.common.exceptions import ConflictError, NotFoundException
from erp.common.filters import apply_filters, apply_search
from erp.hr.models import Attendance, Department, Employee, Payroll

EMPLOYEE_SEARCH_COLUMNS = ["first_name", "last_name", "email", "position"]


# ═════════════════════════════════════════════════════════════════════
# DepartmentService
# ═════════════════════════════════════════════════════════════════════


class DepartmentService:

    @staticmethod
    async def list_names(db: AsyncSession) -> list[str]:
        result = await db.execute(select(Department.name).order_by(Department.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_or_create(db: AsyncSession, name: str) -> Department:
        """Return the department called *name*, creating it if missing."""
        result = await db.execute(select(Department).where(Department.name == name))
        department = result.scalars().first()
        if department is None:
            department = Department(name=name)
            db.add(department)
            await db.flush()
        return department


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async CRUD operations for employees."""

    # ── List ────────────────────────────────────────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        *,
        department: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Employee]:
        query = select(Employee).options(selectinload(Employee.department))
        if department:
            query = query.join(Department, Employee.department_id == Department.id).where(
                Department.name == department
            )
        query = apply_filters(query, Employee, {"status": status})
        query = apply_search(query, Employee, search, EMPLOYEE_SEARCH_COLUMNS)
        result = await db.execute(query.order_by(Employee.last_name, Employee.first_name, Employee.id))
        return result.scalars().all()

    # ── Get single ──────────────────────────────────────────────────

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: int) -> Employee:
        employee = await db.get(
            Employee,
            employee_id,
            options=[selectinload(Employee.department)],
            populate_existing=True,
        )
        if employee is None:
            raise NotFoundException("Employee", employee_id)
        return employee

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(db: AsyncSession, data: dict[str, Any]) -> Employee:
        await EmployeeService._ensure_unique_email(db, data["email"])

        department = await DepartmentService.get_or_create(db, data.pop("department"))
        if data.get("hire_date") is None:
            data["hire_date"] = date.today()

        employee = Employee(department_id=department.id, **data)
        db.add(employee)
        await db.flush()
        return await EmployeeService.get_employee(db, employee.id)

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession, employee_id: int, data: dict[str, Any],
    ) -> Employee:
        employee = await EmployeeService.get_employee(db, employee_id)

        if data.get("email") and data["email"] != employee.email:
            await EmployeeService._ensure_unique_email(db, data["email"])

        department_name = data.pop("department", None)
        if department_name:
            department = await DepartmentService.get_or_create(db, department_name)
            employee.department_id = department.id

        for key, value in data.items():
            setattr(employee, key, value)

        await db.flush()
        return await EmployeeService.get_employee(db, employee_id)

    # ── Delete ──────────────────────────────────────────────────────

    @staticmethod
    async def delete_employee(db: AsyncSession, employee_id: int) -> None:
        employee = await EmployeeService.get_employee(db, employee_id)
        await db.delete(employee)
        await db.flush()

    @staticmethod
    async def _ensure_unique_email(db: AsyncSession, email: str) -> None:
        existing = await db.execute(select(Employee.id).where(Employee.email == email))
        if existing.scalar() is not None:
            raise ConflictError("email", email)


# ═════════════════════════════════════════════════════════════════════
# AttendanceService
# ═════════════════════════════════════════════════════════════════════


class AttendanceService:

    @staticmethod
    async def list_attendance(
        db: AsyncSession,
        *,
        employee_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Sequence[Attendance]:
        query = select(Attendance).options(selectinload(Attendance.employee))
        query = apply_filters(
            query,
            Attendance,
            {"employee_id": employee_id, "date__from": date_from, "date__to": date_to},
        )
        result = await db.execute(query.order_by(Attendance.date.desc(), Attendance.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def record(
        db: AsyncSession,
        employee_id: int,
        date: date,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
        hours_worked: Optional[float] = None,
    ) -> Attendance:
        """Record one day's attendance; hours default to check-out minus check-in."""
        await EmployeeService.get_employee(db, employee_id)

        duplicate = await db.execute(
            select(Attendance.id).where(
                Attendance.employee_id == employee_id, Attendance.date == date,
            )
        )
        if duplicate.scalar() is not None:
            raise ConflictError("date", date.isoformat())

        if hours_worked is None and check_in and check_out:
            hours_worked = round((check_out - check_in).total_seconds() / 3600, 2)

        attendance = Attendance(
            employee_id=employee_id,
            date=date,
            check_in=check_in,
            check_out=check_out,
            hours_worked=hours_worked,
        )
        db.add(attendance)
        await db.flush()
        return await db.get(
            Attendance,
            attendance.id,
            options=[selectinload(Attendance.employee)],
            populate_existing=True,
        )


# ═════════════════════════════════════════════════════════════════════
# PayrollService
# ═════════════════════════════════════════════════════════════════════


class PayrollService:

    @staticmethod
    async def list_payrolls(
        db: AsyncSession,
        *,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> Sequence[Payroll]:
        query = select(Payroll).options(selectinload(Payroll.employee))
        query = apply_filters(query, Payroll, {"employee_id": employee_id, "status": status})
        result = await db.execute(query.order_by(Payroll.start_date.desc(), Payroll.id.desc()))
        return result.scalars().all()
