"""HR router — employees, departments, attendance and payroll.

Routes:
    /employees          — List, create employees
    /employees/{id}     — Get, update, delete an employee
    /departments        — Department names
    /attendance         — List, record attendance
    /payroll            — Generated payroll statements
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from erp.auth.dependencies import get_current_user
from erp.common.constants import EmployeeStatus
from erp.database import get_db
from erp.hr.models import Attendance, Employee, Payroll
from erp.hr.schemas import (
    AttendanceCreate,
    AttendanceOut,
    EmployeeCreate,
    EmployeeOut,
    EmployeeUpdate,
    PayrollOut,
)
from erp.hr.service import AttendanceService, DepartmentService, EmployeeService, PayrollService

router = APIRouter(prefix="", tags=["hr"], dependencies=[Depends(get_current_user)])


def _employee_out(employee: Employee) -> EmployeeOut:
    return EmployeeOut(
        id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        full_name=employee.full_name,
        email=employee.email,
        phone=employee.phone or "",
        position=employee.position or "",
        department=employee.department.name,
        hire_date=employee.hire_date,
        salary=employee.salary or 0,
        hourly_rate=employee.hourly_rate,
        status=employee.status,
    )


def _attendance_out(attendance: Attendance) -> AttendanceOut:
    out = AttendanceOut.model_validate(attendance)
    out.employee_name = attendance.employee.full_name
    return out


def _payroll_out(payroll: Payroll) -> PayrollOut:
    out = PayrollOut.model_validate(payroll)
    out.employee_name = payroll.employee.full_name
    return out


# ═════════════════════════════════════════════════════════════════════
# Employee Endpoints
# ═════════════════════════════════════════════════════════════════════


@router.get("/employees", response_model=list[EmployeeOut])
async def list_employees(
    department: Optional[str] = Query(None, description="Department name"),
    status: Optional[EmployeeStatus] = Query(None),
    search: Optional[str] = Query(None, description="Name, email or position"),
    db: AsyncSession = Depends(get_db),
):
    employees = await EmployeeService.list_employees(
        db,
        department=department,
        status=status.value if status else None,
        search=search,
    )
    return [_employee_out(e) for e in employees]


@router.get("/employees/{employee_id}", response_model=EmployeeOut)
async def get_employee(employee_id: int, db: AsyncSession = Depends(get_db)):
    return _employee_out(await EmployeeService.get_employee(db, employee_id))


@router.post("/employees", response_model=EmployeeOut, status_code=201)
async def create_employee(body: EmployeeCreate, db: AsyncSession = Depends(get_db)):
    data = body.model_dump()
    data["status"] = body.status.value
    return _employee_out(await EmployeeService.create_employee(db, data))


@router.put("/employees/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
):
    data = body.model_dump(exclude_unset=True)
    if body.status is not None:
        data["status"] = body.status.value
    return _employee_out(await EmployeeService.update_employee(db, employee_id, data))


@router.delete("/employees/{employee_id}", status_code=204)
async def delete_employee(employee_id: int, db: AsyncSession = Depends(get_db)):
    await EmployeeService.delete_employee(db, employee_id)
    return Response(status_code=204)


# ── GET /departments ────────────────────────────────────────────────

@router.get("/departments", response_model=list[str])
async def list_departments(db: AsyncSession = Depends(get_db)):
    return await DepartmentService.list_names(db)


# ═════════════════════════════════════════════════════════════════════
# Attendance & Payroll
# ═════════════════════════════════════════════════════════════════════


@router.get("/attendance", response_model=list[AttendanceOut])
async def list_attendance(
    employee_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    records = await AttendanceService.list_attendance(
        db, employee_id=employee_id, date_from=date_from, date_to=date_to,
    )
    return [_attendance_out(r) for r in records]


@router.post("/attendance", response_model=AttendanceOut, status_code=201)
async def record_attendance(body: AttendanceCreate, db: AsyncSession = Depends(get_db)):
    return _attendance_out(await AttendanceService.record(db, **body.model_dump()))


@router.get("/payroll", response_model=list[PayrollOut])
async def list_payroll(
    employee_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    payrolls = await PayrollService.list_payrolls(db, employee_id=employee_id, status=status)
    return [_payroll_out(p) for p in payrolls]
