"""HR Pydantic v2 schemas — request/response validation."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from erp.common.constants import EmployeeStatus


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class EmployeeCreate(BaseModel):
    """Create an employee; the department is looked up (or created) by name."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    position: Optional[str] = Field(None, max_length=100)
    department: str = Field(..., min_length=1, max_length=100)
    hire_date: Optional[dt.date] = None
    salary: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    status: EmployeeStatus = EmployeeStatus.active
    user_id: Optional[int] = None


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    position: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, min_length=1, max_length=100)
    hire_date: Optional[dt.date] = None
    salary: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    status: Optional[EmployeeStatus] = None


class EmployeeOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str = ""
    position: str = ""
    department: str
    hire_date: Optional[dt.date] = None
    salary: float = 0
    hourly_rate: Optional[float] = None
    status: str


# ═════════════════════════════════════════════════════════════════════
# Attendance
# ═════════════════════════════════════════════════════════════════════


class AttendanceCreate(BaseModel):
    employee_id: int
    date: dt.date
    check_in: Optional[dt.datetime] = None
    check_out: Optional[dt.datetime] = None
    hours_worked: Optional[float] = Field(None, ge=0, le=24)

    @model_validator(mode="after")
    def _check_times(self) -> "AttendanceCreate":
        if self.check_in and self.check_out and self.check_out < self.check_in:
            raise ValueError("check_out must not be before check_in")
        return self


class AttendanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    employee_name: Optional[str] = None
    date: dt.date
    check_in: Optional[dt.datetime] = None
    check_out: Optional[dt.datetime] = None
    hours_worked: Optional[float] = None


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


class PayrollOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    employee_name: Optional[str] = None
    amount: float
    base_salary: float
    overtime: float = 0
    deductions: float = 0
    bonuses: float = 0
    period: str
    start_date: dt.date
    end_date: dt.date
    status: str
    created_at: Optional[dt.datetime] = None
