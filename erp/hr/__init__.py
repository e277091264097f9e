"""HR module — departments, employees, attendance, time entries and payroll."""

from erp.hr.models import Attendance, Department, Employee, Leave, Payroll, TimeEntry

__all__ = ["Department", "Employee", "Attendance", "TimeEntry", "Leave", "Payroll"]
