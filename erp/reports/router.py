"""Reports router — dashboard and per-module reports."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from erp.auth.dependencies import get_current_user
from erp.database import get_db
from erp.reports.schemas import (
    CustomerReport,
    DashboardReport,
    EmployeeReportRow,
    FinancialReport,
    InventoryReport,
)
from erp.reports.service import ReportService

router = APIRouter(prefix="", tags=["reports"], dependencies=[Depends(get_current_user)])


@router.get("/dashboard", response_model=DashboardReport)
async def dashboard(db: AsyncSession = Depends(get_db)):
    return await ReportService.get_dashboard(db, date.today())


@router.get("/employees", response_model=list[EmployeeReportRow])
async def employee_report(db: AsyncSession = Depends(get_db)):
    return await ReportService.get_employee_report(db)


@router.get("/financial", response_model=FinancialReport)
async def financial_report(db: AsyncSession = Depends(get_db)):
    return await ReportService.get_financial_report(db, date.today())


@router.get("/inventory", response_model=InventoryReport)
async def inventory_report(db: AsyncSession = Depends(get_db)):
    return await ReportService.get_inventory_report(db)


@router.get("/customers", response_model=CustomerReport)
async def customer_report(db: AsyncSession = Depends(get_db)):
    return await ReportService.get_customer_report(db)
