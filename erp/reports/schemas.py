"""Report Pydantic schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel

from erp.accounting.schemas import MonthlyFigures


# ═════════════════════════════════════════════════════════════════════
# Dashboard
# ═════════════════════════════════════════════════════════════════════


class DashboardSummary(BaseModel):
    employees: int
    customers: int
    projects: int
    products: int
    revenue: float
    expenses: float
    profit: float
    profit_margin: float


class MonthlyPerformance(BaseModel):
    month: str
    revenue: float
    expenses: float
    profit: float
    profit_margin: float


class RecentEmployee(BaseModel):
    id: int
    name: str
    department: str
    date: Optional[dt.date] = None
    type: str = "employee_added"


class RecentProject(BaseModel):
    id: int
    name: str
    customer: str
    date: Optional[dt.date] = None
    type: str = "project_created"


class RecentTransaction(BaseModel):
    id: int
    amount: float
    type: str
    description: str
    date: dt.date
    customer: str = "N/A"


class RecentActivities(BaseModel):
    employees: List[RecentEmployee]
    projects: List[RecentProject]
    transactions: List[RecentTransaction]


class CustomerRevenue(BaseModel):
    customer: str
    revenue: float


class StockAlertItem(BaseModel):
    id: int
    name: str
    current_stock: int
    threshold: int


class UpcomingTask(BaseModel):
    id: int
    name: str
    project: str
    assigned_to: str
    status: str
    due_date: Optional[dt.date] = None


class DashboardReport(BaseModel):
    summary: DashboardSummary
    recent_activities: RecentActivities
    monthly_data: List[MonthlyPerformance]
    customer_revenue_data: List[CustomerRevenue]
    stock_alerts: List[StockAlertItem]
    upcoming_tasks: List[UpcomingTask]


# ═════════════════════════════════════════════════════════════════════
# Employees
# ═════════════════════════════════════════════════════════════════════


class EmployeeReportRow(BaseModel):
    id: int
    name: str
    email: str
    department: str
    hire_date: Optional[dt.date] = None
    attendance: int
    leaves: int
    total_payroll: float
    status: str


# ═════════════════════════════════════════════════════════════════════
# Financial
# ═════════════════════════════════════════════════════════════════════


class FinancialReportSummary(BaseModel):
    total_revenue: float
    total_expenses: float
    net_profit: float
    pending_invoices: int
    total_pending: float
    transaction_count: int


class FinancialReport(BaseModel):
    summary: FinancialReportSummary
    monthly_data: List[MonthlyFigures]
    recent_transactions: List[RecentTransaction]


# ═════════════════════════════════════════════════════════════════════
# Inventory
# ═════════════════════════════════════════════════════════════════════


class WarehouseQuantity(BaseModel):
    name: str
    quantity: int


class InventoryReportRow(BaseModel):
    id: int
    name: str
    sku: str
    price: float
    stock: int
    value: float
    status: str
    warehouses: List[WarehouseQuantity]


class InventoryReportSummary(BaseModel):
    total_products: int
    total_stock: int
    total_value: float
    low_stock: int


class InventoryReport(BaseModel):
    summary: InventoryReportSummary
    products: List[InventoryReportRow]


# ═════════════════════════════════════════════════════════════════════
# Customers
# ═════════════════════════════════════════════════════════════════════


class CustomerReportRow(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: str = ""
    total_projects: int
    total_revenue: float
    total_invoices: int
    last_project: str
    status: str


class CustomerReportSummary(BaseModel):
    total_customers: int
    active_customers: int
    total_revenue: float
    average_revenue: float


class CustomerReport(BaseModel):
    summary: CustomerReportSummary
    customers: List[CustomerReportRow]
