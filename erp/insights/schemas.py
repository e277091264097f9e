"""Insights Pydantic schemas — read-only derived statistics."""

from typing import Literal, Optional

from pydantic import BaseModel


class CashFlowProjection(BaseModel):
    month: str
    projected_income: float
    projected_expenses: float
    net_cash_flow: float
    confidence: float


class CustomerProfitability(BaseModel):
    customer_id: int
    customer_name: str
    total_revenue: float
    total_profit: float
    profit_margin: float
    order_count: int
    average_order_value: float


class KPIAnalysis(BaseModel):
    revenue_growth: float
    expense_growth: float
    profit_margin: float
    customer_retention_rate: float
    employee_productivity: float
    inventory_turnover: float


class EmployeePerformance(BaseModel):
    employee_id: int
    employee_name: str
    total_hours: float
    attendance_rate: float
    pending_tasks: int
    productivity: float
    department_id: Optional[int] = None


class LowStockItem(BaseModel):
    id: int
    name: str
    current_stock: int
    threshold: int


class InventoryInsights(BaseModel):
    total_products: int
    low_stock_products: int
    out_of_stock_products: int
    total_inventory_value: float
    low_stock_items: list[LowStockItem]


class Recommendation(BaseModel):
    type: str
    priority: Literal["high", "medium", "low"]
    title: str
    description: str
    action: str
    impact: str


class TrendPoint(BaseModel):
    month: str
    value: float


class TrendAnalysis(BaseModel):
    metric: str
    data: list[TrendPoint]
    trend: float
    trend_direction: Literal["up", "down", "stable"]
