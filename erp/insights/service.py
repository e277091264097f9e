"""Insights service — on-demand aggregate statistics.

Revenue and expense figures come from ``Transaction`` rows only. Nothing in
this module writes to the database.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.accounting.models import Invoice, Transaction
from erp.common.constants import (
    COGS_RATIO,
    WORKING_DAYS_PER_MONTH,
    InvoiceStatus,
    TaskStatus,
    TransactionType,
)
from erp.common.dates import Clock, add_months, month_bounds, month_key, month_start
from erp.crm.models import Customer
from erp.hr.models import Attendance, Employee, TimeEntry
from erp.insights.schemas import (
    CashFlowProjection,
    CustomerProfitability,
    EmployeePerformance,
    InventoryInsights,
    KPIAnalysis,
    LowStockItem,
    Recommendation,
    TrendAnalysis,
    TrendPoint,
)
from erp.inventory.models import Product
from erp.projects.models import Task

# Income multiplier per calendar month (1 = January).
SEASONAL_FACTORS: dict[int, float] = {
    1: 0.9,
    2: 0.85,
    3: 1.0,
    4: 1.1,
    5: 1.15,
    6: 1.2,
    7: 1.1,
    8: 1.05,
    9: 1.0,
    10: 1.1,
    11: 1.2,
    12: 1.3,
}

MONTHLY_GROWTH = 0.02
HISTORY_MONTHS = 6
TREND_METRICS = ("revenue", "expenses", "profit", "customers")
LOW_PRODUCTIVITY_THRESHOLD = 120
INACTIVE_CUSTOMER_DAYS = 90


# ── Pure helpers ────────────────────────────────────────────────────

def seasonal_factor(month: int) -> float:
    return SEASONAL_FACTORS.get(month, 1.0)


def project_cash_flow(
    avg_income: float,
    avg_expenses: float,
    start: date,
    months: int,
) -> list[CashFlowProjection]:
    """Project *months* months after *start*.

    Income gets the seasonal factor of the target month; both sides grow
    linearly by 2 % per step. Confidence drops 0.1 per step, floor 0.5.
    """
    projections: list[CashFlowProjection] = []
    for i in range(1, months + 1):
        target = add_months(start, i)
        growth = 1 + i * MONTHLY_GROWTH
        income = avg_income * seasonal_factor(target.month) * growth
        expenses = avg_expenses * growth
        projections.append(
            CashFlowProjection(
                month=month_key(target),
                projected_income=income,
                projected_expenses=expenses,
                net_cash_flow=income - expenses,
                confidence=max(0.5, round(1 - i * 0.1, 2)),
            )
        )
    return projections


def trend_summary(values: Sequence[float]) -> tuple[float, str]:
    """Percent change from the first three points to the last three."""
    older = list(values[:3])
    recent = list(values[-3:])
    older_avg = sum(older) / len(older) if older else 0.0
    recent_avg = sum(recent) / len(recent) if recent else 0.0
    trend = (recent_avg - older_avg) / older_avg * 100 if older_avg > 0 else 0.0
    if trend > 0:
        direction = "up"
    elif trend < 0:
        direction = "down"
    else:
        direction = "stable"
    return trend, direction


def _growth(current: float, previous: float) -> float:
    return (current - previous) / previous * 100 if previous > 0 else 0.0


# ═════════════════════════════════════════════════════════════════════
# InsightsService
# ═════════════════════════════════════════════════════════════════════


class InsightsService:
    """Aggregations over transactions, invoices, employees and stock."""

    def __init__(self, db: AsyncSession, *, clock: Clock = date.today) -> None:
        self.db = db
        self.clock = clock

    # ── Cash flow ───────────────────────────────────────────────────

    async def get_cash_flow_forecast(self, months: int = 6) -> list[CashFlowProjection]:
        today = self.clock()
        since = add_months(month_start(today), -HISTORY_MONTHS)
        result = await self.db.execute(
            select(Transaction.date, Transaction.type, Transaction.amount)
            .where(Transaction.date >= since)
        )

        buckets: dict[str, list[float]] = defaultdict(lambda: [0.0, 0.0])
        for txn_date, txn_type, amount in result.all():
            bucket = buckets[month_key(txn_date)]
            if txn_type == TransactionType.income.value:
                bucket[0] += amount
            else:
                bucket[1] += amount

        if buckets:
            avg_income = sum(b[0] for b in buckets.values()) / len(buckets)
            avg_expenses = sum(b[1] for b in buckets.values()) / len(buckets)
        else:
            avg_income = avg_expenses = 0.0

        return project_cash_flow(avg_income, avg_expenses, today, months)

    # ── Customers ───────────────────────────────────────────────────

    async def get_most_profitable_customers(self, limit: int = 10) -> list[CustomerProfitability]:
        result = await self.db.execute(
            select(Customer).options(
                selectinload(Customer.invoices).selectinload(Invoice.transactions)
            )
        )

        ranking: list[CustomerProfitability] = []
        for customer in result.scalars().all():
            settled = [
                inv for inv in customer.invoices
                if inv.status == InvoiceStatus.paid.value or inv.transactions
            ]
            revenue = sum(inv.amount for inv in settled)
            profit = revenue - revenue * COGS_RATIO
            ranking.append(
                CustomerProfitability(
                    customer_id=customer.id,
                    customer_name=customer.name,
                    total_revenue=revenue,
                    total_profit=profit,
                    profit_margin=profit / revenue * 100 if revenue > 0 else 0.0,
                    order_count=len(settled),
                    average_order_value=revenue / len(settled) if settled else 0.0,
                )
            )

        ranking.sort(key=lambda c: (c.profit_margin, c.total_profit), reverse=True)
        return ranking[:limit]

    # ── KPIs ────────────────────────────────────────────────────────

    async def get_kpi_analysis(self) -> KPIAnalysis:
        today = self.clock()
        this_month = month_bounds(today)
        last_month = month_bounds(today, -1)

        revenue_now = await self._sum_transactions(TransactionType.income, *this_month)
        revenue_prev = await self._sum_transactions(TransactionType.income, *last_month)
        expenses_now = await self._sum_transactions(TransactionType.expense, *this_month)
        expenses_prev = await self._sum_transactions(TransactionType.expense, *last_month)

        total_revenue = await self._sum_transactions(TransactionType.income)
        total_expenses = await self._sum_transactions(TransactionType.expense)
        profit_margin = (
            (total_revenue - total_expenses) / total_revenue * 100 if total_revenue > 0 else 0.0
        )

        inventory_value = sum(
            total * product.unit_cost for product, total in await self._stock_levels()
        )

        return KPIAnalysis(
            revenue_growth=_growth(revenue_now, revenue_prev),
            expense_growth=_growth(expenses_now, expenses_prev),
            profit_margin=profit_margin,
            customer_retention_rate=await self._customer_retention_rate(),
            employee_productivity=await self._employee_productivity(last_month[0]),
            inventory_turnover=revenue_now / inventory_value if inventory_value > 0 else 0.0,
        )

    # ── Employees ───────────────────────────────────────────────────

    async def get_employee_performance_insights(self) -> list[EmployeePerformance]:
        """Hours, attendance and open tasks since the start of last month."""
        since = month_bounds(self.clock(), -1)[0]

        hours = dict(
            (
                await self.db.execute(
                    select(TimeEntry.employee_id, func.sum(TimeEntry.hours))
                    .where(TimeEntry.date >= since)
                    .group_by(TimeEntry.employee_id)
                )
            ).all()
        )
        attendance = dict(
            (
                await self.db.execute(
                    select(Attendance.employee_id, func.count(Attendance.id))
                    .where(Attendance.date >= since)
                    .group_by(Attendance.employee_id)
                )
            ).all()
        )
        pending = dict(
            (
                await self.db.execute(
                    select(Task.assigned_to_id, func.count(Task.id))
                    .where(
                        Task.assigned_to_id.is_not(None),
                        Task.status != TaskStatus.completed.value,
                    )
                    .group_by(Task.assigned_to_id)
                )
            ).all()
        )

        employees = (
            await self.db.execute(select(Employee).order_by(Employee.id))
        ).scalars().all()

        insights: list[EmployeePerformance] = []
        for employee in employees:
            total_hours = float(hours.get(employee.id) or 0.0)
            rate = attendance.get(employee.id, 0) / WORKING_DAYS_PER_MONTH
            insights.append(
                EmployeePerformance(
                    employee_id=employee.id,
                    employee_name=employee.full_name,
                    total_hours=total_hours,
                    attendance_rate=rate * 100,
                    pending_tasks=pending.get(employee.id, 0),
                    productivity=total_hours * rate,
                    department_id=employee.department_id,
                )
            )
        return insights

    # ── Inventory ───────────────────────────────────────────────────

    async def get_inventory_insights(self) -> InventoryInsights:
        levels = await self._stock_levels()
        low = [(p, total) for p, total in levels if total <= p.low_stock_threshold]
        return InventoryInsights(
            total_products=len(levels),
            low_stock_products=len(low),
            out_of_stock_products=sum(1 for _, total in levels if total == 0),
            total_inventory_value=sum(total * p.unit_cost for p, total in levels),
            low_stock_items=[
                LowStockItem(
                    id=p.id,
                    name=p.name,
                    current_stock=total,
                    threshold=p.low_stock_threshold,
                )
                for p, total in low
            ],
        )

    # ── Recommendations ─────────────────────────────────────────────

    async def get_recommendations(self) -> list[Recommendation]:
        today = self.clock()
        recommendations: list[Recommendation] = []

        inventory = await self.get_inventory_insights()
        if inventory.low_stock_products > 0:
            recommendations.append(
                Recommendation(
                    type="inventory",
                    priority="high",
                    title="Low Stock Alert",
                    description=f"{inventory.low_stock_products} products are running low on stock",
                    action="Review inventory levels and reorder if necessary",
                    impact="Prevent stockouts and maintain customer satisfaction",
                )
            )

        overdue = await self.db.scalar(
            select(func.count(Invoice.id)).where(
                Invoice.due_date < today,
                Invoice.status != InvoiceStatus.paid.value,
            )
        )
        if overdue:
            recommendations.append(
                Recommendation(
                    type="finance",
                    priority="high",
                    title="Overdue Invoices",
                    description=f"{overdue} invoices are overdue",
                    action="Follow up with customers for payment",
                    impact="Improve cash flow and reduce outstanding receivables",
                )
            )

        performance = await self.get_employee_performance_insights()
        low_performers = [
            e for e in performance if e.productivity < LOW_PRODUCTIVITY_THRESHOLD
        ]
        if low_performers:
            recommendations.append(
                Recommendation(
                    type="hr",
                    priority="medium",
                    title="Employee Productivity",
                    description=f"{len(low_performers)} employees have low productivity",
                    action="Review workload distribution and provide support",
                    impact="Improve team efficiency and employee satisfaction",
                )
            )

        cutoff = today - timedelta(days=INACTIVE_CUSTOMER_DAYS)
        last_invoice = (
            select(Invoice.customer_id, func.max(Invoice.date).label("last_date"))
            .group_by(Invoice.customer_id)
            .subquery()
        )
        inactive = await self.db.scalar(
            select(func.count()).select_from(last_invoice).where(last_invoice.c.last_date < cutoff)
        )
        if inactive:
            recommendations.append(
                Recommendation(
                    type="crm",
                    priority="medium",
                    title="Customer Retention",
                    description=f"{inactive} customers haven't placed orders in 90+ days",
                    action="Reach out to inactive customers with special offers",
                    impact="Increase customer retention and revenue",
                )
            )

        return recommendations

    # ── Trends ──────────────────────────────────────────────────────

    async def get_trend_analysis(self, metric: str) -> TrendAnalysis:
        """Six monthly points, oldest first; unknown metrics read as zero."""
        today = self.clock()
        points: list[TrendPoint] = []
        for offset in range(-(HISTORY_MONTHS - 1), 1):
            start, end = month_bounds(today, offset)
            points.append(
                TrendPoint(month=month_key(start), value=await self._metric_value(metric, start, end))
            )

        trend, direction = trend_summary([p.value for p in points])
        return TrendAnalysis(metric=metric, data=points, trend=trend, trend_direction=direction)

    # ── Internal ────────────────────────────────────────────────────

    async def _metric_value(self, metric: str, start: date, end: date) -> float:
        if metric == "revenue":
            return await self._sum_transactions(TransactionType.income, start, end)
        if metric == "expenses":
            return await self._sum_transactions(TransactionType.expense, start, end)
        if metric == "profit":
            revenue = await self._sum_transactions(TransactionType.income, start, end)
            expenses = await self._sum_transactions(TransactionType.expense, start, end)
            return revenue - expenses
        if metric == "customers":
            lower = datetime.combine(start, time.min, tzinfo=timezone.utc)
            upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
            count = await self.db.scalar(
                select(func.count(Customer.id)).where(
                    Customer.created_at >= lower, Customer.created_at < upper,
                )
            )
            return float(count or 0)
        return 0.0

    async def _sum_transactions(
        self,
        txn_type: TransactionType,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> float:
        query = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.type == txn_type.value
        )
        if start is not None:
            query = query.where(Transaction.date >= start)
        if end is not None:
            query = query.where(Transaction.date <= end)
        return float(await self.db.scalar(query) or 0)

    async def _stock_levels(self) -> list[tuple[Product, int]]:
        result = await self.db.execute(
            select(Product).options(selectinload(Product.stock)).order_by(Product.id)
        )
        return [(p, p.total_stock) for p in result.scalars().all()]

    async def _customer_retention_rate(self) -> float:
        total = await self.db.scalar(select(func.count(Customer.id)))
        if not total:
            return 0.0
        repeat = (
            select(Invoice.customer_id)
            .group_by(Invoice.customer_id)
            .having(func.count(Invoice.id) > 1)
            .subquery()
        )
        returning = await self.db.scalar(select(func.count()).select_from(repeat))
        return (returning or 0) / total * 100

    async def _employee_productivity(self, since: date) -> float:
        employees = await self.db.scalar(select(func.count(Employee.id)))
        if not employees:
            return 0.0
        hours = await self.db.scalar(
            select(func.coalesce(func.sum(TimeEntry.hours), 0.0)).where(TimeEntry.date >= since)
        )
        return float(hours or 0) / employees
