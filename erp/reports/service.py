"""Report service — read-only cross-module summaries for the reports pages.

All methods are static async, following the project convention.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.accounting.models import Invoice, Transaction
from erp.accounting.service import (
    TransactionService,
    ledger_total,
    monthly_figures,
)
from erp.common.constants import InvoiceStatus, TransactionType
from erp.crm.models import Customer
from erp.hr.models import Employee
from erp.inventory.models import Product, Stock
from erp.inventory.service import ProductService
from erp.projects.models import Project, Task
from erp.reports.schemas import (
    CustomerReport,
    CustomerReportRow,
    CustomerReportSummary,
    CustomerRevenue,
    DashboardReport,
    DashboardSummary,
    EmployeeReportRow,
    FinancialReport,
    FinancialReportSummary,
    InventoryReport,
    InventoryReportRow,
    InventoryReportSummary,
    MonthlyPerformance,
    RecentActivities,
    RecentEmployee,
    RecentProject,
    RecentTransaction,
    StockAlertItem,
    UpcomingTask,
    WarehouseQuantity,
)

REPORT_MONTHS = 12
RECENT_LIMIT = 5
DIRECT_SALES = "Direct Sales"


def _margin(revenue: float, profit: float) -> float:
    return profit / revenue * 100 if revenue > 0 else 0.0


def _recent_transaction(txn: Transaction) -> RecentTransaction:
    invoice = txn.invoice
    return RecentTransaction(
        id=txn.id,
        amount=txn.amount,
        type=txn.type,
        description=f"Invoice #{invoice.id}" if invoice else "Manual transaction",
        date=txn.date,
        customer=invoice.customer.name if invoice else "N/A",
    )


class ReportService:
    """Async report builders."""

    # ═════════════════════════════════════════════════════════════════
    # GET /dashboard
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_dashboard(db: AsyncSession, today: date) -> DashboardReport:
        rows = await TransactionService.ledger_rows(db)
        revenue = ledger_total(rows, TransactionType.income)
        expenses = ledger_total(rows, TransactionType.expense)

        summary = DashboardSummary(
            employees=await db.scalar(select(func.count(Employee.id))) or 0,
            customers=await db.scalar(select(func.count(Customer.id))) or 0,
            projects=await db.scalar(select(func.count(Project.id))) or 0,
            products=await db.scalar(select(func.count(Product.id))) or 0,
            revenue=revenue,
            expenses=expenses,
            profit=revenue - expenses,
            profit_margin=_margin(revenue, revenue - expenses),
        )

        monthly = [
            MonthlyPerformance(
                month=m.month,
                revenue=m.income,
                expenses=m.expenses,
                profit=m.profit,
                profit_margin=_margin(m.income, m.profit),
            )
            for m in monthly_figures(rows, today, REPORT_MONTHS)
        ]

        stock_alerts = [
            StockAlertItem(
                id=p.id, name=p.name, current_stock=total, threshold=p.low_stock_threshold,
            )
            for p, total in await ProductService.low_stock(db)
        ][:RECENT_LIMIT]

        return DashboardReport(
            summary=summary,
            recent_activities=await ReportService._recent_activities(db),
            monthly_data=monthly,
            customer_revenue_data=await ReportService._revenue_by_customer(db),
            stock_alerts=stock_alerts,
            upcoming_tasks=await ReportService._upcoming_tasks(db),
        )

    @staticmethod
    async def _recent_activities(db: AsyncSession) -> RecentActivities:
        employees = (
            await db.execute(
                select(Employee)
                .options(selectinload(Employee.department))
                .order_by(Employee.created_at.desc(), Employee.id.desc())
                .limit(RECENT_LIMIT)
            )
        ).scalars().all()
        projects = (
            await db.execute(
                select(Project)
                .options(selectinload(Project.customer))
                .order_by(Project.id.desc())
                .limit(RECENT_LIMIT)
            )
        ).scalars().all()
        transactions = (
            await db.execute(
                select(Transaction)
                .options(selectinload(Transaction.invoice).selectinload(Invoice.customer))
                .order_by(Transaction.date.desc(), Transaction.id.desc())
                .limit(RECENT_LIMIT)
            )
        ).scalars().all()

        return RecentActivities(
            employees=[
                RecentEmployee(
                    id=e.id,
                    name=e.full_name,
                    department=e.department.name,
                    date=e.created_at.date() if e.created_at else None,
                )
                for e in employees
            ],
            projects=[
                RecentProject(
                    id=p.id,
                    name=p.name,
                    customer=p.customer.name,
                    date=p.created_at.date() if p.created_at else None,
                )
                for p in projects
            ],
            transactions=[_recent_transaction(t) for t in transactions],
        )

    @staticmethod
    async def _revenue_by_customer(db: AsyncSession) -> list[CustomerRevenue]:
        """Top customers by realised income; unlinked income counts as direct sales."""
        result = await db.execute(
            select(Customer.name, Transaction.amount)
            .select_from(Transaction)
            .outerjoin(Invoice, Transaction.invoice_id == Invoice.id)
            .outerjoin(Customer, Invoice.customer_id == Customer.id)
            .where(Transaction.type == TransactionType.income.value)
        )
        totals: dict[str, float] = defaultdict(float)
        for name, amount in result.all():
            totals[name or DIRECT_SALES] += amount

        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return [CustomerRevenue(customer=name, revenue=amount) for name, amount in ranked[:RECENT_LIMIT]]

    @staticmethod
    async def _upcoming_tasks(db: AsyncSession) -> list[UpcomingTask]:
        tasks = (
            await db.execute(
                select(Task)
                .options(selectinload(Task.project), selectinload(Task.assigned_to))
                .order_by(Task.id.desc())
                .limit(RECENT_LIMIT)
            )
        ).scalars().all()
        return [
            UpcomingTask(
                id=t.id,
                name=t.name,
                project=t.project.name,
                assigned_to=t.assigned_to.full_name if t.assigned_to else "Unassigned",
                status=t.status,
                due_date=t.due_date,
            )
            for t in tasks
        ]

    # ═════════════════════════════════════════════════════════════════
    # GET /employees
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_employee_report(db: AsyncSession) -> list[EmployeeReportRow]:
        employees = (
            await db.execute(
                select(Employee)
                .options(
                    selectinload(Employee.department),
                    selectinload(Employee.attendances),
                    selectinload(Employee.leaves),
                    selectinload(Employee.payrolls),
                )
                .order_by(Employee.id)
            )
        ).scalars().all()
        return [
            EmployeeReportRow(
                id=e.id,
                name=e.full_name,
                email=e.email,
                department=e.department.name,
                hire_date=e.hire_date,
                attendance=len(e.attendances),
                leaves=len(e.leaves),
                total_payroll=sum(p.amount for p in e.payrolls),
                status=e.status,
            )
            for e in employees
        ]

    # ═════════════════════════════════════════════════════════════════
    # GET /financial
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_financial_report(db: AsyncSession, today: date) -> FinancialReport:
        rows = await TransactionService.ledger_rows(db)
        revenue = ledger_total(rows, TransactionType.income)
        expenses = ledger_total(rows, TransactionType.expense)

        pending = (
            await db.execute(
                select(func.count(Invoice.id), func.coalesce(func.sum(Invoice.amount), 0)).where(
                    Invoice.status == InvoiceStatus.pending.value
                )
            )
        ).one()

        recent = await TransactionService.list_transactions(db)

        return FinancialReport(
            summary=FinancialReportSummary(
                total_revenue=revenue,
                total_expenses=expenses,
                net_profit=revenue - expenses,
                pending_invoices=pending[0],
                total_pending=float(pending[1] or 0),
                transaction_count=len(rows),
            ),
            monthly_data=monthly_figures(rows, today, REPORT_MONTHS),
            recent_transactions=[_recent_transaction(t) for t in recent[:10]],
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /inventory
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_inventory_report(db: AsyncSession) -> InventoryReport:
        products = (
            await db.execute(
                select(Product)
                .options(selectinload(Product.stock).selectinload(Stock.warehouse))
                .order_by(Product.id)
            )
        ).scalars().all()

        report: list[InventoryReportRow] = []
        low_stock = 0
        for product in products:
            total = product.total_stock
            if total <= product.low_stock_threshold:
                low_stock += 1
            report.append(
                InventoryReportRow(
                    id=product.id,
                    name=product.name,
                    sku=product.sku,
                    price=product.price,
                    stock=total,
                    value=total * product.price,
                    status="in-stock" if total > 0 else "out-of-stock",
                    warehouses=[
                        WarehouseQuantity(name=s.warehouse.name, quantity=s.quantity)
                        for s in product.stock
                    ],
                )
            )

        return InventoryReport(
            summary=InventoryReportSummary(
                total_products=len(report),
                total_stock=sum(r.stock for r in report),
                total_value=sum(r.value for r in report),
                low_stock=low_stock,
            ),
            products=report,
        )

    # ═════════════════════════════════════════════════════════════════
    # GET /customers
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_customer_report(db: AsyncSession) -> CustomerReport:
        customers = (
            await db.execute(
                select(Customer)
                .options(selectinload(Customer.projects), selectinload(Customer.invoices))
                .order_by(Customer.id)
            )
        ).scalars().all()

        rows: list[CustomerReportRow] = []
        for c in customers:
            projects = sorted(c.projects, key=lambda p: p.id)
            rows.append(
                CustomerReportRow(
                    id=c.id,
                    name=c.name,
                    email=c.email,
                    phone=c.phone or "",
                    total_projects=len(projects),
                    total_revenue=sum(inv.amount for inv in c.invoices),
                    total_invoices=len(c.invoices),
                    last_project=projects[-1].name if projects else "None",
                    status="active" if projects else "prospect",
                )
            )

        total_revenue = sum(r.total_revenue for r in rows)
        return CustomerReport(
            summary=CustomerReportSummary(
                total_customers=len(rows),
                active_customers=sum(1 for r in rows if r.total_projects > 0),
                total_revenue=total_revenue,
                average_revenue=total_revenue / len(rows) if rows else 0.0,
            ),
            customers=rows,
        )
