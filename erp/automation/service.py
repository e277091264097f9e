"""Automation service — the scheduled business rules and alert bookkeeping.

Each rule scans the database, and for every match sends a notification and
records an ``Alert``. Writes are committed one at a time; a failure on one
item is logged and rolled back without undoing earlier items or stopping
the remaining ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Awaitable, Callable, Iterable, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from erp.accounting.models import Invoice, RecurringInvoice
from erp.automation.models import Alert
from erp.common.constants import (
    INVOICE_PAYMENT_TERMS_DAYS,
    OVERTIME_MULTIPLIER,
    STANDARD_MONTHLY_HOURS,
    AlertSeverity,
    AlertStatus,
    AlertType,
    EmployeeStatus,
    InvoiceStatus,
    PayrollStatus,
    RecurringFrequency,
    RecurringStatus,
    TaskStatus,
)
from erp.common.dates import Clock, add_months, month_bounds
from erp.common.exceptions import NotFoundException
from erp.crm.models import Customer
from erp.hr.models import Attendance, Employee, Payroll
from erp.inventory.models import Product, Stock
from erp.notifications.service import EmailService
from erp.projects.models import Task

logger = logging.getLogger(__name__)

_FREQUENCY_MONTHS = {
    RecurringFrequency.monthly.value: 1,
    RecurringFrequency.quarterly.value: 3,
    RecurringFrequency.yearly.value: 12,
}


# ── Pure calculations ───────────────────────────────────────────────

@dataclass(frozen=True)
class PayrollFigures:
    base_salary: float
    total_hours: float
    overtime_hours: float
    hourly_rate: float
    overtime_pay: float
    deductions: float = 0.0
    bonuses: float = 0.0

    @property
    def net_pay(self) -> float:
        return self.base_salary + self.overtime_pay + self.bonuses - self.deductions


def calculate_payroll(
    salary: Optional[float],
    hourly_rate: Optional[float],
    total_hours: float,
) -> PayrollFigures:
    """Monthly pay: salary plus 1.5x the hourly rate for hours above 160."""
    base_salary = salary or 0.0
    rate = hourly_rate or base_salary / STANDARD_MONTHLY_HOURS
    overtime_hours = max(0.0, total_hours - STANDARD_MONTHLY_HOURS)
    return PayrollFigures(
        base_salary=base_salary,
        total_hours=total_hours,
        overtime_hours=overtime_hours,
        hourly_rate=rate,
        overtime_pay=overtime_hours * rate * OVERTIME_MULTIPLIER,
    )


def advance_due_date(current: date, frequency: str) -> date:
    """Next billing date; unknown frequencies bill monthly."""
    return add_months(current, _FREQUENCY_MONTHS.get(frequency, 1))


# ═════════════════════════════════════════════════════════════════════
# AutomationService
# ═════════════════════════════════════════════════════════════════════


class AutomationService:
    """Runs the business rules against one session."""

    #: rule name → method name; used by the HTTP triggers and Celery tasks.
    RULES: dict[str, str] = {
        "missed_attendance": "check_missed_attendance",
        "low_stock": "check_low_stock",
        "overdue_invoices": "check_overdue_invoices",
        "late_tasks": "check_late_tasks",
        "monthly_payroll": "generate_monthly_payroll",
        "recurring_invoices": "process_recurring_invoices",
    }

    def __init__(
        self,
        db: AsyncSession,
        email_service: EmailService,
        *,
        clock: Clock = date.today,
    ) -> None:
        self.db = db
        self.email_service = email_service
        self.clock = clock

    async def run_rule(self, name: str) -> int:
        """Run one rule by name; returns the number of items processed.

        Any exception escaping the rule is logged and reported as 0.
        """
        try:
            method_name = self.RULES[name]
        except KeyError:
            raise ValueError(f"Unknown automation rule: {name}") from None

        rule: Callable[[], Awaitable[int]] = getattr(self, method_name)
        try:
            processed = await rule()
        except Exception:
            logger.exception("Automation rule %s failed", name)
            await self.db.rollback()
            return 0
        logger.info("Automation rule %s processed %d item(s)", name, processed)
        return processed

    # ── Rules ───────────────────────────────────────────────────────

    async def check_missed_attendance(self) -> int:
        today = self.clock()
        checked_in = (
            select(Attendance.id)
            .where(Attendance.employee_id == Employee.id, Attendance.date == today)
            .exists()
        )
        result = await self.db.execute(
            select(Employee.id, Employee.first_name, Employee.last_name)
            .where(Employee.status == EmployeeStatus.active.value, ~checked_in)
            .order_by(Employee.id)
        )

        async def handle(row) -> bool:
            employee_id, first_name, last_name = row
            await self.email_service.send_attendance_reminder(employee_id)
            await self._create_alert(
                AlertType.missed_attendance,
                title="Missed Attendance",
                message=f"{first_name} {last_name} hasn't checked in today",
                severity=AlertSeverity.medium,
                target_id=employee_id,
                target_type="employee",
            )
            return True

        return await self._for_each("missed_attendance", result.all(), handle)

    async def check_low_stock(self) -> int:
        total = func.coalesce(func.sum(Stock.quantity), 0)
        result = await self.db.execute(
            select(Product.id, Product.name, total.label("total"))
            .outerjoin(Stock, Stock.product_id == Product.id)
            .group_by(Product.id, Product.name, Product.low_stock_threshold)
            .having(total <= Product.low_stock_threshold)
            .order_by(Product.id)
        )

        async def handle(row) -> bool:
            product_id, name, total_stock = row
            await self.email_service.send_low_stock_alert(product_id)
            await self._create_alert(
                AlertType.low_stock,
                title="Low Stock Alert",
                message=f"{name} is running low on stock ({total_stock} remaining)",
                severity=AlertSeverity.critical if total_stock == 0 else AlertSeverity.high,
                target_id=product_id,
                target_type="product",
            )
            return True

        return await self._for_each("low_stock", result.all(), handle)

    async def check_overdue_invoices(self) -> int:
        today = self.clock()
        result = await self.db.execute(
            select(Invoice.id, Customer.name)
            .join(Customer, Invoice.customer_id == Customer.id)
            .where(
                Invoice.status == InvoiceStatus.sent.value,
                Invoice.due_date <= today,
            )
            .order_by(Invoice.id)
        )

        async def handle(row) -> bool:
            invoice_id, customer_name = row
            await self.email_service.send_invoice_reminder(invoice_id)

            # Marked overdue whether or not the reminder went out.
            invoice = await self.db.get(Invoice, invoice_id)
            invoice.status = InvoiceStatus.overdue.value
            await self.db.commit()

            await self._create_alert(
                AlertType.overdue_invoice,
                title="Overdue Invoice",
                message=f"Invoice #{invoice_id} for {customer_name} is overdue",
                severity=AlertSeverity.high,
                target_id=invoice_id,
                target_type="invoice",
            )
            return True

        return await self._for_each("overdue_invoices", result.all(), handle)

    async def check_late_tasks(self) -> int:
        today = self.clock()
        result = await self.db.execute(
            select(Task.id, Task.name, Employee.first_name, Employee.last_name)
            .join(Employee, Task.assigned_to_id == Employee.id)
            .where(
                Task.status != TaskStatus.completed.value,
                Task.due_date <= today,
            )
            .order_by(Task.id)
        )

        async def handle(row) -> bool:
            task_id, task_name, first_name, last_name = row
            await self.email_service.send_task_reminder(task_id)
            await self._create_alert(
                AlertType.late_task,
                title="Late Task",
                message=f'Task "{task_name}" assigned to {first_name} {last_name} is overdue',
                severity=AlertSeverity.high,
                target_id=task_id,
                target_type="task",
            )
            return True

        return await self._for_each("late_tasks", result.all(), handle)

    async def generate_monthly_payroll(self) -> int:
        """Create a pending payroll for every active employee for last month."""
        start, end = month_bounds(self.clock(), -1)
        result = await self.db.execute(
            select(
                Employee.id,
                Employee.first_name,
                Employee.last_name,
                Employee.salary,
                Employee.hourly_rate,
            )
            .where(Employee.status == EmployeeStatus.active.value)
            .order_by(Employee.id)
        )

        async def handle(row) -> bool:
            employee_id, first_name, last_name, salary, hourly_rate = row
            total_hours = await self.db.scalar(
                select(func.coalesce(func.sum(Attendance.hours_worked), 0.0)).where(
                    Attendance.employee_id == employee_id,
                    Attendance.date >= start,
                    Attendance.date <= end,
                )
            )
            figures = calculate_payroll(salary, hourly_rate, float(total_hours or 0))

            payroll = Payroll(
                employee_id=employee_id,
                amount=round(figures.net_pay, 2),
                base_salary=round(figures.base_salary, 2),
                overtime=round(figures.overtime_pay, 2),
                deductions=figures.deductions,
                bonuses=figures.bonuses,
                period="monthly",
                start_date=start,
                end_date=end,
                status=PayrollStatus.pending.value,
            )
            self.db.add(payroll)
            await self.db.commit()

            await self.email_service.send_payroll_notification(employee_id, payroll)
            logger.info(
                "Payroll generated for %s %s: %.2f", first_name, last_name, figures.net_pay,
            )
            return True

        return await self._for_each("monthly_payroll", result.all(), handle)

    async def process_recurring_invoices(self) -> int:
        """Materialise every due recurring invoice and advance its schedule."""
        today = self.clock()
        result = await self.db.execute(
            select(RecurringInvoice.id)
            .where(
                RecurringInvoice.status == RecurringStatus.active.value,
                RecurringInvoice.next_due_date <= today,
            )
            .order_by(RecurringInvoice.id)
        )

        async def handle(recurring_id: int) -> bool:
            recurring = await self.db.get(RecurringInvoice, recurring_id)
            invoice = Invoice(
                customer_id=recurring.customer_id,
                amount=recurring.amount,
                date=today,
                due_date=today + timedelta(days=INVOICE_PAYMENT_TERMS_DAYS),
                status=InvoiceStatus.draft.value,
                recurring_invoice_id=recurring.id,
            )
            self.db.add(invoice)
            await self.db.commit()

            recurring.next_due_date = advance_due_date(
                recurring.next_due_date, recurring.frequency,
            )
            await self.db.commit()
            logger.info(
                "Recurring invoice %d materialised as invoice #%d", recurring_id, invoice.id,
            )
            return True

        return await self._for_each("recurring_invoices", result.scalars().all(), handle)

    # ── Internal ────────────────────────────────────────────────────

    async def _for_each(
        self,
        rule: str,
        items: Iterable,
        handler: Callable[..., Awaitable[bool]],
    ) -> int:
        processed = 0
        for item in items:
            try:
                if await handler(item):
                    processed += 1
            except Exception:
                logger.exception("Automation rule %s failed on %r", rule, item)
                await self.db.rollback()
        return processed

    async def _create_alert(
        self,
        alert_type: AlertType,
        *,
        title: str,
        message: str,
        severity: AlertSeverity,
        target_id: Optional[int] = None,
        target_type: Optional[str] = None,
    ) -> Optional[Alert]:
        alert = Alert(
            type=alert_type.value,
            title=title,
            message=message,
            severity=severity.value,
            target_id=target_id,
            target_type=target_type,
            status=AlertStatus.active.value,
        )
        self.db.add(alert)
        try:
            await self.db.commit()
        except Exception:
            logger.exception(
                "Error creating %s alert for %s %s", alert_type.value, target_type, target_id,
            )
            await self.db.rollback()
            return None
        return alert


# ═════════════════════════════════════════════════════════════════════
# AlertService
# ═════════════════════════════════════════════════════════════════════


class AlertService:
    """Read and resolve alerts."""

    @staticmethod
    async def list_active(db: AsyncSession) -> Sequence[Alert]:
        result = await db.execute(
            select(Alert)
            .where(Alert.status == AlertStatus.active.value)
            .order_by(Alert.created_at.desc(), Alert.id.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def resolve(db: AsyncSession, alert_id: int, user_id: Optional[int]) -> Alert:
        alert = await db.get(Alert, alert_id)
        if alert is None:
            raise NotFoundException("Alert", alert_id)
        alert.status = AlertStatus.resolved.value
        alert.resolved_at = datetime.now(timezone.utc)
        alert.resolved_by = user_id
        await db.flush()
        await db.refresh(alert)
        return alert
