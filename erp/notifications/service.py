"""Email service — template storage, rendering, delivery and the send log.

Every delivery attempt ends in exactly one ``EmailLog`` row and a boolean
result; nothing raised while sending escapes to the caller.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from jinja2 import Environment
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.accounting.models import Invoice
from erp.auth.models import Role, User
from erp.common.constants import ADMIN_ROLE, EmailStatus
from erp.common.dates import Clock
from erp.hr.models import Employee, Payroll
from erp.inventory.models import Product
from erp.notifications import templates
from erp.notifications.models import EmailLog, EmailTemplate
from erp.notifications.transport import MailTransport, OutgoingEmail
from erp.projects.models import Task

logger = logging.getLogger(__name__)


class TemplateNotFoundError(LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Template {name} not found")


class EmailService:
    """Render stored templates and deliver them through a mail transport."""

    def __init__(
        self,
        db: AsyncSession,
        transport: MailTransport,
        *,
        sender: str = "",
        clock: Clock = date.today,
    ) -> None:
        self.db = db
        self.transport = transport
        self.sender = sender
        self.clock = clock
        self._env = Environment(autoescape=True)

    # ── Templates ───────────────────────────────────────────────────

    async def seed_default_templates(self, *, reset: bool = True) -> int:
        """Insert the built-in templates.

        With *reset* the stored subject/body of an existing built-in are
        overwritten with the defaults; otherwise only missing ones are added.
        """
        written = 0
        for default in templates.DEFAULT_TEMPLATES:
            existing = await self._get_template(default["name"])
            if existing is not None and not reset:
                continue
            await self.upsert_template(**default)
            written += 1
        logger.info("Seeded %d built-in email templates (reset=%s)", written, reset)
        return written

    async def upsert_template(
        self,
        name: str,
        subject: str,
        body: str,
        variables: Sequence[str] = (),
        is_active: bool = True,
    ) -> EmailTemplate:
        template = await self._get_template(name)
        if template is None:
            template = EmailTemplate(name=name)
            self.db.add(template)
        template.subject = subject
        template.body = body
        template.variables = list(variables)
        template.is_active = is_active
        await self.db.commit()
        await self.db.refresh(template)
        return template

    async def list_templates(self, *, active_only: bool = True) -> Sequence[EmailTemplate]:
        query = select(EmailTemplate).order_by(EmailTemplate.name)
        if active_only:
            query = query.where(EmailTemplate.is_active.is_(True))
        result = await self.db.execute(query)
        return result.scalars().all()

    async def list_logs(self, limit: int = 100) -> Sequence[EmailLog]:
        result = await self.db.execute(
            select(EmailLog).order_by(EmailLog.sent_at.desc(), EmailLog.id.desc()).limit(limit)
        )
        return result.scalars().all()

    def render(self, source: str, variables: dict[str, Any]) -> str:
        return self._env.from_string(source).render(**variables)

    # ── Delivery ────────────────────────────────────────────────────

    async def send_email(
        self,
        to: Optional[str],
        template_name: str,
        variables: dict[str, Any],
        subject: str = "",
    ) -> bool:
        """Render *template_name* and deliver it to *to*.

        Returns True when the transport accepted the message. On any
        failure a ``failed`` log row is written and False is returned.
        """
        recipient = to or ""
        try:
            template = await self._get_template(template_name, active_only=True)
            if template is None:
                raise TemplateNotFoundError(template_name)

            rendered_subject = self.render(template.subject, variables)
            rendered_body = self.render(template.body, variables)
            if not recipient:
                raise ValueError("No recipient address")

            await self.transport.send(
                OutgoingEmail(
                    to=recipient,
                    subject=rendered_subject,
                    html=rendered_body,
                    sender=self.sender,
                )
            )
            await self._log(recipient, rendered_subject, rendered_body, EmailStatus.sent)
            logger.info("Email %s sent to %s", template_name, recipient)
            return True
        except Exception as exc:
            logger.error("Error sending %s email to %s: %s", template_name, recipient, exc)
            if isinstance(exc, SQLAlchemyError):
                await self.db.rollback()
            try:
                await self._log(recipient, subject, "", EmailStatus.failed, error=str(exc))
            except SQLAlchemyError:
                await self.db.rollback()
                logger.exception("Could not record failed email to %s", recipient)
            return False

    async def send_payroll_notification(self, employee_id: int, payroll: Payroll) -> bool:
        employee = await self.db.get(Employee, employee_id)
        if employee is None:
            return await self._fail_without_target(
                templates.PAYROLL_NOTIFICATION, f"Employee {employee_id} not found",
            )

        period = payroll.start_date or self.clock()
        variables = {
            "employeeName": employee.full_name,
            "month": period.strftime("%B"),
            "year": period.year,
            "baseSalary": _money(payroll.base_salary),
            "overtime": _money(payroll.overtime),
            "bonuses": _money(payroll.bonuses),
            "deductions": _money(payroll.deductions),
            "netPay": _money(payroll.amount),
        }
        return await self.send_email(employee.email, templates.PAYROLL_NOTIFICATION, variables)

    async def send_invoice_reminder(self, invoice_id: int) -> bool:
        invoice = await self.db.get(
            Invoice,
            invoice_id,
            options=[selectinload(Invoice.customer)],
            populate_existing=True,
        )
        if invoice is None or invoice.customer is None:
            return await self._fail_without_target(
                templates.INVOICE_REMINDER, f"Invoice {invoice_id} has no customer",
            )

        today = self.clock()
        due = invoice.due_date or today
        variables = {
            "customerName": invoice.customer.name,
            "invoiceNumber": str(invoice.id),
            "amount": _money(invoice.amount),
            "dueDate": due.isoformat(),
            "daysOverdue": str(max(0, (today - due).days)),
        }
        return await self.send_email(
            invoice.customer.email, templates.INVOICE_REMINDER, variables,
        )

    async def send_low_stock_alert(self, product_id: int) -> bool:
        """Notify every admin with an employee e-mail; True only if all sends succeed."""
        product = await self.db.get(
            Product,
            product_id,
            options=[selectinload(Product.stock)],
            populate_existing=True,
        )
        if product is None:
            return await self._fail_without_target(
                templates.LOW_STOCK_ALERT, f"Product {product_id} not found",
            )

        variables = {
            "productName": product.name,
            "currentStock": str(product.total_stock),
            "minThreshold": str(product.low_stock_threshold),
            "sku": product.sku,
        }

        result = await self.db.execute(
            select(Employee.email)
            .join(User, Employee.user_id == User.id)
            .join(Role, User.role_id == Role.id)
            .where(Role.name == ADMIN_ROLE)
            .order_by(User.id)
        )
        recipients = [email for email in result.scalars().all() if email]

        success = True
        for email in recipients:
            if not await self.send_email(email, templates.LOW_STOCK_ALERT, variables):
                success = False
        return success

    async def send_task_reminder(self, task_id: int) -> bool:
        task = await self.db.get(
            Task,
            task_id,
            options=[selectinload(Task.assigned_to), selectinload(Task.project)],
            populate_existing=True,
        )
        if task is None or task.assigned_to is None:
            return await self._fail_without_target(
                templates.TASK_REMINDER, f"Task {task_id} has no assignee",
            )

        variables = {
            "employeeName": task.assigned_to.full_name,
            "taskName": task.name,
            "projectName": task.project.name,
            "dueDate": task.due_date.isoformat() if task.due_date else "No due date",
            "priority": task.priority,
            "description": task.description or "No description",
        }
        return await self.send_email(
            task.assigned_to.email, templates.TASK_REMINDER, variables,
        )

    async def send_attendance_reminder(self, employee_id: int) -> bool:
        employee = await self.db.get(Employee, employee_id)
        if employee is None:
            return await self._fail_without_target(
                templates.ATTENDANCE_REMINDER, f"Employee {employee_id} not found",
            )
        return await self.send_email(
            employee.email,
            templates.ATTENDANCE_REMINDER,
            {"employeeName": employee.full_name},
        )

    # ── Internal ────────────────────────────────────────────────────

    async def _get_template(
        self, name: str, *, active_only: bool = False,
    ) -> Optional[EmailTemplate]:
        query = select(EmailTemplate).where(EmailTemplate.name == name)
        if active_only:
            query = query.where(EmailTemplate.is_active.is_(True))
        result = await self.db.execute(query)
        return result.scalars().first()

    async def _log(
        self,
        to: str,
        subject: str,
        body: str,
        status: EmailStatus,
        error: Optional[str] = None,
    ) -> None:
        self.db.add(
            EmailLog(to=to, subject=subject, body=body, status=status.value, error=error)
        )
        await self.db.commit()

    async def _fail_without_target(self, template_name: str, reason: str) -> bool:
        """Record an attempt that had nobody to address; always False."""
        logger.warning("Skipping %s email: %s", template_name, reason)
        try:
            await self._log("", "", "", EmailStatus.failed, error=reason)
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Could not record failed %s email", template_name)
        return False


def _money(value: Optional[float]) -> str:
    return f"{(value or 0):.2f}"
