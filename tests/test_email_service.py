"""Email service tests — template seeding, rendering, delivery log and the
per-event notification helpers.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from erp.auth.service import register_user
from erp.common.constants import ADMIN_ROLE
from erp.hr.models import Payroll
from erp.notifications import templates
from erp.notifications.models import EmailLog, EmailTemplate
from erp.notifications.service import EmailService
from tests.conftest import (
    FakeTransport,
    make_customer,
    make_employee,
    make_invoice,
    make_product,
    make_project,
    make_task,
)

TODAY = date(2024, 3, 15)


def _service(db, transport: FakeTransport) -> EmailService:
    return EmailService(db, transport, sender="erp@example.com", clock=lambda: TODAY)


async def _logs(db) -> list[EmailLog]:
    result = await db.execute(select(EmailLog).order_by(EmailLog.id))
    return list(result.scalars().all())


# ── Templates ───────────────────────────────────────────────────────


async def test_seed_creates_all_builtin_templates(db):
    service = _service(db, FakeTransport())
    written = await service.seed_default_templates()
    assert written == len(templates.DEFAULT_TEMPLATES)

    names = [t.name for t in await service.list_templates()]
    assert names == sorted(t["name"] for t in templates.DEFAULT_TEMPLATES)


async def test_seed_with_reset_restores_edited_template(db):
    service = _service(db, FakeTransport())
    await service.seed_default_templates()
    await service.upsert_template(
        templates.ATTENDANCE_REMINDER, "Edited", "<p>edited</p>", ["employeeName"],
    )

    await service.seed_default_templates(reset=True)
    template = (
        await db.execute(
            select(EmailTemplate).where(EmailTemplate.name == templates.ATTENDANCE_REMINDER)
        )
    ).scalar_one()
    assert template.subject == "Attendance Reminder"


async def test_seed_without_reset_keeps_edits(db):
    service = _service(db, FakeTransport())
    await service.seed_default_templates()
    await service.upsert_template(
        templates.ATTENDANCE_REMINDER, "Edited", "<p>edited</p>", ["employeeName"],
    )

    written = await service.seed_default_templates(reset=False)
    assert written == 0
    template = (
        await db.execute(
            select(EmailTemplate).where(EmailTemplate.name == templates.ATTENDANCE_REMINDER)
        )
    ).scalar_one()
    assert template.subject == "Edited"


async def test_upsert_does_not_duplicate_names(db):
    service = _service(db, FakeTransport())
    await service.upsert_template("welcome", "Hi {{ name }}", "<p>Hello</p>", ["name"])
    await service.upsert_template("welcome", "Hello {{ name }}", "<p>Hello</p>", ["name"])

    rows = (await db.execute(select(EmailTemplate))).scalars().all()
    assert len(rows) == 1
    assert rows[0].subject == "Hello {{ name }}"


async def test_list_templates_skips_inactive(db):
    service = _service(db, FakeTransport())
    await service.upsert_template("old", "Old", "<p>old</p>", is_active=False)
    await service.upsert_template("new", "New", "<p>new</p>")

    assert [t.name for t in await service.list_templates()] == ["new"]
    assert len(await service.list_templates(active_only=False)) == 2


# ── send_email ──────────────────────────────────────────────────────


async def test_send_email_renders_and_logs_success(db):
    transport = FakeTransport()
    service = _service(db, transport)
    await service.upsert_template(
        "greeting", "Hello {{ name }}", "<p>Dear {{ name }}, {{ missing }}done</p>", ["name"],
    )

    ok = await service.send_email("a@example.com", "greeting", {"name": "Ada"})

    assert ok is True
    assert len(transport.sent) == 1
    message = transport.sent[0]
    assert message.subject == "Hello Ada"
    # Unknown placeholders render as empty text.
    assert message.html == "<p>Dear Ada, done</p>"
    assert message.sender == "erp@example.com"

    logs = await _logs(db)
    assert [(l.to, l.status, l.error) for l in logs] == [("a@example.com", "sent", None)]


async def test_send_email_escapes_html_in_values(db):
    transport = FakeTransport()
    service = _service(db, transport)
    await service.upsert_template("greeting", "Hi", "<p>{{ name }}</p>", ["name"])

    await service.send_email("a@example.com", "greeting", {"name": "<b>Bob</b>"})
    assert transport.sent[0].html == "<p>&lt;b&gt;Bob&lt;/b&gt;</p>"


async def test_send_email_unknown_template_logs_failure(db):
    transport = FakeTransport()
    service = _service(db, transport)

    ok = await service.send_email("a@example.com", "does_not_exist", {}, subject="Fallback")

    assert ok is False
    assert transport.sent == []
    logs = await _logs(db)
    assert len(logs) == 1
    assert logs[0].status == "failed"
    assert logs[0].subject == "Fallback"
    assert "does_not_exist" in logs[0].error


async def test_send_email_transport_error_logs_failure(db):
    transport = FakeTransport(fail=True)
    service = _service(db, transport)
    await service.seed_default_templates()

    ok = await service.send_email(
        "a@example.com", templates.ATTENDANCE_REMINDER, {"employeeName": "Ada"},
    )

    assert ok is False
    logs = await _logs(db)
    assert logs[-1].status == "failed"
    assert "SMTP server unavailable" in logs[-1].error


async def test_send_email_without_recipient_fails(db):
    service = _service(db, FakeTransport())
    await service.seed_default_templates()

    ok = await service.send_email(None, templates.ATTENDANCE_REMINDER, {"employeeName": "Ada"})
    assert ok is False
    assert (await _logs(db))[-1].status == "failed"


# ── Event helpers ───────────────────────────────────────────────────


async def test_payroll_notification_variables(db):
    transport = FakeTransport()
    service = _service(db, transport)
    await service.seed_default_templates()
    employee = await make_employee(db)
    payroll = Payroll(
        employee_id=employee.id,
        amount=5100.0,
        base_salary=4800.0,
        overtime=300.0,
        start_date=date(2024, 2, 1),
        end_date=date(2024, 2, 29),
    )
    db.add(payroll)
    await db.commit()

    assert await service.send_payroll_notification(employee.id, payroll) is True
    message = transport.sent[0]
    assert message.to == "jane.doe@example.com"
    assert message.subject == "Your Payroll Statement - February 2024"
    assert "$5100.00" in message.html
    assert "$300.00" in message.html


async def test_invoice_reminder_counts_days_overdue(db):
    transport = FakeTransport()
    service = _service(db, transport)
    await service.seed_default_templates()
    customer = await make_customer(db)
    invoice = await make_invoice(
        db, customer, amount=1500, invoice_date=date(2024, 2, 1), due_date=date(2024, 3, 1),
    )

    assert await service.send_invoice_reminder(invoice.id) is True
    message = transport.sent[0]
    assert message.to == "billing@acme.example"
    assert message.subject == f"Invoice Reminder - {invoice.id}"
    assert "<strong>Days Overdue:</strong> 14" in message.html


async def test_low_stock_alert_goes_to_admin_employees(db):
    transport = FakeTransport()
    service = _service(db, transport)
    await service.seed_default_templates()
    admin = await register_user(db, "boss@example.com", "password", ADMIN_ROLE)
    await db.commit()
    await make_employee(db, email="boss.employee@example.com", user_id=admin.id)
    await make_employee(db, email="worker@example.com", first_name="Wes")
    product = await make_product(db, quantity=3)

    assert await service.send_low_stock_alert(product.id) is True
    assert transport.recipients == ["boss.employee@example.com"]
    assert "<strong>Current Stock:</strong> 3" in transport.sent[0].html


async def test_low_stock_alert_keeps_sending_after_a_failure(db):
    transport = FakeTransport(fail_for={"first.admin@example.com"})
    service = _service(db, transport)
    await service.seed_default_templates()
    for email in ("first.admin@example.com", "second.admin@example.com"):
        admin = await register_user(db, f"user.{email}", "password", ADMIN_ROLE)
        await db.commit()
        await make_employee(db, email=email, user_id=admin.id)
    product = await make_product(db, quantity=1)

    assert await service.send_low_stock_alert(product.id) is False
    assert transport.recipients == ["second.admin@example.com"]
    assert [(log.to, log.status) for log in await _logs(db)] == [
        ("first.admin@example.com", "failed"),
        ("second.admin@example.com", "sent"),
    ]


async def test_low_stock_alert_without_admins_is_success(db):
    transport = FakeTransport()
    service = _service(db, transport)
    product = await make_product(db, quantity=0)

    assert await service.send_low_stock_alert(product.id) is True
    assert transport.sent == []


async def test_task_reminder_defaults(db):
    transport = FakeTransport()
    service = _service(db, transport)
    await service.seed_default_templates()
    employee = await make_employee(db)
    project = await make_project(db, await make_customer(db))
    task = await make_task(db, project, assignee=employee)

    assert await service.send_task_reminder(task.id) is True
    html = transport.sent[0].html
    assert "No due date" in html
    assert "No description" in html


async def test_task_reminder_unassigned_returns_false(db):
    service = _service(db, FakeTransport())
    project = await make_project(db, await make_customer(db))
    task = await make_task(db, project)

    assert await service.send_task_reminder(task.id) is False
    (log,) = await _logs(db)
    assert (log.status, log.error) == ("failed", f"Task {task.id} has no assignee")


async def test_attendance_reminder_unknown_employee(db):
    service = _service(db, FakeTransport())
    assert await service.send_attendance_reminder(999) is False
    (log,) = await _logs(db)
    assert log.status == "failed"
    assert log.error == "Employee 999 not found"
