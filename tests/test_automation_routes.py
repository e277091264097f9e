"""Automation HTTP tests — manual triggers, alerts and email template admin."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from erp.automation.models import Alert
from erp.automation.router import TRIGGERS
from erp.dependencies import get_clock
from tests.conftest import make_customer, make_employee, make_invoice, make_product


# ── Triggers ────────────────────────────────────────────────────────


@pytest.mark.parametrize("segment", sorted(TRIGGERS))
async def test_trigger_requires_admin(client, user_headers, segment):
    resp = await client.post(f"/api/automation/trigger/{segment}", headers=user_headers)
    assert resp.status_code == 403


@pytest.mark.parametrize("segment", sorted(TRIGGERS))
async def test_trigger_on_empty_database(client, auth_headers, segment):
    resp = await client.post(f"/api/automation/trigger/{segment}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": TRIGGERS[segment][1], "data": {"processed": 0}}


async def test_attendance_trigger_sends_reminders(
    client, db, auth_headers, email_templates, mail_transport,
):
    await make_employee(db, email="late@example.com")

    resp = await client.post("/api/automation/trigger/attendance-check", headers=auth_headers)

    assert resp.json()["data"]["processed"] == 1
    assert mail_transport.recipients == ["late@example.com"]

    alerts = await client.get("/api/automation/alerts", headers=auth_headers)
    (alert,) = alerts.json()
    assert alert["type"] == "missed_attendance"
    assert alert["status"] == "active"


async def test_low_stock_trigger(client, db, auth_headers, email_templates):
    await make_product(db, quantity=0)

    resp = await client.post("/api/automation/trigger/low-stock-check", headers=auth_headers)
    assert resp.json()["data"]["processed"] == 1


async def test_overdue_trigger_when_mail_is_down(
    client, db, auth_headers, email_templates, mail_transport,
):
    mail_transport.fail = True
    customer = await make_customer(db)
    past = date.today() - timedelta(days=40)
    invoice = await make_invoice(
        db, customer, invoice_date=past, due_date=past + timedelta(days=10), status="sent",
    )

    resp = await client.post("/api/automation/trigger/overdue-invoices", headers=auth_headers)
    assert resp.json()["data"]["processed"] == 1

    invoices = await client.get("/api/accounting/invoices", headers=auth_headers)
    assert invoices.json()[0]["id"] == invoice.id
    assert invoices.json()[0]["status"] == "overdue"

    logs = await client.get("/api/automation/email-logs", headers=auth_headers)
    assert logs.json()[0]["status"] == "failed"


async def test_trigger_uses_injected_clock(app, client, db, auth_headers, email_templates):
    app.dependency_overrides[get_clock] = lambda: (lambda: date(2024, 3, 15))
    customer = await make_customer(db)
    await make_invoice(
        db, customer, invoice_date=date(2024, 2, 14), due_date=date(2024, 3, 15), status="sent",
    )
    await make_invoice(
        db, customer, invoice_date=date(2024, 3, 1), due_date=date(2024, 3, 16), status="sent",
    )

    resp = await client.post("/api/automation/trigger/overdue-invoices", headers=auth_headers)
    assert resp.json()["data"]["processed"] == 1


# ── Alerts ──────────────────────────────────────────────────────────


async def test_resolve_alert_route(client, db, admin_user, auth_headers):
    alert = Alert(type="low_stock", title="Low", message="m", severity="high")
    db.add(alert)
    await db.commit()

    resp = await client.patch(f"/api/automation/alerts/{alert.id}/resolve", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "resolved"
    assert resp.json()["resolved_by"] == admin_user.id

    assert (await client.get("/api/automation/alerts", headers=auth_headers)).json() == []


async def test_resolve_missing_alert(client, auth_headers):
    resp = await client.patch("/api/automation/alerts/404/resolve", headers=auth_headers)
    assert resp.status_code == 404


async def test_alerts_require_auth(client):
    assert (await client.get("/api/automation/alerts")).status_code == 401


# ── Email templates ─────────────────────────────────────────────────


async def test_list_email_templates(client, auth_headers, email_templates):
    resp = await client.get("/api/automation/email-templates", headers=auth_headers)
    assert resp.status_code == 200
    assert "attendance_reminder" in [t["name"] for t in resp.json()]


async def test_save_email_template_admin_only(client, user_headers):
    resp = await client.post(
        "/api/automation/email-templates",
        json={"name": "promo", "subject": "Hi", "body": "<p>x</p>"},
        headers=user_headers,
    )
    assert resp.status_code == 403


async def test_save_email_template(client, auth_headers):
    body = {
        "name": "promo",
        "subject": "Deal for {{ name }}",
        "body": "<p>Hello {{ name }}</p>",
        "variables": ["name"],
    }
    resp = await client.post("/api/automation/email-templates", json=body, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["subject"] == "Deal for {{ name }}"

    await client.post(
        "/api/automation/email-templates",
        json={**body, "subject": "Updated"},
        headers=auth_headers,
    )
    templates = (await client.get("/api/automation/email-templates", headers=auth_headers)).json()
    assert [(t["name"], t["subject"]) for t in templates] == [("promo", "Updated")]
