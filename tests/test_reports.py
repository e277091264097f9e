"""Reports tests — dashboard and per-module reports."""

from __future__ import annotations

from datetime import date

import pytest

from erp.hr.models import Attendance, Payroll
from erp.reports.service import ReportService
from tests.conftest import (
    make_customer,
    make_employee,
    make_invoice,
    make_product,
    make_project,
    make_task,
    make_transaction,
)

TODAY = date(2024, 3, 15)


async def test_dashboard(db):
    await make_employee(db)
    acme = await make_customer(db, name="Acme")
    globex = await make_customer(db, name="Globex", email=None)
    acme_invoice = await make_invoice(db, acme, amount=600)
    globex_invoice = await make_invoice(db, globex, amount=900)
    await make_transaction(db, amount=600, invoice=acme_invoice, txn_date=date(2024, 3, 1))
    await make_transaction(db, amount=900, invoice=globex_invoice, txn_date=date(2024, 2, 1))
    await make_transaction(db, amount=100, txn_date=date(2024, 3, 2))
    await make_transaction(db, amount=400, type="expense", txn_date=date(2024, 3, 3))
    project = await make_project(db, acme)
    await make_task(db, project)
    await make_product(db, quantity=2)

    report = await ReportService.get_dashboard(db, TODAY)

    summary = report.summary
    assert (summary.employees, summary.customers, summary.projects, summary.products) == (
        1, 2, 1, 1,
    )
    assert summary.revenue == 1600
    assert summary.expenses == 400
    assert summary.profit == 1200
    assert summary.profit_margin == pytest.approx(75)

    assert len(report.monthly_data) == 12
    march = report.monthly_data[-1]
    assert march.month == "Mar 2024"
    assert march.revenue == 700
    assert march.profit == 300

    assert [(c.customer, c.revenue) for c in report.customer_revenue_data] == [
        ("Globex", 900),
        ("Acme", 600),
        ("Direct Sales", 100),
    ]
    assert [s.current_stock for s in report.stock_alerts] == [2]
    assert report.upcoming_tasks[0].assigned_to == "Unassigned"
    assert report.recent_activities.employees[0].department == "Engineering"
    assert report.recent_activities.transactions[0].customer == "N/A"


async def test_employee_report(db):
    employee = await make_employee(db)
    db.add(Attendance(employee_id=employee.id, date=date(2024, 3, 1), hours_worked=8))
    db.add(
        Payroll(
            employee_id=employee.id,
            amount=4800,
            base_salary=4800,
            start_date=date(2024, 2, 1),
            end_date=date(2024, 2, 29),
        )
    )
    await db.commit()

    (row,) = await ReportService.get_employee_report(db)
    assert row.name == "Jane Doe"
    assert row.attendance == 1
    assert row.leaves == 0
    assert row.total_payroll == 4800


async def test_financial_report(db):
    customer = await make_customer(db)
    await make_invoice(db, customer, amount=300, status="pending")
    await make_invoice(db, customer, amount=200, status="pending")
    await make_invoice(db, customer, amount=999, status="paid")
    for i in range(12):
        await make_transaction(db, amount=10, txn_date=date(2024, 3, 1 + i))

    report = await ReportService.get_financial_report(db, TODAY)

    assert report.summary.pending_invoices == 2
    assert report.summary.total_pending == 500
    assert report.summary.total_revenue == 120
    assert report.summary.transaction_count == 12
    assert len(report.recent_transactions) == 10
    assert report.recent_transactions[0].date == date(2024, 3, 12)


async def test_inventory_report(db):
    await make_product(db, name="Cable", sku="C-1", price=20, quantity=5)
    await make_product(db, name="Lamp", sku="L-1", price=50, quantity=30)

    report = await ReportService.get_inventory_report(db)

    assert report.summary.total_products == 2
    assert report.summary.total_stock == 35
    assert report.summary.total_value == 5 * 20 + 30 * 50
    assert report.summary.low_stock == 1
    assert report.products[0].warehouses[0].name == "Main Warehouse"


async def test_customer_report(db):
    active = await make_customer(db, name="Active")
    await make_project(db, active, name="First")
    await make_project(db, active, name="Second")
    await make_invoice(db, active, amount=400)
    await make_customer(db, name="Prospect", email=None)

    report = await ReportService.get_customer_report(db)

    rows = {r.name: r for r in report.customers}
    assert rows["Active"].last_project == "Second"
    assert rows["Active"].status == "active"
    assert rows["Prospect"].last_project == "None"
    assert rows["Prospect"].status == "prospect"
    assert report.summary.active_customers == 1
    assert report.summary.average_revenue == 200


async def test_report_routes(client, auth_headers):
    for path in ("dashboard", "employees", "financial", "inventory", "customers"):
        resp = await client.get(f"/api/reports/{path}", headers=auth_headers)
        assert resp.status_code == 200, path
