"""Accounting module tests — ledger, summary, invoices and recurring invoices."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from erp.accounting.service import ledger_total, monthly_figures
from erp.common.constants import TransactionType
from tests.conftest import make_customer, make_invoice, make_transaction

ROWS = [
    (date(2024, 1, 10), "income", 1000.0),
    (date(2024, 2, 5), "income", 500.0),
    (date(2024, 2, 20), "expense", 200.0),
    (date(2024, 3, 1), "expense", 50.0),
]


# ── Ledger arithmetic ───────────────────────────────────────────────


def test_ledger_total_by_kind_and_range():
    assert ledger_total(ROWS, TransactionType.income) == 1500
    assert ledger_total(ROWS, TransactionType.expense) == 250
    assert ledger_total(ROWS, TransactionType.income, date(2024, 2, 1), date(2024, 2, 29)) == 500


def test_monthly_figures_oldest_first():
    figures = monthly_figures(ROWS, date(2024, 3, 15), 3)
    assert [f.month for f in figures] == ["Jan 2024", "Feb 2024", "Mar 2024"]
    assert [(f.income, f.expenses, f.profit) for f in figures] == [
        (1000, 0, 1000),
        (500, 200, 300),
        (0, 50, -50),
    ]


# ── Transactions ────────────────────────────────────────────────────


async def test_create_manual_transaction(client, auth_headers):
    resp = await client.post(
        "/api/accounting/transactions",
        json={"amount": 120.5, "type": "expense", "date": "2024-03-02"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["description"] == "Manual transaction"
    assert data["category"] == "Expense"
    assert data["status"] == "completed"
    assert data["reference"] == f"TXN-{data['id']}"
    assert data["customer_name"] is None


async def test_transaction_linked_to_invoice(client, db, auth_headers):
    invoice = await make_invoice(db, await make_customer(db, name="Acme"))
    resp = await client.post(
        "/api/accounting/transactions",
        json={
            "amount": 1000,
            "type": "income",
            "date": "2024-03-02",
            "invoice_id": invoice.id,
            "description": "ignored for linked rows",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["description"] == f"Invoice #{invoice.id}"
    assert data["reference"] == f"INV-{invoice.id}"
    assert data["customer_name"] == "Acme"
    assert data["category"] == "Revenue"


async def test_transaction_unknown_invoice(client, auth_headers):
    resp = await client.post(
        "/api/accounting/transactions",
        json={"amount": 10, "type": "income", "date": "2024-03-02", "invoice_id": 77},
        headers=auth_headers,
    )
    assert resp.status_code == 404


async def test_transaction_rejects_non_positive_amount(client, auth_headers):
    resp = await client.post(
        "/api/accounting/transactions",
        json={"amount": 0, "type": "income", "date": "2024-03-02"},
        headers=auth_headers,
    )
    assert resp.status_code == 422


async def test_list_transactions_filters(client, db, auth_headers):
    await make_transaction(db, amount=10, txn_date=date(2024, 1, 1))
    await make_transaction(db, amount=20, txn_date=date(2024, 2, 1))
    await make_transaction(db, amount=30, type="expense", txn_date=date(2024, 2, 2))

    resp = await client.get("/api/accounting/transactions", headers=auth_headers)
    assert [t["amount"] for t in resp.json()] == [30, 20, 10]

    resp = await client.get("/api/accounting/transactions?type=income", headers=auth_headers)
    assert [t["amount"] for t in resp.json()] == [20, 10]

    resp = await client.get(
        "/api/accounting/transactions?date_from=2024-02-01&date_to=2024-02-01",
        headers=auth_headers,
    )
    assert [t["amount"] for t in resp.json()] == [20]


async def test_update_and_delete_transaction(client, db, auth_headers):
    txn = await make_transaction(db, amount=10, description="Coffee")
    url = f"/api/accounting/transactions/{txn.id}"

    resp = await client.put(url, json={"amount": 15, "category": "Office"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["amount"] == 15
    assert resp.json()["category"] == "Office"
    assert resp.json()["description"] == "Coffee"

    assert (await client.delete(url, headers=auth_headers)).status_code == 204
    assert (await client.get(url, headers=auth_headers)).status_code == 404


async def test_summary(client, db, auth_headers):
    today = date.today()
    await make_transaction(db, amount=900, txn_date=today)
    await make_transaction(db, amount=400, type="expense", txn_date=today)
    await make_transaction(db, amount=100, txn_date=today - timedelta(days=800))

    resp = await client.get("/api/accounting/summary", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_income"] == 1000
    assert data["total_expenses"] == 400
    assert data["net_profit"] == 600
    assert data["transaction_count"] == 3
    assert len(data["monthly_data"]) == 6
    assert data["monthly_data"][-1]["month"] == today.strftime("%b %Y")
    assert data["monthly_data"][-1]["profit"] == 500


# ── Invoices ────────────────────────────────────────────────────────


async def test_create_invoice_default_due_date(client, db, auth_headers):
    customer = await make_customer(db, name="Acme")
    resp = await client.post(
        "/api/accounting/invoices",
        json={"customer_id": customer.id, "amount": 1200, "date": "2024-03-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["due_date"] == "2024-03-31"
    assert data["status"] == "pending"
    assert data["customer_name"] == "Acme"
    assert data["paid"] is False
    assert data["reference"] == f"INV-{data['id']}"


async def test_create_invoice_unknown_customer(client, auth_headers):
    resp = await client.post(
        "/api/accounting/invoices",
        json={"customer_id": 404, "amount": 10, "date": "2024-03-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 404


async def test_invoice_paid_flag_and_status_update(client, db, auth_headers):
    customer = await make_customer(db)
    invoice = await make_invoice(db, customer)
    await make_transaction(db, amount=invoice.amount, invoice=invoice)

    resp = await client.patch(
        f"/api/accounting/invoices/{invoice.id}/status",
        json={"status": "paid"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert resp.json()["paid"] is True

    resp = await client.get("/api/accounting/invoices?status=paid", headers=auth_headers)
    assert [i["id"] for i in resp.json()] == [invoice.id]


async def test_invoice_status_must_be_known(client, db, auth_headers):
    invoice = await make_invoice(db, await make_customer(db))
    resp = await client.patch(
        f"/api/accounting/invoices/{invoice.id}/status",
        json={"status": "lost"},
        headers=auth_headers,
    )
    assert resp.status_code == 422


# ── Recurring invoices ──────────────────────────────────────────────


async def test_create_recurring_invoice(client, db, auth_headers):
    customer = await make_customer(db, name="Acme")
    resp = await client.post(
        "/api/automation/recurring-invoices",
        json={
            "customer_id": customer.id,
            "amount": 250,
            "frequency": "quarterly",
            "start_date": "2024-04-01",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["next_due_date"] == "2024-04-01"
    assert data["status"] == "active"
    assert data["customer"]["name"] == "Acme"

    listing = await client.get("/api/automation/recurring-invoices", headers=auth_headers)
    assert [r["id"] for r in listing.json()] == [data["id"]]


async def test_recurring_invoice_end_before_start(client, db, auth_headers):
    customer = await make_customer(db)
    resp = await client.post(
        "/api/automation/recurring-invoices",
        json={
            "customer_id": customer.id,
            "amount": 250,
            "start_date": "2024-04-01",
            "end_date": "2024-03-01",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 400


@pytest.mark.parametrize("status", ["paused", "cancelled", "active"])
async def test_update_recurring_invoice_status(client, db, auth_headers, status):
    customer = await make_customer(db)
    created = await client.post(
        "/api/automation/recurring-invoices",
        json={"customer_id": customer.id, "amount": 99, "start_date": "2024-04-01"},
        headers=auth_headers,
    )
    recurring_id = created.json()["id"]

    resp = await client.patch(
        f"/api/automation/recurring-invoices/{recurring_id}",
        json={"status": status, "next_due_date": "2024-05-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == status
    assert resp.json()["next_due_date"] == "2024-05-01"
