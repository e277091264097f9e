"""Accounting router — transactions, financial summary and invoices.

Routes:
    /transactions          — List, create transactions
    /transactions/{id}     — Get, update, delete a transaction
    /summary               — Totals and a six-month series
    /invoices              — List, create invoices
    /invoices/{id}/status  — Change an invoice's status
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from erp.accounting.models import Invoice, Transaction
from erp.accounting.schemas import (
    FinancialSummary,
    InvoiceCreate,
    InvoiceOut,
    InvoiceStatusUpdate,
    TransactionCreate,
    TransactionOut,
    TransactionUpdate,
)
from erp.accounting.service import InvoiceService, TransactionService
from erp.auth.dependencies import get_current_user
from erp.common.constants import TransactionType
from erp.database import get_db

router = APIRouter(prefix="", tags=["accounting"], dependencies=[Depends(get_current_user)])


# ── Serialisers ─────────────────────────────────────────────────────

def _transaction_out(txn: Transaction) -> TransactionOut:
    invoice = txn.invoice
    if invoice is not None:
        description = f"Invoice #{invoice.id}"
    else:
        description = txn.description or "Manual transaction"
    default_category = "Revenue" if txn.type == TransactionType.income.value else "Expense"
    return TransactionOut(
        id=txn.id,
        amount=txn.amount,
        type=txn.type,
        date=txn.date,
        description=description,
        category=txn.category or default_category,
        reference=f"INV-{invoice.id}" if invoice is not None else f"TXN-{txn.id}",
        invoice_id=txn.invoice_id,
        customer_name=invoice.customer.name if invoice is not None else None,
    )


def _invoice_out(invoice: Invoice) -> InvoiceOut:
    return InvoiceOut(
        id=invoice.id,
        customer_id=invoice.customer_id,
        customer_name=invoice.customer.name,
        amount=invoice.amount,
        date=invoice.date,
        due_date=invoice.due_date,
        status=invoice.status,
        reference=f"INV-{invoice.id}",
        paid=bool(invoice.transactions),
    )


# ═════════════════════════════════════════════════════════════════════
# Transactions
# ═════════════════════════════════════════════════════════════════════


@router.get("/transactions", response_model=list[TransactionOut])
async def list_transactions(
    type: Optional[TransactionType] = Query(None, description="income or expense"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    transactions = await TransactionService.list_transactions(
        db, type=type.value if type else None, date_from=date_from, date_to=date_to,
    )
    return [_transaction_out(t) for t in transactions]


@router.get("/transactions/{transaction_id}", response_model=TransactionOut)
async def get_transaction(transaction_id: int, db: AsyncSession = Depends(get_db)):
    return _transaction_out(await TransactionService.get_transaction(db, transaction_id))


@router.post("/transactions", response_model=TransactionOut, status_code=201)
async def create_transaction(body: TransactionCreate, db: AsyncSession = Depends(get_db)):
    data = body.model_dump()
    data["type"] = body.type.value
    transaction = await TransactionService.create_transaction(db, **data)
    return _transaction_out(transaction)


@router.put("/transactions/{transaction_id}", response_model=TransactionOut)
async def update_transaction(
    transaction_id: int,
    body: TransactionUpdate,
    db: AsyncSession = Depends(get_db),
):
    data = body.model_dump(exclude_unset=True)
    if body.type is not None:
        data["type"] = body.type.value
    transaction = await TransactionService.update_transaction(db, transaction_id, **data)
    return _transaction_out(transaction)


@router.delete("/transactions/{transaction_id}", status_code=204)
async def delete_transaction(transaction_id: int, db: AsyncSession = Depends(get_db)):
    await TransactionService.delete_transaction(db, transaction_id)
    return Response(status_code=204)


# ── GET /summary ────────────────────────────────────────────────────

@router.get("/summary", response_model=FinancialSummary)
async def financial_summary(db: AsyncSession = Depends(get_db)):
    return await TransactionService.get_summary(db, date.today())


# ═════════════════════════════════════════════════════════════════════
# Invoices
# ═════════════════════════════════════════════════════════════════════


@router.get("/invoices", response_model=list[InvoiceOut])
async def list_invoices(
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return [_invoice_out(i) for i in await InvoiceService.list_invoices(db, status=status)]


@router.post("/invoices", response_model=InvoiceOut, status_code=201)
async def create_invoice(body: InvoiceCreate, db: AsyncSession = Depends(get_db)):
    invoice = await InvoiceService.create_invoice(
        db,
        customer_id=body.customer_id,
        amount=body.amount,
        date=body.date,
        due_date=body.due_date,
        status=body.status.value,
    )
    return _invoice_out(invoice)


@router.patch("/invoices/{invoice_id}/status", response_model=InvoiceOut)
async def update_invoice_status(
    invoice_id: int,
    body: InvoiceStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    invoice = await InvoiceService.update_status(db, invoice_id, body.status.value)
    return _invoice_out(invoice)
