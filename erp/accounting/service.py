"""Accounting service layer — transactions, invoices and recurring billing."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.accounting.models import Invoice, RecurringInvoice, Transaction
from erp.accounting.schemas import FinancialSummary, MonthlyFigures
from erp.common.constants import (
    INVOICE_PAYMENT_TERMS_DAYS,
    InvoiceStatus,
    RecurringStatus,
    TransactionType,
)
from erp.common.dates import month_bounds, month_label
from erp.common.exceptions import BadRequestException, NotFoundException
from erp.crm.models import Customer

SUMMARY_MONTHS = 6

# (date, type, amount)
LedgerRow = tuple[date, str, float]


# ── Ledger arithmetic ───────────────────────────────────────────────

def ledger_total(
    rows: Sequence[LedgerRow],
    kind: TransactionType,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> float:
    return sum(
        amount for txn_date, txn_type, amount in rows
        if txn_type == kind.value
        and (start is None or txn_date >= start)
        and (end is None or txn_date <= end)
    )


def monthly_figures(rows: Sequence[LedgerRow], today: date, months: int) -> list[MonthlyFigures]:
    """Income, expenses and profit per calendar month, oldest first, ending with *today*'s."""
    figures: list[MonthlyFigures] = []
    for offset in range(-(months - 1), 1):
        start, end = month_bounds(today, offset)
        income = ledger_total(rows, TransactionType.income, start, end)
        expenses = ledger_total(rows, TransactionType.expense, start, end)
        figures.append(
            MonthlyFigures(
                month=month_label(start),
                income=income,
                expenses=expenses,
                profit=income - expenses,
            )
        )
    return figures


async def _require_customer(db: AsyncSession, customer_id: int) -> Customer:
    customer = await db.get(Customer, customer_id)
    if customer is None:
        raise NotFoundException("Customer", customer_id)
    return customer


# ═════════════════════════════════════════════════════════════════════
# Transactions
# ═════════════════════════════════════════════════════════════════════


class TransactionService:
    """Income and expense ledger."""

    @staticmethod
    async def list_transactions(
        db: AsyncSession,
        type: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Sequence[Transaction]:
        stmt = select(Transaction).options(
            selectinload(Transaction.invoice).selectinload(Invoice.customer)
        )
        if type:
            stmt = stmt.where(Transaction.type == type)
        if date_from:
            stmt = stmt.where(Transaction.date >= date_from)
        if date_to:
            stmt = stmt.where(Transaction.date <= date_to)
        result = await db.execute(stmt.order_by(Transaction.date.desc(), Transaction.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def get_transaction(db: AsyncSession, transaction_id: int) -> Transaction:
        transaction = await db.get(
            Transaction,
            transaction_id,
            options=[selectinload(Transaction.invoice).selectinload(Invoice.customer)],
            populate_existing=True,
        )
        if transaction is None:
            raise NotFoundException("Transaction", transaction_id)
        return transaction

    @staticmethod
    async def create_transaction(db: AsyncSession, **fields: Any) -> Transaction:
        invoice_id = fields.get("invoice_id")
        if invoice_id is not None and await db.get(Invoice, invoice_id) is None:
            raise NotFoundException("Invoice", invoice_id)

        transaction = Transaction(**fields)
        db.add(transaction)
        await db.flush()
        return await TransactionService.get_transaction(db, transaction.id)

    @staticmethod
    async def update_transaction(
        db: AsyncSession, transaction_id: int, **fields: Any,
    ) -> Transaction:
        transaction = await TransactionService.get_transaction(db, transaction_id)
        for key, value in fields.items():
            setattr(transaction, key, value)
        await db.flush()
        return await TransactionService.get_transaction(db, transaction_id)

    @staticmethod
    async def delete_transaction(db: AsyncSession, transaction_id: int) -> None:
        transaction = await TransactionService.get_transaction(db, transaction_id)
        await db.delete(transaction)
        await db.flush()

    @staticmethod
    async def ledger_rows(db: AsyncSession) -> list[LedgerRow]:
        result = await db.execute(select(Transaction.date, Transaction.type, Transaction.amount))
        return [tuple(row) for row in result.all()]

    @staticmethod
    async def get_summary(db: AsyncSession, today: date) -> FinancialSummary:
        """All-time totals plus income/expense/profit for the last six months."""
        rows = await TransactionService.ledger_rows(db)
        total_income = ledger_total(rows, TransactionType.income)
        total_expenses = ledger_total(rows, TransactionType.expense)
        return FinancialSummary(
            total_income=total_income,
            total_expenses=total_expenses,
            net_profit=total_income - total_expenses,
            monthly_data=monthly_figures(rows, today, SUMMARY_MONTHS),
            transaction_count=len(rows),
        )


# ═════════════════════════════════════════════════════════════════════
# Invoices
# ═════════════════════════════════════════════════════════════════════


class InvoiceService:
    """Customer invoices; ``paid`` in listings means a transaction is linked."""

    @staticmethod
    async def list_invoices(
        db: AsyncSession, status: Optional[str] = None,
    ) -> Sequence[Invoice]:
        stmt = select(Invoice).options(
            selectinload(Invoice.customer), selectinload(Invoice.transactions),
        )
        if status:
            stmt = stmt.where(Invoice.status == status)
        result = await db.execute(stmt.order_by(Invoice.date.desc(), Invoice.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def get_invoice(db: AsyncSession, invoice_id: int) -> Invoice:
        invoice = await db.get(
            Invoice,
            invoice_id,
            options=[selectinload(Invoice.customer), selectinload(Invoice.transactions)],
            populate_existing=True,
        )
        if invoice is None:
            raise NotFoundException("Invoice", invoice_id)
        return invoice

    @staticmethod
    async def create_invoice(
        db: AsyncSession,
        customer_id: int,
        amount: float,
        date: date,
        due_date: Optional[date] = None,
        status: str = InvoiceStatus.pending.value,
    ) -> Invoice:
        """Create an invoice; the due date defaults to the payment terms."""
        await _require_customer(db, customer_id)
        invoice = Invoice(
            customer_id=customer_id,
            amount=amount,
            date=date,
            due_date=due_date or date + timedelta(days=INVOICE_PAYMENT_TERMS_DAYS),
            status=status,
        )
        db.add(invoice)
        await db.flush()
        return await InvoiceService.get_invoice(db, invoice.id)

    @staticmethod
    async def update_status(db: AsyncSession, invoice_id: int, status: str) -> Invoice:
        invoice = await InvoiceService.get_invoice(db, invoice_id)
        invoice.status = status
        await db.flush()
        return invoice


# ═════════════════════════════════════════════════════════════════════
# Recurring invoices
# ═════════════════════════════════════════════════════════════════════


class RecurringInvoiceService:
    """Billing templates consumed by the recurring-invoice automation rule."""

    @staticmethod
    async def create(
        db: AsyncSession,
        customer_id: int,
        amount: float,
        frequency: str,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> RecurringInvoice:
        await _require_customer(db, customer_id)
        if end_date is not None and end_date < start_date:
            raise BadRequestException("end_date must not be before start_date")

        recurring = RecurringInvoice(
            customer_id=customer_id,
            amount=amount,
            frequency=frequency,
            start_date=start_date,
            end_date=end_date,
            next_due_date=start_date,
            status=RecurringStatus.active.value,
        )
        db.add(recurring)
        await db.flush()
        return await RecurringInvoiceService.get(db, recurring.id)

    @staticmethod
    async def get(db: AsyncSession, recurring_id: int) -> RecurringInvoice:
        recurring = await db.get(
            RecurringInvoice,
            recurring_id,
            options=[selectinload(RecurringInvoice.customer)],
            populate_existing=True,
        )
        if recurring is None:
            raise NotFoundException("RecurringInvoice", recurring_id)
        return recurring

    @staticmethod
    async def list_all(db: AsyncSession) -> Sequence[RecurringInvoice]:
        result = await db.execute(
            select(RecurringInvoice)
            .options(selectinload(RecurringInvoice.customer))
            .order_by(RecurringInvoice.created_at.desc(), RecurringInvoice.id.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def update(
        db: AsyncSession,
        recurring_id: int,
        status: Optional[str] = None,
        next_due_date: Optional[date] = None,
    ) -> RecurringInvoice:
        recurring = await RecurringInvoiceService.get(db, recurring_id)
        if status is not None:
            recurring.status = status
        if next_due_date is not None:
            recurring.next_due_date = next_due_date
        await db.flush()
        return await RecurringInvoiceService.get(db, recurring_id)
