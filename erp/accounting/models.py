"""Accounting ORM models: Invoice, Transaction, RecurringInvoice.

Revenue and expense figures are always derived from ``Transaction`` rows;
invoice amounts are what is owed, not what was realised.
"""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.common.constants import InvoiceStatus, RecurringFrequency, RecurringStatus
from erp.database import Base

if TYPE_CHECKING:
    from erp.crm.models import Customer

Money = sa.Numeric(12, 2, asdecimal=False)


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[int] = mapped_column(
        sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False,
    )
    amount: Mapped[float] = mapped_column(Money, nullable=False)
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    due_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    status: Mapped[str] = mapped_column(
        sa.String(20), default=InvoiceStatus.pending.value, nullable=False,
    )
    recurring_invoice_id: Mapped[Optional[int]] = mapped_column(
        sa.ForeignKey("recurring_invoices.id", ondelete="SET NULL"),
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    # Relationships
    customer: Mapped["Customer"] = relationship(back_populates="invoices")
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="invoice")
    recurring_invoice: Mapped[Optional["RecurringInvoice"]] = relationship(
        back_populates="invoices",
    )


class Transaction(Base):
    """Realised income or expense, optionally settling an invoice."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    amount: Mapped[float] = mapped_column(Money, nullable=False)
    type: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.String(255))
    category: Mapped[Optional[str]] = mapped_column(sa.String(100))
    invoice_id: Mapped[Optional[int]] = mapped_column(
        sa.ForeignKey("invoices.id", ondelete="SET NULL"),
    )

    invoice: Mapped[Optional["Invoice"]] = relationship(back_populates="transactions")


class RecurringInvoice(Base):
    """Billing template that materialises a new invoice every period."""

    __tablename__ = "recurring_invoices"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[int] = mapped_column(
        sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False,
    )
    amount: Mapped[float] = mapped_column(Money, nullable=False)
    # Free text: unknown values bill monthly.
    frequency: Mapped[str] = mapped_column(
        sa.String(20), default=RecurringFrequency.monthly.value, nullable=False,
    )
    start_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[Optional[dt.date]] = mapped_column(sa.Date)
    next_due_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[str] = mapped_column(
        sa.String(20), default=RecurringStatus.active.value, nullable=False,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    # Relationships
    customer: Mapped["Customer"] = relationship(back_populates="recurring_invoices")
    invoices: Mapped[list["Invoice"]] = relationship(back_populates="recurring_invoice")
