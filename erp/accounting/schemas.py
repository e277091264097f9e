"""Accounting Pydantic v2 schemas — request/response validation."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from erp.common.constants import InvoiceStatus, RecurringStatus, TransactionType


# ═════════════════════════════════════════════════════════════════════
# Transactions
# ═════════════════════════════════════════════════════════════════════


class TransactionCreate(BaseModel):
    amount: float = Field(..., gt=0)
    type: TransactionType
    date: dt.date
    description: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    invoice_id: Optional[int] = None


class TransactionUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    type: Optional[TransactionType] = None
    date: Optional[dt.date] = None
    description: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)


class TransactionOut(BaseModel):
    """Ledger line as shown in the transactions table."""

    id: int
    amount: float
    type: str
    date: dt.date
    description: str
    category: str
    status: str = "completed"
    reference: str
    invoice_id: Optional[int] = None
    customer_name: Optional[str] = None


class MonthlyFigures(BaseModel):
    month: str
    income: float
    expenses: float
    profit: float


class FinancialSummary(BaseModel):
    total_income: float
    total_expenses: float
    net_profit: float
    monthly_data: List[MonthlyFigures]
    transaction_count: int


# ═════════════════════════════════════════════════════════════════════
# Invoices
# ═════════════════════════════════════════════════════════════════════


class InvoiceCreate(BaseModel):
    customer_id: int
    amount: float = Field(..., gt=0)
    date: dt.date
    due_date: Optional[dt.date] = None
    status: InvoiceStatus = InvoiceStatus.pending


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceOut(BaseModel):
    id: int
    customer_id: int
    customer_name: str
    amount: float
    date: dt.date
    due_date: Optional[dt.date] = None
    status: str
    reference: str
    paid: bool


# ═════════════════════════════════════════════════════════════════════
# Recurring invoices
# ═════════════════════════════════════════════════════════════════════


class CustomerBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None


class RecurringInvoiceCreate(BaseModel):
    customer_id: int
    amount: float = Field(..., gt=0)
    frequency: str = Field("monthly", min_length=1, max_length=20)
    start_date: dt.date
    end_date: Optional[dt.date] = None


class RecurringInvoiceUpdate(BaseModel):
    status: Optional[RecurringStatus] = None
    next_due_date: Optional[dt.date] = None


class RecurringInvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    amount: float
    frequency: str
    start_date: dt.date
    end_date: Optional[dt.date] = None
    next_due_date: dt.date
    status: str
    created_at: Optional[dt.datetime] = None
    customer: Optional[CustomerBrief] = None
