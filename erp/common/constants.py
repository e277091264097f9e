"""Enums and constants shared across the ERP modules.

Status columns are stored as plain strings; compare against ``.value``.
"""

from __future__ import annotations

import enum


# ── HR ──────────────────────────────────────────────────────────────

class EmployeeStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class PayrollStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"


# ── Accounting ──────────────────────────────────────────────────────

class InvoiceStatus(str, enum.Enum):
    draft = "draft"
    pending = "pending"
    sent = "sent"
    paid = "paid"
    overdue = "overdue"


class TransactionType(str, enum.Enum):
    income = "income"
    expense = "expense"


class RecurringFrequency(str, enum.Enum):
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"


class RecurringStatus(str, enum.Enum):
    active = "active"
    paused = "paused"
    cancelled = "cancelled"


# ── Projects ────────────────────────────────────────────────────────

class TaskStatus(str, enum.Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


# ── Automation ──────────────────────────────────────────────────────

class AlertType(str, enum.Enum):
    missed_attendance = "missed_attendance"
    low_stock = "low_stock"
    overdue_invoice = "overdue_invoice"
    late_task = "late_task"


class AlertSeverity(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class AlertStatus(str, enum.Enum):
    active = "active"
    resolved = "resolved"


class EmailStatus(str, enum.Enum):
    sent = "sent"
    failed = "failed"


# ── Auth ────────────────────────────────────────────────────────────

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"


# ── Business constants ──────────────────────────────────────────────

STANDARD_MONTHLY_HOURS = 160
OVERTIME_MULTIPLIER = 1.5
WORKING_DAYS_PER_MONTH = 22
INVOICE_PAYMENT_TERMS_DAYS = 30
COGS_RATIO = 0.6
DEFAULT_LOW_STOCK_THRESHOLD = 10
DEFAULT_WAREHOUSE_NAME = "Main Warehouse"

PRODUCT_CATEGORIES = ["Electronics", "Clothing", "Books", "Home & Garden", "Sports"]
