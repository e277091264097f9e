"""Import every ORM module so ``Base.metadata`` and string relationships resolve."""

from erp.accounting.models import Invoice, RecurringInvoice, Transaction
from erp.auth.models import Role, User
from erp.automation.models import Alert
from erp.crm.models import Customer
from erp.hr.models import Attendance, Department, Employee, Leave, Payroll, TimeEntry
from erp.inventory.models import Product, Stock, Warehouse
from erp.notifications.models import EmailLog, EmailTemplate
from erp.projects.models import Project, Task

__all__ = [
    "Alert",
    "Attendance",
    "Customer",
    "Department",
    "EmailLog",
    "EmailTemplate",
    "Employee",
    "Invoice",
    "Leave",
    "Payroll",
    "Product",
    "Project",
    "RecurringInvoice",
    "Role",
    "Stock",
    "Task",
    "TimeEntry",
    "Transaction",
    "User",
    "Warehouse",
]
