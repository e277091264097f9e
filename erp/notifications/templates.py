"""Built-in email templates, upserted by name at startup."""

from __future__ import annotations

from typing import Any

PAYROLL_NOTIFICATION = "payroll_notification"
INVOICE_REMINDER = "invoice_reminder"
LOW_STOCK_ALERT = "low_stock_alert"
TASK_REMINDER = "task_reminder"
ATTENDANCE_REMINDER = "attendance_reminder"


DEFAULT_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": PAYROLL_NOTIFICATION,
        "subject": "Your Payroll Statement - {{ month }} {{ year }}",
        "body": """
<h2>Payroll Statement</h2>
<p>Dear {{ employeeName }},</p>
<p>Your payroll for {{ month }} {{ year }} has been processed.</p>
<div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
  <h3>Payroll Summary</h3>
  <p><strong>Base Salary:</strong> ${{ baseSalary }}</p>
  <p><strong>Overtime:</strong> ${{ overtime }}</p>
  <p><strong>Bonuses:</strong> ${{ bonuses }}</p>
  <p><strong>Deductions:</strong> ${{ deductions }}</p>
  <hr>
  <p><strong>Net Pay:</strong> ${{ netPay }}</p>
</div>
<p>Thank you for your hard work!</p>
""",
        "variables": [
            "employeeName", "month", "year", "baseSalary",
            "overtime", "bonuses", "deductions", "netPay",
        ],
    },
    {
        "name": INVOICE_REMINDER,
        "subject": "Invoice Reminder - {{ invoiceNumber }}",
        "body": """
<h2>Invoice Reminder</h2>
<p>Dear {{ customerName }},</p>
<p>This is a friendly reminder about your outstanding invoice.</p>
<div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
  <h3>Invoice Details</h3>
  <p><strong>Invoice #:</strong> {{ invoiceNumber }}</p>
  <p><strong>Amount:</strong> ${{ amount }}</p>
  <p><strong>Due Date:</strong> {{ dueDate }}</p>
  <p><strong>Days Overdue:</strong> {{ daysOverdue }}</p>
</div>
<p>Please process this payment at your earliest convenience.</p>
""",
        "variables": ["customerName", "invoiceNumber", "amount", "dueDate", "daysOverdue"],
    },
    {
        "name": LOW_STOCK_ALERT,
        "subject": "Low Stock Alert - {{ productName }}",
        "body": """
<h2>Low Stock Alert</h2>
<p>The following product is running low on stock:</p>
<div style="background: #fff3cd; padding: 20px; border-radius: 8px; margin: 20px 0; border-left: 4px solid #ffc107;">
  <h3>{{ productName }}</h3>
  <p><strong>Current Stock:</strong> {{ currentStock }}</p>
  <p><strong>Minimum Threshold:</strong> {{ minThreshold }}</p>
  <p><strong>SKU:</strong> {{ sku }}</p>
</div>
<p>Please reorder this item soon to avoid stockouts.</p>
""",
        "variables": ["productName", "currentStock", "minThreshold", "sku"],
    },
    {
        "name": TASK_REMINDER,
        "subject": "Task Reminder - {{ taskName }}",
        "body": """
<h2>Task Reminder</h2>
<p>Dear {{ employeeName }},</p>
<p>This is a reminder about your upcoming task:</p>
<div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
  <h3>{{ taskName }}</h3>
  <p><strong>Project:</strong> {{ projectName }}</p>
  <p><strong>Due Date:</strong> {{ dueDate }}</p>
  <p><strong>Priority:</strong> {{ priority }}</p>
  <p><strong>Description:</strong> {{ description }}</p>
</div>
<p>Please ensure this task is completed on time.</p>
""",
        "variables": [
            "employeeName", "taskName", "projectName", "dueDate", "priority", "description",
        ],
    },
    {
        "name": ATTENDANCE_REMINDER,
        "subject": "Attendance Reminder",
        "body": """
<h2>Attendance Reminder</h2>
<p>Dear {{ employeeName }},</p>
<p>We noticed you haven't checked in today. Please remember to:</p>
<ul>
  <li>Check in when you arrive at work</li>
  <li>Check out when you leave</li>
  <li>Update your time entries for any breaks</li>
</ul>
<p>If you're having trouble with the system, please contact HR.</p>
""",
        "variables": ["employeeName"],
    },
]
