"""Celery application and the beat schedule for the automation rules.

Run with::

    celery -A erp.celery_app worker --beat --loglevel=info
"""

from celery import Celery, signals
from celery.schedules import crontab

from erp.common.logging_config import setup_logging
from erp.config import settings

TASKS_MODULE = "erp.automation.tasks"

celery_app = Celery(
    "erp",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[TASKS_MODULE],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.SCHEDULER_TIMEZONE,
    enable_utc=True,
    result_expires=3600,
)

celery_app.conf.beat_schedule = {
    "monthly-payroll": {
        "task": f"{TASKS_MODULE}.process_monthly_payroll",
        "schedule": crontab(minute=0, hour=6, day_of_month=1),
    },
    "recurring-invoices": {
        "task": f"{TASKS_MODULE}.process_recurring_invoices",
        "schedule": crontab(minute=0, hour=8),
    },
    "missed-attendance": {
        "task": f"{TASKS_MODULE}.check_missed_attendance",
        "schedule": crontab(minute=0, hour=9),
    },
    "low-stock": {
        "task": f"{TASKS_MODULE}.check_low_stock",
        "schedule": crontab(minute=0, hour=10),
    },
    "overdue-invoices": {
        "task": f"{TASKS_MODULE}.check_overdue_invoices",
        "schedule": crontab(minute=0, hour=11),
    },
    "late-tasks": {
        "task": f"{TASKS_MODULE}.check_late_tasks",
        "schedule": crontab(minute=0, hour=14),
    },
}


@signals.setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    setup_logging()
