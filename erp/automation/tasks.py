"""Celery tasks — one per automation rule.

Each task opens its own session on a worker engine and runs the rule on a
fresh event loop. Failures are logged by the service; tasks never retry.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from erp.automation.service import AutomationService
from erp.celery_app import celery_app
from erp.common.dates import zone_clock
from erp.config import settings
from erp.notifications.service import EmailService
from erp.notifications.transport import SMTPTransport

logger = logging.getLogger(__name__)

# Separate engine for the worker; connections never outlive a task's loop.
worker_engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)

worker_session_factory = async_sessionmaker(
    worker_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def run_async_task(coro):
    """Run *coro* to completion on a new event loop."""
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)
    finally:
        asyncio.set_event_loop(None)
        loop.close()


async def _run(rule: str) -> int:
    clock = zone_clock(settings.SCHEDULER_TIMEZONE)
    async with worker_session_factory() as db:
        email_service = EmailService(
            db, SMTPTransport.from_settings(settings), sender=settings.mail_sender, clock=clock,
        )
        return await AutomationService(db, email_service, clock=clock).run_rule(rule)


def run_rule(rule: str) -> int:
    processed = run_async_task(_run(rule))
    logger.info("Scheduled rule %s finished: %d processed", rule, processed)
    return processed


@celery_app.task(name=f"{__name__}.check_missed_attendance")
def check_missed_attendance() -> int:
    return run_rule("missed_attendance")


@celery_app.task(name=f"{__name__}.check_low_stock")
def check_low_stock() -> int:
    return run_rule("low_stock")


@celery_app.task(name=f"{__name__}.check_overdue_invoices")
def check_overdue_invoices() -> int:
    return run_rule("overdue_invoices")


@celery_app.task(name=f"{__name__}.check_late_tasks")
def check_late_tasks() -> int:
    return run_rule("late_tasks")


@celery_app.task(name=f"{__name__}.process_monthly_payroll")
def process_monthly_payroll() -> int:
    return run_rule("monthly_payroll")


@celery_app.task(name=f"{__name__}.process_recurring_invoices")
def process_recurring_invoices() -> int:
    return run_rule("recurring_invoices")
