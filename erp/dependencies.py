"""Shared FastAPI dependencies — explicit construction of the service graph.

Tests override ``get_mail_transport`` (and ``get_db``) through
``app.dependency_overrides``. Every service sees "today" in
``SCHEDULER_TIMEZONE`` so manual triggers agree with the beat schedule.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from erp.automation.service import AutomationService
from erp.common.dates import Clock, zone_clock
from erp.config import settings
from erp.database import get_db
from erp.insights.service import InsightsService
from erp.notifications.service import EmailService
from erp.notifications.transport import MailTransport, SMTPTransport


def get_clock() -> Clock:
    return zone_clock(settings.SCHEDULER_TIMEZONE)


def get_mail_transport() -> MailTransport:
    return SMTPTransport.from_settings(settings)


async def get_email_service(
    db: AsyncSession = Depends(get_db),
    transport: MailTransport = Depends(get_mail_transport),
    clock: Clock = Depends(get_clock),
) -> EmailService:
    return EmailService(db, transport, sender=settings.mail_sender, clock=clock)


async def get_automation_service(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    clock: Clock = Depends(get_clock),
) -> AutomationService:
    return AutomationService(db, email_service, clock=clock)


async def get_insights_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> InsightsService:
    return InsightsService(db, clock=clock)
