"""Notification router — email templates and the delivery log.

Mounted under ``/api/automation`` next to the automation routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from erp.auth.dependencies import get_current_user, require_role
from erp.common.constants import ADMIN_ROLE
from erp.dependencies import get_email_service
from erp.notifications.schemas import EmailLogOut, EmailTemplateOut, EmailTemplateUpsert
from erp.notifications.service import EmailService

router = APIRouter(prefix="", tags=["notifications"])


@router.get(
    "/email-templates",
    response_model=list[EmailTemplateOut],
    dependencies=[Depends(get_current_user)],
)
async def list_email_templates(service: EmailService = Depends(get_email_service)):
    return await service.list_templates()


@router.post(
    "/email-templates",
    response_model=EmailTemplateOut,
    dependencies=[Depends(require_role(ADMIN_ROLE))],
)
async def save_email_template(
    body: EmailTemplateUpsert,
    service: EmailService = Depends(get_email_service),
):
    return await service.upsert_template(**body.model_dump())


@router.get(
    "/email-logs",
    response_model=list[EmailLogOut],
    dependencies=[Depends(get_current_user)],
)
async def list_email_logs(service: EmailService = Depends(get_email_service)):
    return await service.list_logs(limit=100)
