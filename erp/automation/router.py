"""Automation router — alerts, manual rule triggers, recurring billing and
the insight endpoints used by the automation dashboard.

Routes:
    /alerts                          — Active alerts, newest first
    /alerts/{id}/resolve             — Resolve an alert
    /insights/*                      — Forecast, profitability, KPIs, performance, inventory
    /trigger/{rule}                  — Run one rule now (admin only)
    /recurring-invoices              — List, create recurring invoices
    /recurring-invoices/{id}         — Pause/resume or reschedule
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from erp.accounting.schemas import (
    RecurringInvoiceCreate,
    RecurringInvoiceOut,
    RecurringInvoiceUpdate,
)
from erp.accounting.service import RecurringInvoiceService
from erp.auth.dependencies import get_current_user, require_role
from erp.auth.models import User
from erp.automation.schemas import AlertOut, TriggerResponse, TriggerResult
from erp.automation.service import AlertService, AutomationService
from erp.common.constants import ADMIN_ROLE
from erp.database import get_db
from erp.dependencies import get_automation_service, get_insights_service
from erp.insights.schemas import (
    CashFlowProjection,
    CustomerProfitability,
    EmployeePerformance,
    InventoryInsights,
    KPIAnalysis,
)
from erp.insights.service import InsightsService

router = APIRouter(prefix="", tags=["automation"])

# URL segment → (rule name, success message)
TRIGGERS: dict[str, tuple[str, str]] = {
    "payroll": ("monthly_payroll", "Payroll generation triggered successfully"),
    "recurring-invoices": ("recurring_invoices", "Recurring invoices processed successfully"),
    "attendance-check": ("missed_attendance", "Attendance check triggered successfully"),
    "low-stock-check": ("low_stock", "Low stock check triggered successfully"),
    "overdue-invoices": ("overdue_invoices", "Overdue invoice check triggered successfully"),
    "late-tasks": ("late_tasks", "Late task check triggered successfully"),
}


# ═════════════════════════════════════════════════════════════════════
# Alerts
# ═════════════════════════════════════════════════════════════════════


@router.get("/alerts", response_model=list[AlertOut])
async def list_alerts(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await AlertService.list_active(db)


@router.patch("/alerts/{alert_id}/resolve", response_model=AlertOut)
async def resolve_alert(
    alert_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await AlertService.resolve(db, alert_id, current_user.id)


# ═════════════════════════════════════════════════════════════════════
# Insights
# ═════════════════════════════════════════════════════════════════════


@router.get(
    "/insights/cash-flow-forecast",
    response_model=list[CashFlowProjection],
    dependencies=[Depends(get_current_user)],
)
async def cash_flow_forecast(
    months: int = Query(6, ge=1, le=24),
    service: InsightsService = Depends(get_insights_service),
):
    return await service.get_cash_flow_forecast(months)


@router.get(
    "/insights/profitable-customers",
    response_model=list[CustomerProfitability],
    dependencies=[Depends(get_current_user)],
)
async def profitable_customers(
    limit: int = Query(10, ge=1, le=100),
    service: InsightsService = Depends(get_insights_service),
):
    return await service.get_most_profitable_customers(limit)


@router.get(
    "/insights/kpi-analysis",
    response_model=KPIAnalysis,
    dependencies=[Depends(get_current_user)],
)
async def kpi_analysis(service: InsightsService = Depends(get_insights_service)):
    return await service.get_kpi_analysis()


@router.get(
    "/insights/employee-performance",
    response_model=list[EmployeePerformance],
    dependencies=[Depends(get_current_user)],
)
async def employee_performance(service: InsightsService = Depends(get_insights_service)):
    return await service.get_employee_performance_insights()


@router.get(
    "/insights/inventory",
    response_model=InventoryInsights,
    dependencies=[Depends(get_current_user)],
)
async def inventory_insights(service: InsightsService = Depends(get_insights_service)):
    return await service.get_inventory_insights()


# ═════════════════════════════════════════════════════════════════════
# Manual triggers
# ═════════════════════════════════════════════════════════════════════


def _trigger_route(rule: str, message: str):
    async def trigger(
        service: AutomationService = Depends(get_automation_service),
    ) -> TriggerResponse:
        processed = await service.run_rule(rule)
        return TriggerResponse(message=message, data=TriggerResult(processed=processed))

    trigger.__name__ = f"trigger_{rule}"
    return trigger


for _segment, (_rule, _message) in TRIGGERS.items():
    router.add_api_route(
        f"/trigger/{_segment}",
        _trigger_route(_rule, _message),
        methods=["POST"],
        response_model=TriggerResponse,
        dependencies=[Depends(require_role(ADMIN_ROLE))],
    )


# ═════════════════════════════════════════════════════════════════════
# Recurring invoices
# ═════════════════════════════════════════════════════════════════════


@router.post("/recurring-invoices", response_model=RecurringInvoiceOut, status_code=201)
async def create_recurring_invoice(
    body: RecurringInvoiceCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await RecurringInvoiceService.create(db, **body.model_dump())


@router.get("/recurring-invoices", response_model=list[RecurringInvoiceOut])
async def list_recurring_invoices(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await RecurringInvoiceService.list_all(db)


@router.patch("/recurring-invoices/{recurring_id}", response_model=RecurringInvoiceOut)
async def update_recurring_invoice(
    recurring_id: int,
    body: RecurringInvoiceUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await RecurringInvoiceService.update(
        db,
        recurring_id,
        status=body.status.value if body.status else None,
        next_due_date=body.next_due_date,
    )
