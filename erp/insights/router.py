"""Insights router — read-only business analytics.

Routes:
    /kpi                    — Month-over-month KPIs
    /cashflow               — Cash-flow projection
    /recommendations        — Rule-based suggestions
    /trends/{metric}        — Six-month series for revenue/expenses/profit/customers
    /profitable-customers   — Customers ranked by margin
    /employee-performance   — Hours, attendance and productivity per employee
    /inventory              — Stock value and low-stock summary
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from erp.auth.dependencies import get_current_user
from erp.dependencies import get_insights_service
from erp.insights.schemas import (
    CashFlowProjection,
    CustomerProfitability,
    EmployeePerformance,
    InventoryInsights,
    KPIAnalysis,
    Recommendation,
    TrendAnalysis,
)
from erp.insights.service import InsightsService

router = APIRouter(prefix="", tags=["insights"], dependencies=[Depends(get_current_user)])


@router.get("/kpi", response_model=KPIAnalysis)
async def kpi(service: InsightsService = Depends(get_insights_service)):
    return await service.get_kpi_analysis()


@router.get("/cashflow", response_model=list[CashFlowProjection])
async def cash_flow(
    months: int = Query(6, ge=1, le=24),
    service: InsightsService = Depends(get_insights_service),
):
    return await service.get_cash_flow_forecast(months)


@router.get("/recommendations", response_model=list[Recommendation])
async def recommendations(service: InsightsService = Depends(get_insights_service)):
    return await service.get_recommendations()


@router.get("/trends/{metric}", response_model=TrendAnalysis)
async def trends(metric: str, service: InsightsService = Depends(get_insights_service)):
    return await service.get_trend_analysis(metric)


@router.get("/profitable-customers", response_model=list[CustomerProfitability])
async def profitable_customers(
    limit: int = Query(10, ge=1, le=100),
    service: InsightsService = Depends(get_insights_service),
):
    return await service.get_most_profitable_customers(limit)


@router.get("/employee-performance", response_model=list[EmployeePerformance])
async def employee_performance(service: InsightsService = Depends(get_insights_service)):
    return await service.get_employee_performance_insights()


@router.get("/inventory", response_model=InventoryInsights)
async def inventory(service: InsightsService = Depends(get_insights_service)):
    return await service.get_inventory_insights()
