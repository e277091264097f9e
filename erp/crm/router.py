"""CRM router — customers, leads and the sales pipeline.

Routes:
    /customers              — List, create customers
    /customers/{id}         — Get, update, delete a customer
    /customers/{id}/status  — Change a customer's status
    /leads                  — Customers as leads (converted once they have a project)
    /pipeline               — Projects bucketed by task count
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from erp.auth.dependencies import get_current_user
from erp.crm.models import Customer
from erp.crm.schemas import (
    CustomerCreate,
    CustomerOut,
    CustomerStatusUpdate,
    CustomerUpdate,
    LeadOut,
    PipelineOut,
)
from erp.crm.service import CustomerService
from erp.database import get_db

router = APIRouter(prefix="", tags=["crm"], dependencies=[Depends(get_current_user)])


def _customer_out(customer: Customer) -> CustomerOut:
    return CustomerOut(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        phone=customer.phone or "",
        company=customer.company or customer.name,
        status=customer.status,
        notes=customer.notes or "",
        total_projects=len(customer.projects),
        total_invoices=len(customer.invoices),
        total_revenue=sum(inv.amount for inv in customer.invoices),
        created_at=customer.created_at,
    )


# ── Customers ───────────────────────────────────────────────────────

@router.get("/customers", response_model=list[CustomerOut])
async def list_customers(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Name, email or company"),
    db: AsyncSession = Depends(get_db),
):
    customers = await CustomerService.list_customers(db, status=status, search=search)
    return [_customer_out(c) for c in customers]


@router.get("/customers/{customer_id}", response_model=CustomerOut)
async def get_customer(customer_id: int, db: AsyncSession = Depends(get_db)):
    return _customer_out(await CustomerService.get_customer(db, customer_id))


@router.post("/customers", response_model=CustomerOut, status_code=201)
async def create_customer(body: CustomerCreate, db: AsyncSession = Depends(get_db)):
    return _customer_out(await CustomerService.create_customer(db, body.model_dump()))


@router.put("/customers/{customer_id}", response_model=CustomerOut)
async def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
):
    customer = await CustomerService.update_customer(
        db, customer_id, body.model_dump(exclude_unset=True),
    )
    return _customer_out(customer)


@router.delete("/customers/{customer_id}", status_code=204)
async def delete_customer(customer_id: int, db: AsyncSession = Depends(get_db)):
    await CustomerService.delete_customer(db, customer_id)
    return Response(status_code=204)


@router.patch("/customers/{customer_id}/status", response_model=CustomerOut)
async def update_customer_status(
    customer_id: int,
    body: CustomerStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    customer = await CustomerService.update_customer(db, customer_id, {"status": body.status})
    return _customer_out(customer)


# ── Sales ───────────────────────────────────────────────────────────

@router.get("/leads", response_model=list[LeadOut])
async def list_leads(db: AsyncSession = Depends(get_db)):
    return [
        LeadOut(
            id=c.id,
            name=c.name,
            email=c.email,
            phone=c.phone or "",
            company=c.company or c.name,
            status="converted" if c.projects else "prospect",
            created_at=c.created_at,
        )
        for c in await CustomerService.list_customers(db)
    ]


@router.get("/pipeline", response_model=PipelineOut)
async def sales_pipeline(db: AsyncSession = Depends(get_db)):
    return await CustomerService.get_pipeline(db)
