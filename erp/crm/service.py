"""CRM service layer — customers, leads and the sales pipeline."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.common.exceptions import NotFoundException
from erp.common.filters import apply_filters, apply_search
from erp.crm.models import Customer
from erp.crm.schemas import PipelineOut
from erp.projects.models import Project, Task


def pipeline_stage(task_count: int) -> str:
    """Bucket a project by how many tasks it has."""
    if task_count == 0:
        return "prospects"
    if task_count < 3:
        return "qualified"
    if task_count < 5:
        return "proposal"
    if task_count < 7:
        return "negotiation"
    return "closed"


class CustomerService:
    """Async CRUD for customers."""

    _LOAD = (selectinload(Customer.projects), selectinload(Customer.invoices))

    @staticmethod
    async def list_customers(
        db: AsyncSession,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Customer]:
        query = select(Customer).options(*CustomerService._LOAD)
        query = apply_filters(query, Customer, {"status": status})
        query = apply_search(query, Customer, search, ["name", "email", "company"])
        result = await db.execute(query.order_by(Customer.name, Customer.id))
        return result.scalars().all()

    @staticmethod
    async def get_customer(db: AsyncSession, customer_id: int) -> Customer:
        customer = await db.get(
            Customer,
            customer_id,
            options=list(CustomerService._LOAD),
            populate_existing=True,
        )
        if customer is None:
            raise NotFoundException("Customer", customer_id)
        return customer

    @staticmethod
    async def create_customer(db: AsyncSession, data: dict[str, Any]) -> Customer:
        customer = Customer(**data)
        db.add(customer)
        await db.flush()
        return await CustomerService.get_customer(db, customer.id)

    @staticmethod
    async def update_customer(
        db: AsyncSession, customer_id: int, data: dict[str, Any],
    ) -> Customer:
        customer = await CustomerService.get_customer(db, customer_id)
        for key, value in data.items():
            setattr(customer, key, value)
        await db.flush()
        return await CustomerService.get_customer(db, customer_id)

    @staticmethod
    async def delete_customer(db: AsyncSession, customer_id: int) -> None:
        customer = await CustomerService.get_customer(db, customer_id)
        await db.delete(customer)
        await db.flush()

    @staticmethod
    async def get_pipeline(db: AsyncSession) -> PipelineOut:
        result = await db.execute(
            select(Project.id, func.count(Task.id))
            .outerjoin(Task, Task.project_id == Project.id)
            .group_by(Project.id)
        )
        counts: dict[str, int] = {}
        for _, task_count in result.all():
            stage = pipeline_stage(task_count)
            counts[stage] = counts.get(stage, 0) + 1
        return PipelineOut(**counts)
