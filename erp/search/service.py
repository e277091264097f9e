"""Global search across employees, customers, tasks, products and projects."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.common.filters import apply_search
from erp.crm.models import Customer
from erp.hr.models import Employee
from erp.inventory.models import Product
from erp.projects.models import Project, Task
from erp.search.schemas import SearchResult

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 20


def rank_results(results: list[SearchResult], term: str) -> list[SearchResult]:
    """Title/subtitle matches first, otherwise keep the original order."""
    needle = term.lower()

    def misses(result: SearchResult) -> bool:
        return needle not in result.title.lower() and needle not in result.subtitle.lower()

    return sorted(results, key=misses)


class SearchService:

    @staticmethod
    async def search(db: AsyncSession, query: str) -> list[SearchResult]:
        term = (query or "").strip()
        if len(term) < MIN_QUERY_LENGTH:
            return []

        results: list[SearchResult] = []

        employees = await db.execute(
            apply_search(select(Employee), Employee, term, ["first_name", "last_name", "email"])
            .order_by(Employee.id)
        )
        for emp in employees.scalars().all():
            results.append(
                SearchResult(type="Employee", id=emp.id, title=emp.full_name, subtitle=emp.email)
            )

        customers = await db.execute(
            apply_search(select(Customer), Customer, term, ["name", "email"]).order_by(Customer.id)
        )
        for cust in customers.scalars().all():
            results.append(
                SearchResult(
                    type="Customer",
                    id=cust.id,
                    title=cust.name,
                    subtitle=cust.company or "Individual",
                    email=cust.email,
                )
            )

        tasks = await db.execute(
            apply_search(
                select(Task).options(selectinload(Task.project)), Task, term, ["name", "description"],
            ).order_by(Task.id)
        )
        for task in tasks.scalars().all():
            results.append(
                SearchResult(
                    type="Task",
                    id=task.id,
                    title=task.name,
                    subtitle=task.project.name if task.project else "No Project",
                    description=task.description,
                )
            )

        products = await db.execute(
            apply_search(
                select(Product).options(selectinload(Product.stock)), Product, term, ["name", "sku"],
            ).order_by(Product.id)
        )
        for prod in products.scalars().all():
            quantity = prod.total_stock
            results.append(
                SearchResult(
                    type="Product",
                    id=prod.id,
                    title=prod.name,
                    subtitle=prod.sku,
                    status="In Stock" if quantity > 0 else "Out of Stock",
                    stock_quantity=quantity,
                )
            )

        projects = await db.execute(
            apply_search(
                select(Project).options(selectinload(Project.customer)), Project, term, ["name"],
            ).order_by(Project.id)
        )
        for proj in projects.scalars().all():
            results.append(
                SearchResult(
                    type="Project",
                    id=proj.id,
                    title=proj.name,
                    subtitle=proj.customer.name if proj.customer else "Internal Project",
                )
            )

        return rank_results(results, term)[:MAX_RESULTS]
