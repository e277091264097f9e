"""Project service layer — projects, tasks and derived progress."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.common.constants import TaskStatus
from erp.common.exceptions import NotFoundException
from erp.crm.models import Customer
from erp.hr.models import Employee
from erp.projects.models import Project, Task

TEAM_PREVIEW_SIZE = 3


# ── Derived fields ──────────────────────────────────────────────────

def project_progress(tasks: Sequence[Task]) -> int:
    """Percentage of completed tasks, rounded; 0 for an empty project."""
    if not tasks:
        return 0
    completed = sum(1 for t in tasks if t.status == TaskStatus.completed.value)
    return round(completed / len(tasks) * 100)


def project_status(task_count: int, progress: int) -> str:
    if task_count == 0:
        return "planning"
    if progress == 100:
        return "completed"
    if progress > 50:
        return "in-progress"
    return "active"


def project_team(tasks: Sequence[Task]) -> list[str]:
    """First few distinct assignee names, in task order."""
    team: list[str] = []
    for task in tasks:
        if task.assigned_to is None:
            continue
        name = task.assigned_to.full_name
        if name not in team:
            team.append(name)
        if len(team) == TEAM_PREVIEW_SIZE:
            break
    return team


# ═════════════════════════════════════════════════════════════════════
# ProjectService
# ═════════════════════════════════════════════════════════════════════


class ProjectService:

    _LOAD = (
        selectinload(Project.customer),
        selectinload(Project.tasks).selectinload(Task.assigned_to),
    )

    @staticmethod
    async def list_projects(
        db: AsyncSession, customer_id: Optional[int] = None,
    ) -> Sequence[Project]:
        query = select(Project).options(*ProjectService._LOAD)
        if customer_id is not None:
            query = query.where(Project.customer_id == customer_id)
        result = await db.execute(query.order_by(Project.created_at.desc(), Project.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def get_project(db: AsyncSession, project_id: int) -> Project:
        project = await db.get(
            Project,
            project_id,
            options=list(ProjectService._LOAD),
            populate_existing=True,
        )
        if project is None:
            raise NotFoundException("Project", project_id)
        return project

    @staticmethod
    async def create_project(db: AsyncSession, data: dict[str, Any]) -> Project:
        await ProjectService._require_customer(db, data["customer_id"])
        project = Project(**data)
        db.add(project)
        await db.flush()
        return await ProjectService.get_project(db, project.id)

    @staticmethod
    async def update_project(
        db: AsyncSession, project_id: int, data: dict[str, Any],
    ) -> Project:
        project = await ProjectService.get_project(db, project_id)
        if data.get("customer_id") is not None:
            await ProjectService._require_customer(db, data["customer_id"])
        for key, value in data.items():
            setattr(project, key, value)
        await db.flush()
        return await ProjectService.get_project(db, project_id)

    @staticmethod
    async def delete_project(db: AsyncSession, project_id: int) -> None:
        project = await ProjectService.get_project(db, project_id)
        await db.delete(project)
        await db.flush()

    # ── Tasks ───────────────────────────────────────────────────────

    @staticmethod
    async def list_tasks(db: AsyncSession, project_id: int) -> Sequence[Task]:
        await ProjectService.get_project(db, project_id)
        result = await db.execute(
            select(Task)
            .options(selectinload(Task.assigned_to))
            .where(Task.project_id == project_id)
            .order_by(Task.id)
        )
        return result.scalars().all()

    @staticmethod
    async def create_task(db: AsyncSession, project_id: int, data: dict[str, Any]) -> Task:
        await ProjectService.get_project(db, project_id)
        assignee = data.get("assigned_to_id")
        if assignee is not None and await db.get(Employee, assignee) is None:
            raise NotFoundException("Employee", assignee)

        task = Task(project_id=project_id, **data)
        db.add(task)
        await db.flush()
        return await db.get(
            Task, task.id, options=[selectinload(Task.assigned_to)], populate_existing=True,
        )

    @staticmethod
    async def _require_customer(db: AsyncSession, customer_id: int) -> None:
        if await db.get(Customer, customer_id) is None:
            raise NotFoundException("Customer", customer_id)
