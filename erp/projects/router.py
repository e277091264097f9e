"""Projects router.

Routes:
    /               — List, create projects
    /{id}           — Get, update, delete a project
    /{id}/tasks     — List, create tasks of a project
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from erp.auth.dependencies import get_current_user
from erp.database import get_db
from erp.projects.models import Project, Task
from erp.projects.schemas import ProjectCreate, ProjectOut, ProjectUpdate, TaskCreate, TaskOut
from erp.projects.service import (
    ProjectService,
    project_progress,
    project_status,
    project_team,
)

router = APIRouter(prefix="", tags=["projects"], dependencies=[Depends(get_current_user)])


def _project_out(project: Project) -> ProjectOut:
    progress = project_progress(project.tasks)
    return ProjectOut(
        id=project.id,
        name=project.name,
        customer_id=project.customer_id,
        customer=project.customer.name,
        status=project_status(len(project.tasks), progress),
        progress=progress,
        start_date=project.start_date,
        end_date=project.end_date,
        budget=project.budget or 0,
        team=project_team(project.tasks),
        priority=project.priority,
        description=project.description or "",
    )


def _task_out(task: Task) -> TaskOut:
    return TaskOut(
        id=task.id,
        name=task.name,
        status=task.status,
        assigned_to_id=task.assigned_to_id,
        assigned_to=task.assigned_to.full_name if task.assigned_to else "Unassigned",
        due_date=task.due_date,
        priority=task.priority,
        description=task.description or "",
    )


# ── Projects ────────────────────────────────────────────────────────

@router.get("", response_model=list[ProjectOut])
async def list_projects(
    customer_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return [_project_out(p) for p in await ProjectService.list_projects(db, customer_id)]


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(project_id: int, db: AsyncSession = Depends(get_db)):
    return _project_out(await ProjectService.get_project(db, project_id))


@router.post("", response_model=ProjectOut, status_code=201)
async def create_project(body: ProjectCreate, db: AsyncSession = Depends(get_db)):
    return _project_out(await ProjectService.create_project(db, body.model_dump()))


@router.put("/{project_id}", response_model=ProjectOut)
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
):
    project = await ProjectService.update_project(
        db, project_id, body.model_dump(exclude_unset=True),
    )
    return _project_out(project)


@router.delete("/{project_id}", status_code=204)
async def delete_project(project_id: int, db: AsyncSession = Depends(get_db)):
    await ProjectService.delete_project(db, project_id)
    return Response(status_code=204)


# ── Tasks ───────────────────────────────────────────────────────────

@router.get("/{project_id}/tasks", response_model=list[TaskOut])
async def list_tasks(project_id: int, db: AsyncSession = Depends(get_db)):
    return [_task_out(t) for t in await ProjectService.list_tasks(db, project_id)]


@router.post("/{project_id}/tasks", response_model=TaskOut, status_code=201)
async def create_task(
    project_id: int,
    body: TaskCreate,
    db: AsyncSession = Depends(get_db),
):
    data = body.model_dump()
    data["status"] = body.status.value
    return _task_out(await ProjectService.create_task(db, project_id, data))
