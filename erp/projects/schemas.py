"""Project Pydantic schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field

from erp.common.constants import TaskStatus


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    customer_id: int
    description: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    budget: Optional[float] = Field(None, ge=0)
    priority: str = Field("medium", max_length=20)


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    customer_id: Optional[int] = None
    description: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    budget: Optional[float] = Field(None, ge=0)
    priority: Optional[str] = Field(None, max_length=20)


class ProjectOut(BaseModel):
    id: int
    name: str
    customer_id: int
    customer: str
    status: str
    progress: int
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    budget: float = 0
    team: List[str] = []
    priority: str
    description: str = ""


class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    assigned_to_id: Optional[int] = None
    status: TaskStatus = TaskStatus.pending
    description: Optional[str] = None
    due_date: Optional[dt.date] = None
    priority: str = Field("medium", max_length=20)


class TaskOut(BaseModel):
    id: int
    name: str
    status: str
    assigned_to_id: Optional[int] = None
    assigned_to: str
    due_date: Optional[dt.date] = None
    priority: str
    description: str = ""
